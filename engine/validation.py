"""Advisory bounds checks for edited cells"""
import math
import re
from dataclasses import dataclass
from typing import Optional

from config.default_params import FIELD_BOUNDS

_STRICT_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

_MESSAGES = {
    'interest_rate': "Interest rate must be between 0 and 100",
    'term_months': "Term must be between 1 and 600 months",
    'period_months': "Period months must be between 1 and 12",
    'percentage': "Percentage must be between 0 and 100",
    'amount': "Amount cannot be negative",
}


@dataclass(frozen=True)
class FieldValidation:
    is_valid: bool
    error: Optional[str] = None


def validate_financial_field(value, field_type: str) -> FieldValidation:
    """
    Check a typed value against the bounds for its field type

    The engine still computes with permissive parsing; this only drives
    the warning shown next to the cell.
    """
    if field_type not in FIELD_BOUNDS:
        raise ValueError(f"Unknown field type: {field_type!r}")

    text = str(value if value is not None else "").strip().replace("$", "").replace(",", "")
    if not _STRICT_NUMBER.match(text) or not math.isfinite(float(text)):
        return FieldValidation(False, "Must be a valid number")

    number = float(text)
    low, high = FIELD_BOUNDS[field_type]
    if (low is not None and number < low) or (high is not None and number > high):
        return FieldValidation(False, _MESSAGES[field_type])
    return FieldValidation(True)
