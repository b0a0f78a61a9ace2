"""Permissive numeric parsing for spreadsheet cell values"""
import math
import re

_NUMERIC_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_money(value) -> float:
    """
    Parse a cell value to a float, treating anything unparseable as 0

    Blank and partially typed cells behave like zeros in a manual spreadsheet.
    A leading numeric prefix is honoured ("12abc" -> 12.0); "$" and thousands
    separators are ignored.

    Args:
        value: String, number or None as stored on an input record

    Returns:
        Finite float, 0.0 when the value has no numeric reading
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    text = str(value).strip().replace("$", "").replace(",", "").replace(" ", "")
    match = _NUMERIC_PREFIX.match(text)
    if not match:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_or_default(value, default: float) -> float:
    """Parse a value, falling back to default when it reads as zero"""
    return parse_money(value) or default


def sum_fields(record, fields) -> float:
    """Sum the parsed values of the named fields on a record"""
    return sum(parse_money(getattr(record, name)) for name in fields)
