"""Period classification: full-year-end, interim and projection columns"""
from typing import List, Optional, Sequence

from dateutil import parser as date_parser

from config.default_params import DAYS_PER_MONTH
from .models import PeriodClassification
from .parsing import parse_money


def period_label(labels: Sequence[str], index: int) -> str:
    """Label for a period column, defaulting to its position"""
    if index < len(labels) and labels[index]:
        return labels[index]
    return f"Period {index + 1}"


def classify_period(period, label: str, index: int) -> PeriodClassification:
    """Classify a single period; unparseable month counts read as 0"""
    months = parse_money(period.period_months)
    lowered = label.lower()
    is_interim = (0 < months < 12) or "interim" in lowered
    is_projection = bool(getattr(period, "is_projection", False)) or "projection" in lowered
    is_fye = months == 12 and not is_interim and not is_projection
    return PeriodClassification(
        index=index,
        months=months,
        label=label,
        is_interim=is_interim,
        is_projection=is_projection,
        is_fye=is_fye,
    )


def classify_periods(periods: Sequence, labels: Sequence[str]) -> List[PeriodClassification]:
    """Classify every period column, preserving order"""
    return [
        classify_period(period, period_label(labels, i), i)
        for i, period in enumerate(periods)
    ]


def find_last_fye_index(classifications: Sequence[PeriodClassification]) -> Optional[int]:
    """Most recent full-year period by column position, None if there is none"""
    fye = [c.index for c in classifications if c.is_fye]
    return max(fye) if fye else None


def find_interim_indices(classifications: Sequence[PeriodClassification]) -> List[int]:
    return [c.index for c in classifications if c.is_interim and not c.is_projection]


def find_projection_indices(classifications: Sequence[PeriodClassification]) -> List[int]:
    return [c.index for c in classifications if c.is_projection]


def find_current_interim_index(classifications: Sequence[PeriodClassification]) -> Optional[int]:
    """Most recent interim period by column position"""
    interim = find_interim_indices(classifications)
    return interim[-1] if interim else None


def infer_period_months(previous_date: str, current_date: str) -> Optional[int]:
    """
    Months covered between two free-text period dates

    Returns None when either date does not parse or the span is not positive.
    """
    if not previous_date or not current_date:
        return None
    try:
        previous = date_parser.parse(previous_date)
        current = date_parser.parse(current_date)
    except (ValueError, OverflowError):
        return None
    months = round((current - previous).days / DAYS_PER_MONTH)
    return months if months > 0 else None
