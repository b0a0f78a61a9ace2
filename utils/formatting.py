"""Display formatting for currency, ratios, percentages and day counts."""

from config.default_params import DSCR_BREAKEVEN, DSCR_TARGET


def format_currency(value):
    """Whole dollars with thousands separators; negatives in parentheses."""
    if value < 0:
        return f"(${abs(value):,.0f})"
    return f"${value:,.0f}"


def format_ratio(value):
    return f"{value:.2f}x"


def format_percent(value):
    return f"{value:.1f}%"


def format_days(value):
    return f"{round(value):,} days"


def dscr_status(dscr):
    """Traffic-light status for a coverage ratio."""
    if dscr >= DSCR_TARGET:
        return "strong"
    if dscr >= DSCR_BREAKEVEN:
        return "adequate"
    return "insufficient"


def dscr_color(dscr):
    return {"strong": "green", "adequate": "orange", "insufficient": "red"}[dscr_status(dscr)]
