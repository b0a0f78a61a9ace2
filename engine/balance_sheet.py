"""Balance sheet aggregates, solvency ratios and working-capital turnover"""
from typing import Dict

from config.default_params import DAYS_IN_YEAR
from .business import annualization_factor
from .models import BalanceSheetMetrics, BalanceSheetPeriod, BusinessPeriod, TurnoverRatios
from .parsing import parse_money, sum_fields

CURRENT_ASSET_FIELDS = ("cash", "accounts_receivable", "inventory", "other_current_assets")
CURRENT_LIABILITY_FIELDS = ("accounts_payable", "accrued_expenses", "short_term_debt", "current_liabilities")


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def compute_balance_sheet_metrics(period: BalanceSheetPeriod) -> BalanceSheetMetrics:
    """Calculate asset/liability totals and solvency ratios for one period"""
    current_assets = sum_fields(period, CURRENT_ASSET_FIELDS)
    # Over-depreciated fixed assets go negative; not clamped
    net_fixed_assets = parse_money(period.real_estate) - parse_money(period.accumulated_depreciation)
    total_assets = current_assets + net_fixed_assets

    current_liabilities = sum_fields(period, CURRENT_LIABILITY_FIELDS)
    long_term_debt = parse_money(period.long_term_debt)
    total_liabilities = current_liabilities + long_term_debt
    equity = total_assets - total_liabilities
    inventory = parse_money(period.inventory)

    return BalanceSheetMetrics(
        current_assets=current_assets,
        net_fixed_assets=net_fixed_assets,
        total_assets=total_assets,
        current_liabilities=current_liabilities,
        long_term_debt=long_term_debt,
        total_liabilities=total_liabilities,
        equity=equity,
        working_capital=current_assets - current_liabilities,
        current_ratio=_ratio(current_assets, current_liabilities),
        quick_ratio=_ratio(current_assets - inventory, current_liabilities),
        # Negative equity reports 0 rather than a negative leverage figure
        debt_to_equity=_ratio(total_liabilities, equity),
        debt_to_assets=_ratio(total_liabilities, total_assets) * 100,
    )


def _days(turnover: float) -> float:
    return DAYS_IN_YEAR / turnover if turnover > 0 else 0.0


def compute_turnover_ratios(
    period: BalanceSheetPeriod,
    annualized_revenue: float,
    annualized_cogs: float
) -> TurnoverRatios:
    """
    AR, inventory and AP turnover with their day counts

    Payables fall back to the other-current-liabilities line when no
    accounts payable figure was entered.
    """
    ar = parse_money(period.accounts_receivable)
    inventory = parse_money(period.inventory)
    payables = parse_money(period.accounts_payable) or parse_money(period.current_liabilities)

    ar_turnover = _ratio(annualized_revenue, ar)
    inventory_turnover = _ratio(annualized_cogs, inventory)
    ap_turnover = _ratio(annualized_cogs, payables)

    ar_days = _days(ar_turnover)
    inventory_days = _days(inventory_turnover)
    ap_days = _days(ap_turnover)

    return TurnoverRatios(
        ar_turnover=ar_turnover,
        ar_days=ar_days,
        inventory_turnover=inventory_turnover,
        inventory_days=inventory_days,
        ap_turnover=ap_turnover,
        ap_days=ap_days,
        cash_conversion_cycle=ar_days + inventory_days - ap_days,
    )


def annualized_values(business_period: BusinessPeriod) -> Dict[str, float]:
    """Annualized revenue and COGS feeding the turnover ratios"""
    factor = annualization_factor(business_period)
    return {
        "revenue": parse_money(business_period.revenue) * factor,
        "cogs": parse_money(business_period.cogs) * factor,
    }


def turnover_for_period(bs_period: BalanceSheetPeriod, business_period: BusinessPeriod) -> TurnoverRatios:
    annual = annualized_values(business_period)
    return compute_turnover_ratios(bs_period, annual["revenue"], annual["cogs"])


def fixed_charge_coverage(ebitda: float, rent_expense: float, debt_service: float) -> float:
    """FCCR = (EBITDA + Rent) / (Debt Service + Rent)"""
    return _ratio(ebitda + rent_expense, debt_service + rent_expense)


def yoy_change(current: float, previous: float) -> Dict:
    """Year-over-year change in percent with a display string"""
    if previous == 0:
        return {
            "change": 100.0 if current > 0 else 0.0,
            "is_positive": current >= 0,
            "formatted": "+∞%" if current > 0 else "0%",
        }
    change = (current - previous) / abs(previous) * 100
    return {
        "change": change,
        "is_positive": change >= 0,
        "formatted": f"{'+' if change >= 0 else ''}{change:.1f}%",
    }


def validate_m1_tie_out(net_income: float, m1_book_income: float, tolerance: float = 1.0) -> Dict:
    """Check that Schedule M-1 book income ties to the computed net income"""
    difference = abs(net_income - m1_book_income)
    is_valid = difference <= tolerance
    warning = None
    if not is_valid:
        warning = (
            f"M-1 Book Income (${m1_book_income:,.0f}) does not tie to calculated "
            f"Net Income (${net_income:,.0f}). Difference: ${difference:,.0f}"
        )
    return {"is_valid": is_valid, "difference": difference, "warning": warning}
