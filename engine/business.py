"""Business income statement waterfall: Gross Profit -> EBITDA -> EBIT -> EBT -> Net Income -> Cash Flow"""
from dataclasses import fields, replace
from typing import Dict, List, Sequence

from config.default_params import DEFAULT_PERIOD_MONTHS
from .models import BusinessMetrics, BusinessPeriod
from .parsing import parse_money, parse_or_default

# Percentages are already scale-free and must not be annualized
_RATIO_FIELDS = {"gross_margin", "net_margin"}


def period_months(period) -> float:
    """Month count used for annualization; blank or non-positive reads as a full year"""
    months = parse_or_default(period.period_months, DEFAULT_PERIOD_MONTHS)
    return months if months > 0 else DEFAULT_PERIOD_MONTHS


def annualization_factor(period) -> float:
    return 12.0 / period_months(period)


def compute_business_metrics(period: BusinessPeriod) -> BusinessMetrics:
    """Calculate the unannualized profitability waterfall for one period"""
    revenue = parse_money(period.revenue)
    cogs = parse_money(period.cogs)
    opex = parse_money(period.operating_expenses)
    rent = parse_money(period.rent_expense)
    officers_comp = parse_money(period.officers_comp)
    depreciation = parse_money(period.depreciation)
    amortization = parse_money(period.amortization)
    section_179 = parse_money(period.section_179)
    interest = parse_money(period.interest)
    taxes = parse_money(period.taxes)
    other_income = parse_money(period.other_income)
    other_expenses = parse_money(period.other_expenses)
    addbacks = parse_money(period.addbacks)

    gross_profit = revenue - cogs
    gross_margin = (gross_profit / revenue) * 100 if revenue > 0 else 0.0

    # Officer compensation is an operating expense here; the DSCR engine adds it back
    ebitda = (revenue + other_income) - cogs - opex - rent - officers_comp - other_expenses + addbacks

    # Section 179 stays below EBIT and only returns as a cash-flow addback
    ebit = ebitda - depreciation - amortization
    ebt = ebit - interest
    net_income = ebt - taxes
    net_margin = (net_income / revenue) * 100 if revenue > 0 else 0.0

    # Pre-financing cash flow: interest is added back
    cash_flow = net_income + depreciation + amortization + section_179 + interest + addbacks

    return BusinessMetrics(
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        gross_margin=gross_margin,
        ebitda=ebitda,
        ebit=ebit,
        ebt=ebt,
        net_income=net_income,
        net_margin=net_margin,
        cash_flow=cash_flow,
        operating_expenses=opex,
        rent_expense=rent,
        officers_comp=officers_comp,
        depreciation=depreciation,
        amortization=amortization,
        section_179=section_179,
        interest=interest,
        taxes=taxes,
        other_income=other_income,
        other_expenses=other_expenses,
        addbacks=addbacks,
    )


def annualize_metrics(metrics: BusinessMetrics, months: float) -> BusinessMetrics:
    """
    Scale every dollar figure by 12 / months

    Apply once, to metrics computed from raw period figures. Margins are
    carried over unchanged.
    """
    factor = 12.0 / months if months > 0 else 1.0
    if factor == 1.0:
        return metrics
    scaled = {
        f.name: getattr(metrics, f.name) * factor
        for f in fields(metrics)
        if f.name not in _RATIO_FIELDS
    }
    return replace(metrics, **scaled)


def ebitda_margin(metrics: BusinessMetrics) -> float:
    return (metrics.ebitda / metrics.revenue) * 100 if metrics.revenue > 0 else 0.0


def m1_taxable_income(period: BusinessPeriod) -> float:
    """Schedule M-1: book income + federal tax expense - excess depreciation + other"""
    return (
        parse_money(period.m1_book_income)
        + parse_money(period.m1_fed_tax_expense)
        - parse_money(period.m1_excess_depr)
        + parse_money(period.m1_other)
    )


def compute_all_business_metrics(periods: Sequence[BusinessPeriod]) -> Dict[str, List[BusinessMetrics]]:
    """Raw and annualized metrics for every period column"""
    raw = [compute_business_metrics(p) for p in periods]
    annualized = [annualize_metrics(m, period_months(p)) for p, m in zip(periods, raw)]
    return {"raw": raw, "annualized": annualized}
