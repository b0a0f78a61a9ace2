"""Personal financial statement metrics and the consolidated global view"""
from typing import Optional, Sequence

from .models import (
    AffiliateMetrics,
    BalanceSheetMetrics,
    Debt,
    GlobalMetrics,
    PersonalAssets,
    PersonalLiabilities,
    PersonalMetrics,
    PersonalPeriod,
)
from .parsing import parse_money, sum_fields

W2_INCOME_FIELDS = ("salary", "bonuses", "investments", "rental_income", "retirement_income", "other_income")
PERSONAL_EXPENSE_FIELDS = ("cost_of_living", "personal_taxes")
LIABILITY_BALANCE_FIELDS = ("credit_cards", "mortgages", "vehicle_loans", "other_liabilities")
LIABILITY_MONTHLY_FIELDS = tuple(f"{name}_monthly" for name in LIABILITY_BALANCE_FIELDS)


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def w2_income(period: PersonalPeriod) -> float:
    return sum_fields(period, W2_INCOME_FIELDS)


def personal_expenses(period: PersonalPeriod) -> float:
    return sum_fields(period, PERSONAL_EXPENSE_FIELDS)


def sched_c_net_income(period: PersonalPeriod) -> float:
    return parse_money(period.sched_c_revenue) - sum_fields(period, ("sched_c_cogs", "sched_c_expenses"))


def sched_c_cash_flow(period: PersonalPeriod) -> float:
    """Schedule C net income with interest, D&A and other addbacks"""
    addbacks = sum_fields(
        period,
        ("sched_c_interest", "sched_c_depreciation", "sched_c_amortization", "sched_c_other"),
    )
    return sched_c_net_income(period) + addbacks


def schedule_e_cash_flow(period: PersonalPeriod) -> float:
    """Rental net income with depreciation and interest added back, plus K-1 income"""
    return (
        parse_money(period.sched_e_rents)
        - parse_money(period.sched_e_expenses)
        + parse_money(period.sched_e_depreciation)
        + parse_money(period.sched_e_interest)
        + parse_money(period.k1_income)
    )


def monthly_liability_payments(liabilities: PersonalLiabilities) -> float:
    return sum_fields(liabilities, LIABILITY_MONTHLY_FIELDS)


def compute_personal_metrics(
    assets: PersonalAssets,
    liabilities: PersonalLiabilities,
    personal_period: Optional[PersonalPeriod],
    debts: Sequence[Debt] = ()
) -> PersonalMetrics:
    """
    Net worth, cash flow and leverage from the personal financial statement

    Existing business debts count toward personal liabilities and monthly
    payments because the guarantor carries them.
    """
    period = personal_period or PersonalPeriod()

    total_assets = sum_fields(assets, PersonalAssets.field_names())
    total_liabilities = (
        sum_fields(liabilities, LIABILITY_BALANCE_FIELDS)
        + sum(parse_money(debt.balance) for debt in debts)
    )
    liquid = parse_money(assets.liquid_assets)

    income = w2_income(period)
    expenses = personal_expenses(period)
    monthly_debt = monthly_liability_payments(liabilities) + sum(parse_money(debt.payment) for debt in debts)

    return PersonalMetrics(
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        net_worth=total_assets - total_liabilities,
        liquid_assets=liquid,
        total_income=income,
        total_expenses=expenses,
        net_cash_flow=income - expenses,
        monthly_debt_payment=monthly_debt,
        annual_debt_service=monthly_debt * 12,
        debt_to_income=_ratio(monthly_debt, income / 12) * 100,
        debt_to_assets=_ratio(total_liabilities, total_assets) * 100,
        savings_rate=_ratio(income - expenses, income) * 100,
        liquidity_ratio=_ratio(liquid, total_liabilities),
        current_ratio=_ratio(total_assets, total_liabilities),
        schedule_e_cash_flow=schedule_e_cash_flow(period),
    )


def compute_global_metrics(
    personal: PersonalMetrics,
    business_bs: Optional[BalanceSheetMetrics],
    affiliate_bs: Sequence[AffiliateMetrics],
    business_net_income: float,
    affiliate_net_income: float,
    dscr: float,
    business_cash: float = 0.0
) -> GlobalMetrics:
    """Consolidate guarantor, operating business and affiliates"""
    business_assets = business_bs.total_assets if business_bs else 0.0
    business_liabilities = business_bs.total_liabilities if business_bs else 0.0

    total_assets = personal.total_assets + business_assets + sum(a.total_assets for a in affiliate_bs)
    total_liabilities = (
        personal.total_liabilities
        + business_liabilities
        + sum(a.total_liabilities for a in affiliate_bs)
    )
    total_income = personal.total_income + business_net_income + affiliate_net_income
    total_expenses = personal.total_expenses

    return GlobalMetrics(
        consolidated_net_worth=total_assets - total_liabilities,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_income=total_income,
        total_expenses=total_expenses,
        debt_to_assets=_ratio(total_liabilities, total_assets) * 100,
        liquidity_ratio=_ratio(personal.liquid_assets + business_cash, total_liabilities),
        current_ratio=_ratio(total_assets, total_liabilities),
        savings_rate=_ratio(total_income - total_expenses, total_income) * 100,
        dscr=dscr,
    )
