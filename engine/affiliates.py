"""Affiliate entity P&L and balance sheet in the business format"""
from typing import List, Sequence

from .business import annualization_factor
from .models import AffiliateBalancePeriod, AffiliateEntity, AffiliateIncomePeriod, AffiliateMetrics
from .parsing import parse_money, sum_fields

_OPERATING_DEDUCTIONS = ("officers_comp", "rent_expense", "operating_expenses")
_NON_CASH = ("depreciation", "amortization", "section_179")


def compute_affiliate_metrics(entity: AffiliateEntity, index: int) -> AffiliateMetrics:
    """
    P&L and balance sheet totals for one affiliate period column

    Missing columns read as empty periods. Unlike the operating business,
    Section 179 is deducted above EBIT here; EBT subtracts every deduction
    line from total income.
    """
    income = entity.income_periods[index] if index < len(entity.income_periods) else AffiliateIncomePeriod()
    balance = entity.balance_periods[index] if index < len(entity.balance_periods) else AffiliateBalancePeriod()

    gross_profit = parse_money(income.revenue) - parse_money(income.cogs)
    total_income = gross_profit + parse_money(income.other_income)

    ebitda = total_income - sum_fields(income, _OPERATING_DEDUCTIONS)
    non_cash = sum_fields(income, _NON_CASH)
    ebit = ebitda - non_cash
    ebt = ebit - parse_money(income.interest) - parse_money(income.other_expenses)
    net_income = ebt - parse_money(income.taxes)
    cash_flow = net_income + non_cash + parse_money(income.addbacks)

    total_assets = (
        sum_fields(balance, ("cash", "accounts_receivable", "inventory"))
        + parse_money(balance.real_estate)
        - parse_money(balance.accumulated_depreciation)
    )
    total_liabilities = sum_fields(balance, ("current_liabilities", "long_term_debt"))

    return AffiliateMetrics(
        gross_profit=gross_profit,
        total_income=total_income,
        ebitda=ebitda,
        ebit=ebit,
        ebt=ebt,
        net_income=net_income,
        cash_flow=cash_flow,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        equity=total_assets - total_liabilities,
    )


def compute_all_affiliate_metrics(entity: AffiliateEntity) -> List[AffiliateMetrics]:
    columns = max(len(entity.income_periods), len(entity.balance_periods))
    return [compute_affiliate_metrics(entity, i) for i in range(columns)]


def affiliate_cash_flow(entities: Sequence[AffiliateEntity], index: int, annualize: bool = True) -> float:
    """Combined affiliate cash flow at one period position"""
    total = 0.0
    for entity in entities:
        cash_flow = compute_affiliate_metrics(entity, index).cash_flow
        if annualize and index < len(entity.income_periods):
            cash_flow *= annualization_factor(entity.income_periods[index])
        total += cash_flow
    return total
