import pytest

from engine.affiliates import affiliate_cash_flow, compute_affiliate_metrics, compute_all_affiliate_metrics
from engine.balance_sheet import compute_balance_sheet_metrics
from engine.models import (
    AffiliateBalancePeriod,
    AffiliateEntity,
    AffiliateIncomePeriod,
    BalanceSheetPeriod,
    Debt,
    PersonalAssets,
    PersonalLiabilities,
    PersonalPeriod,
)
from engine.personal import compute_global_metrics, compute_personal_metrics, schedule_e_cash_flow


def personal_inputs():
    assets = PersonalAssets(liquid_assets="50000", real_estate="300000", vehicles="20000", other_assets="30000")
    liabilities = PersonalLiabilities(
        credit_cards="5000", credit_cards_monthly="200",
        mortgages="200000", mortgages_monthly="1500",
        vehicle_loans="10000", vehicle_loans_monthly="300",
    )
    period = PersonalPeriod(salary="120000", cost_of_living="60000", personal_taxes="20000")
    debts = (Debt(id="1", balance="85000", payment="1000"),)
    return assets, liabilities, period, debts


def affiliate_entity(months="12"):
    income = AffiliateIncomePeriod(
        revenue="200000", cogs="80000", other_income="5000", officers_comp="30000",
        rent_expense="12000", operating_expenses="40000", depreciation="5000", amortization="1000",
        section_179="2000", interest="3000", other_expenses="1000", addbacks="500", taxes="4000",
        period_months=months,
    )
    balance = AffiliateBalancePeriod(
        cash="10000", accounts_receivable="5000", inventory="5000", real_estate="100000",
        accumulated_depreciation="20000", current_liabilities="10000", long_term_debt="40000",
    )
    return AffiliateEntity(id="1", name="Holdings LLC", income_periods=(income,), balance_periods=(balance,))


def test_personal_metrics():
    m = compute_personal_metrics(*personal_inputs())
    assert m.total_assets == 400000
    # Business debts count toward the guarantor's liabilities
    assert m.total_liabilities == 300000
    assert m.net_worth == 100000
    assert m.monthly_debt_payment == 3000
    assert m.annual_debt_service == 36000
    assert m.total_income == 120000
    assert m.total_expenses == 80000
    assert m.net_cash_flow == 40000
    assert m.debt_to_income == pytest.approx(30.0)
    assert m.debt_to_assets == pytest.approx(75.0)
    assert m.savings_rate == pytest.approx(100 / 3)
    assert m.liquidity_ratio == pytest.approx(1 / 6)
    assert m.current_ratio == pytest.approx(4 / 3)


def test_empty_personal_statement_ratios_are_zero():
    m = compute_personal_metrics(PersonalAssets(), PersonalLiabilities(), None)
    assert m.net_worth == 0
    assert (m.debt_to_income, m.debt_to_assets, m.savings_rate, m.liquidity_ratio, m.current_ratio) == (0, 0, 0, 0, 0)


def test_schedule_e_cash_flow():
    period = PersonalPeriod(
        sched_e_rents="24000", sched_e_expenses="10000", sched_e_depreciation="4000",
        sched_e_interest="2000", k1_income="5000",
    )
    assert schedule_e_cash_flow(period) == 25000
    assets, liabilities, _, debts = personal_inputs()
    assert compute_personal_metrics(assets, liabilities, period, debts).schedule_e_cash_flow == 25000


def test_affiliate_pnl_and_balance():
    m = compute_affiliate_metrics(affiliate_entity(), 0)
    assert m.gross_profit == 120000
    assert m.total_income == 125000
    assert m.ebitda == 43000
    # Section 179 is deducted above EBIT for affiliates
    assert m.ebit == 35000
    assert m.ebt == 31000
    assert m.net_income == 27000
    assert m.cash_flow == 35500
    assert m.total_assets == 100000
    assert m.total_liabilities == 50000
    assert m.equity == 50000


def test_missing_affiliate_column_is_empty():
    m = compute_affiliate_metrics(affiliate_entity(), 3)
    assert m.cash_flow == 0
    assert m.total_assets == 0
    assert len(compute_all_affiliate_metrics(affiliate_entity())) == 1


def test_affiliate_cash_flow_annualized_per_entity():
    entities = (affiliate_entity("6"), affiliate_entity("12"))
    assert affiliate_cash_flow(entities, 0) == pytest.approx(35500 * 2 + 35500)
    assert affiliate_cash_flow(entities, 0, annualize=False) == pytest.approx(71000)
    assert affiliate_cash_flow(entities, 5) == 0
    assert affiliate_cash_flow((), 0) == 0


def test_global_metrics():
    assets, liabilities, period, debts = personal_inputs()
    personal = compute_personal_metrics(assets, liabilities, period, debts)
    business_bs = compute_balance_sheet_metrics(BalanceSheetPeriod(
        cash="50000", accounts_receivable="30000", inventory="20000", real_estate="200000",
        accumulated_depreciation="50000", accounts_payable="25000", accrued_expenses="5000",
        short_term_debt="10000", current_liabilities="10000", long_term_debt="100000",
    ))
    affiliate = compute_affiliate_metrics(affiliate_entity(), 0)

    g = compute_global_metrics(personal, business_bs, [affiliate], 76000, 27000, 1.5, business_cash=50000)
    assert g.total_assets == 750000
    assert g.total_liabilities == 500000
    assert g.consolidated_net_worth == 250000
    assert g.total_income == 223000
    assert g.total_expenses == 80000
    assert g.debt_to_assets == pytest.approx(500000 / 750000 * 100)
    assert g.liquidity_ratio == pytest.approx(0.2)
    assert g.current_ratio == pytest.approx(1.5)
    assert g.savings_rate == pytest.approx(143000 / 223000 * 100)
    assert g.dscr == 1.5


def test_global_metrics_without_business_balance_sheet():
    personal = compute_personal_metrics(*personal_inputs())
    g = compute_global_metrics(personal, None, [], 0.0, 0.0, 0.0)
    assert g.total_assets == personal.total_assets
    assert g.consolidated_net_worth == personal.net_worth
