import pytest

from engine.balance_sheet import (
    annualized_values,
    compute_balance_sheet_metrics,
    compute_turnover_ratios,
    fixed_charge_coverage,
    validate_m1_tie_out,
    yoy_change,
)
from engine.models import BalanceSheetPeriod, BusinessPeriod


def sample_balance_sheet(**overrides):
    values = dict(
        cash="50000", accounts_receivable="30000", inventory="20000",
        real_estate="200000", accumulated_depreciation="50000",
        accounts_payable="25000", accrued_expenses="5000", short_term_debt="10000",
        current_liabilities="10000", long_term_debt="100000",
    )
    values.update(overrides)
    return BalanceSheetPeriod(**values)


def test_totals_and_ratios():
    m = compute_balance_sheet_metrics(sample_balance_sheet())
    assert m.current_assets == 100000
    assert m.net_fixed_assets == 150000
    assert m.total_assets == 250000
    assert m.current_liabilities == 50000
    assert m.total_liabilities == 150000
    assert m.equity == 100000
    assert m.working_capital == 50000
    assert m.current_ratio == pytest.approx(2.0)
    assert m.quick_ratio == pytest.approx(1.6)
    assert m.debt_to_equity == pytest.approx(1.5)
    assert m.debt_to_assets == pytest.approx(60.0)


def test_over_depreciated_fixed_assets_not_clamped():
    m = compute_balance_sheet_metrics(BalanceSheetPeriod(real_estate="10", accumulated_depreciation="20"))
    assert m.net_fixed_assets == -10


def test_negative_equity_reports_zero_debt_to_equity():
    m = compute_balance_sheet_metrics(sample_balance_sheet(long_term_debt="500000"))
    assert m.equity < 0
    assert m.debt_to_equity == 0.0


def test_empty_balance_sheet_ratios_are_zero():
    m = compute_balance_sheet_metrics(BalanceSheetPeriod())
    assert (m.current_ratio, m.quick_ratio, m.debt_to_equity, m.debt_to_assets) == (0.0, 0.0, 0.0, 0.0)


def test_turnover_and_cash_conversion_cycle():
    t = compute_turnover_ratios(sample_balance_sheet(), 365000, 182500)
    assert t.ar_days == pytest.approx(30.0)
    assert t.inventory_turnover == pytest.approx(9.125)
    assert t.inventory_days == pytest.approx(40.0)
    assert t.ap_turnover == pytest.approx(7.3)
    assert t.ap_days == pytest.approx(50.0)
    assert t.cash_conversion_cycle == pytest.approx(20.0)


def test_ap_turnover_falls_back_to_current_liabilities():
    period = sample_balance_sheet(accounts_payable="0", current_liabilities="18250")
    t = compute_turnover_ratios(period, 365000, 182500)
    assert t.ap_turnover == pytest.approx(10.0)


def test_turnover_with_no_balances_is_zero():
    t = compute_turnover_ratios(BalanceSheetPeriod(), 365000, 182500)
    assert t.ar_turnover == t.ar_days == 0.0
    assert t.inventory_turnover == t.inventory_days == 0.0
    assert t.ap_turnover == t.ap_days == 0.0
    assert t.cash_conversion_cycle == 0.0


def test_annualized_values():
    values = annualized_values(BusinessPeriod(revenue="100", cogs="50", period_months="6"))
    assert values == {"revenue": 200.0, "cogs": 100.0}


def test_fixed_charge_coverage():
    assert fixed_charge_coverage(100000, 20000, 40000) == pytest.approx(2.0)
    assert fixed_charge_coverage(100000, 0, 0) == 0.0


def test_yoy_change():
    assert yoy_change(110, 100)["formatted"] == "+10.0%"
    down = yoy_change(90, 100)
    assert down["change"] == pytest.approx(-10.0)
    assert not down["is_positive"]
    assert down["formatted"] == "-10.0%"
    assert yoy_change(5, 0) == {"change": 100.0, "is_positive": True, "formatted": "+∞%"}
    assert yoy_change(0, 0)["formatted"] == "0%"


def test_m1_tie_out():
    assert validate_m1_tie_out(1000, 1000.5)["is_valid"]
    result = validate_m1_tie_out(1000, 1500)
    assert not result["is_valid"]
    assert result["difference"] == 500
    assert "does not tie" in result["warning"]
