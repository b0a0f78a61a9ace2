import pytest

from engine.finance import (
    FEE_SCHEDULE_A,
    FEE_SCHEDULE_B,
    FEE_SCHEDULES,
    amortization_schedule,
    loan_annual_debt_service,
    monthly_payment,
    primary_request,
    sba_loan_fees,
    upfront_fee,
    upfront_fee_schedule_a,
    upfront_fee_schedule_b,
)
from engine.models import LoanTerms, UseOfFunds


def test_monthly_payment_standard_amortization():
    assert abs(monthly_payment(100000, 6, 120) - 1110.21) < 0.01


def test_monthly_payment_zero_rate_and_zero_term():
    assert monthly_payment(12000, 0, 12) == 1000
    # Non-positive term reads as one month
    assert monthly_payment(1000, 0, 0) == 1000
    assert monthly_payment(1000, 0, -5) == 1000


def test_amortization_schedule_pays_off():
    rows = amortization_schedule(100000, 6, 120)
    assert len(rows) == 120
    assert rows[0]["interest"] == pytest.approx(500.0)
    assert rows[-1]["balance"] == pytest.approx(0.0, abs=1e-4)
    assert len(amortization_schedule(100000, 6, 120, months=12)) == 12


@pytest.mark.parametrize("amount, fee", [
    (100000, 0.0),
    (150000, 0.0),
    (400000, 7500.0),
    (700000, 16500.0),
    (900000, 23500.0),
])
def test_fee_schedule_a(amount, fee):
    assert upfront_fee_schedule_a(amount) == pytest.approx(fee)


@pytest.mark.parametrize("amount, fee", [
    (150000, 0.0),
    (300000, 4500.0),
    (500000, 10500.0),
    (900000, 24500.0),
    (1200000, 35500.0),
])
def test_fee_schedule_b_long_term(amount, fee):
    assert upfront_fee_schedule_b(amount, 120, 75) == pytest.approx(fee)


def test_fee_schedule_b_short_term_on_guaranteed_portion():
    assert upfront_fee_schedule_b(400000, 12, 75) == pytest.approx(750.0)
    assert upfront_fee_schedule_b(100000, 6, 50) == pytest.approx(125.0)


def test_named_schedules():
    assert set(FEE_SCHEDULES) == {FEE_SCHEDULE_A, FEE_SCHEDULE_B}
    assert upfront_fee(FEE_SCHEDULE_A, 900000, 120, 75) == pytest.approx(23500.0)
    assert upfront_fee(FEE_SCHEDULE_B, 900000, 120, 75) == pytest.approx(24500.0)
    with pytest.raises(ValueError):
        upfront_fee("C", 900000, 120, 75)


def test_sba_loan_fees_summary():
    uses = (UseOfFunds(id="1", amount="200000"), UseOfFunds(id="2", amount="100,000"), UseOfFunds(id="3", amount=""))
    terms = LoanTerms(interest_rate="6", term_months="120", guarantee_percent="75")
    fees = sba_loan_fees(uses, terms)

    assert primary_request(uses) == 300000
    assert fees.schedule == FEE_SCHEDULE_A
    assert fees.guaranteed_amount == pytest.approx(225000)
    assert fees.upfront_fee == pytest.approx(4500)
    assert fees.final_loan_amount == pytest.approx(304500)
    assert fees.annual_servicing_fee == pytest.approx(1237.5)
    assert fees.monthly_payment == pytest.approx(monthly_payment(304500, 6, 120))
    # Servicing fee is informational only
    assert fees.annual_debt_service == pytest.approx(fees.monthly_payment * 12)


def test_blank_guarantee_defaults_to_75():
    fees = sba_loan_fees((UseOfFunds(amount="100000"),), LoanTerms(guarantee_percent=""))
    assert fees.guaranteed_amount == pytest.approx(75000)


def test_loan_annual_debt_service_defaults():
    uses = (UseOfFunds(amount="100000"),)
    # Zero rate with blank term amortizes over a single month, priced as a short-term loan
    expected = (100000 + upfront_fee_schedule_b(100000, 1, 75)) * 12
    assert loan_annual_debt_service(uses, "0", "", "75") == pytest.approx(expected)
    assert loan_annual_debt_service(uses, "0", "", "75", schedule=FEE_SCHEDULE_A) == pytest.approx(1_200_000)
    assert loan_annual_debt_service((), "6", "120", "75") == 0.0


def test_loan_annual_debt_service_uses_schedule_b():
    uses = (UseOfFunds(amount="900000"),)
    expected = monthly_payment(924500, 6, 120) * 12
    assert loan_annual_debt_service(uses, "6", "120", "75") == pytest.approx(expected)
    expected_a = monthly_payment(923500, 6, 120) * 12
    assert loan_annual_debt_service(uses, "6", "120", "75", schedule=FEE_SCHEDULE_A) == pytest.approx(expected_a)
