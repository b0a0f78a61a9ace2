"""Loan amortization and SBA guarantee fee calculations"""
import math
from typing import Callable, Dict, List, Optional, Sequence

from config.default_params import (
    ANNUAL_SERVICING_FEE_RATE,
    DEFAULT_GUARANTEE_PERCENT,
    FEE_SCHEDULE_A_TIERS,
    FEE_SCHEDULE_B_TIERS,
)
from .models import LoanTerms, SBALoanFees, UseOfFunds
from .parsing import parse_money, parse_or_default


def monthly_payment(principal: float, annual_rate_pct: float, term_months: float) -> float:
    """Level monthly payment for a fixed-rate amortizing loan"""
    n = term_months if term_months > 0 else 1
    r = annual_rate_pct / 100.0 / 12.0
    if r == 0:
        return principal / n
    growth = (1 + r) ** n
    return principal * (r * growth) / (growth - 1)


def amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    term_months: float,
    months: Optional[int] = None
) -> List[Dict]:
    """Month-by-month payment, interest, principal and balance rows"""
    pmt = monthly_payment(principal, annual_rate_pct, term_months)
    r = annual_rate_pct / 100.0 / 12.0
    count = months if months is not None else int(math.ceil(max(term_months, 1)))

    schedule = []
    bal = principal
    for m in range(count):
        interest = bal * r
        principal_pay = min(max(0.0, pmt - interest), bal)
        bal = bal - principal_pay
        schedule.append({
            "month": m + 1,
            "payment": pmt,
            "interest": interest,
            "principal": principal_pay,
            "balance": bal,
        })
    return schedule


def upfront_fee_schedule_a(amount: float, term_months: float = 0, guarantee_percent: float = 0) -> float:
    """Fee Schedule A: 3% between $150K and $700K, 3.5% above"""
    t = FEE_SCHEDULE_A_TIERS
    if amount <= t['exempt_up_to']:
        return 0.0
    if amount <= t['tier_1_up_to']:
        return (amount - t['exempt_up_to']) * t['tier_1_rate']
    return (
        (t['tier_1_up_to'] - t['exempt_up_to']) * t['tier_1_rate']
        + (amount - t['tier_1_up_to']) * t['tier_2_rate']
    )


def upfront_fee_schedule_b(amount: float, term_months: float = 0, guarantee_percent: float = 0) -> float:
    """
    Fee Schedule B: term-sensitive with $500K and $1M breakpoints

    Loans of 12 months or less pay a flat rate on the guaranteed portion.
    Longer loans are tiered on the full request: 3% between $150K and
    $500K, 3.5% up to $1M, 3.75% above.
    """
    t = FEE_SCHEDULE_B_TIERS
    if 0 < term_months <= t['short_term_months']:
        return amount * guarantee_percent / 100.0 * t['short_term_rate']
    if amount <= t['exempt_up_to']:
        return 0.0

    tier_1 = (min(amount, t['tier_1_up_to']) - t['exempt_up_to']) * t['tier_1_rate']
    if amount <= t['tier_1_up_to']:
        return tier_1
    tier_2 = (min(amount, t['tier_2_up_to']) - t['tier_1_up_to']) * t['tier_2_rate']
    if amount <= t['tier_2_up_to']:
        return tier_1 + tier_2
    return tier_1 + tier_2 + (amount - t['tier_2_up_to']) * t['tier_3_rate']


FEE_SCHEDULE_A = "A"
FEE_SCHEDULE_B = "B"

FEE_SCHEDULES: Dict[str, Callable[[float, float, float], float]] = {
    FEE_SCHEDULE_A: upfront_fee_schedule_a,
    FEE_SCHEDULE_B: upfront_fee_schedule_b,
}


def upfront_fee(schedule: str, amount: float, term_months: float, guarantee_percent: float) -> float:
    if schedule not in FEE_SCHEDULES:
        raise ValueError(f"Unknown fee schedule: {schedule!r}")
    return FEE_SCHEDULES[schedule](amount, term_months, guarantee_percent)


def primary_request(uses: Sequence[UseOfFunds]) -> float:
    """Total of the use-of-proceeds rows"""
    return sum(parse_money(use.amount) for use in uses)


def sba_loan_fees(
    uses: Sequence[UseOfFunds],
    loan_terms: LoanTerms,
    schedule: str = FEE_SCHEDULE_A
) -> SBALoanFees:
    """
    Loan summary for the proposed SBA request

    The upfront fee is financed into the loan; the servicing fee is
    reported only and never enters the payment.
    """
    request = primary_request(uses)
    guarantee_pct = parse_or_default(loan_terms.guarantee_percent, DEFAULT_GUARANTEE_PERCENT)
    term = parse_or_default(loan_terms.term_months, 1)
    rate = parse_money(loan_terms.interest_rate)

    guaranteed = request * guarantee_pct / 100.0
    fee = upfront_fee(schedule, request, term, guarantee_pct)
    final_amount = request + fee
    payment = monthly_payment(final_amount, rate, term)

    return SBALoanFees(
        schedule=schedule,
        primary_request=request,
        guaranteed_amount=guaranteed,
        upfront_fee=fee,
        final_loan_amount=final_amount,
        annual_servicing_fee=guaranteed * ANNUAL_SERVICING_FEE_RATE,
        monthly_payment=payment,
        annual_debt_service=payment * 12,
    )


def loan_annual_debt_service(
    uses: Sequence[UseOfFunds],
    interest_rate,
    term_months,
    guarantee_percent,
    schedule: str = FEE_SCHEDULE_B
) -> float:
    """Annual payment on the proposed loan with its upfront fee financed in"""
    terms = LoanTerms(
        interest_rate=interest_rate,
        term_months=term_months,
        guarantee_percent=guarantee_percent,
    )
    return sba_loan_fees(uses, terms, schedule).annual_debt_service
