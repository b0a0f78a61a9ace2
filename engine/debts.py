"""Existing-debt schedule: payment auto-fill, remaining term and maturity"""
import logging
import math
from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .finance import monthly_payment
from .lists import get_item, update_item
from .models import Debt, DebtScheduleRow
from .parsing import parse_money

logger = logging.getLogger(__name__)

# Fields whose edit re-derives the monthly payment
_PAYMENT_INPUTS = {"balance", "rate", "term"}


def _ceil(value: float) -> int:
    # Float noise such as 50.000000001 must not add a month
    return int(math.ceil(round(value, 9)))


def monthly_payment_for(balance: float, rate_pct: float, term_months: float) -> float:
    return monthly_payment(balance, rate_pct, term_months)


def is_negative_amortization(balance: float, payment: float, rate_pct: float) -> bool:
    """True when the payment does not cover the monthly interest accrual"""
    r = rate_pct / 100.0 / 12.0
    return balance > 0 and payment > 0 and r > 0 and balance * r / payment >= 1


def solve_remaining_term(balance: float, payment: float, rate_pct: float, original_term: int) -> int:
    """
    Months left until a debt is paid off at its current payment

    Args:
        balance: Outstanding principal
        payment: Monthly payment
        rate_pct: Annual interest rate in percent
        original_term: Stated term, the fallback when no payoff exists

    Returns:
        Remaining months; the original term when the payment is zero or
        does not cover interest
    """
    if balance <= 0:
        return 0
    if payment <= 0:
        return original_term
    r = rate_pct / 100.0 / 12.0
    if r == 0:
        return _ceil(balance / payment)
    coverage = balance * r / payment
    if coverage >= 1:
        return original_term
    return _ceil(-math.log(1 - coverage) / math.log(1 + r))


def maturity_date(remaining_term: int, as_of: Optional[date] = None) -> Optional[date]:
    """Payoff date; None for a paid-off debt"""
    if remaining_term <= 0:
        return None
    return (as_of or date.today()) + relativedelta(months=remaining_term)


def annual_debt_service(debt: Debt) -> float:
    return parse_money(debt.payment) * 12


def debt_schedule_row(debt: Debt, as_of: Optional[date] = None) -> DebtScheduleRow:
    balance = parse_money(debt.balance)
    payment = parse_money(debt.payment)
    rate = parse_money(debt.rate)
    original_term = int(parse_money(debt.term))

    negative = is_negative_amortization(balance, payment, rate)
    if negative:
        logger.warning(
            "Debt %s (%s): payment %.2f does not cover interest at %.2f%%; "
            "using original term of %d months",
            debt.id, debt.creditor or "unnamed", payment, rate, original_term
        )
    remaining = solve_remaining_term(balance, payment, rate, original_term)

    return DebtScheduleRow(
        debt=debt,
        balance=balance,
        payment=payment,
        rate=rate,
        original_term=original_term,
        remaining_term=remaining,
        maturity_date=maturity_date(remaining, as_of),
        annual_debt_service=payment * 12,
        negative_amortization=negative,
    )


def build_debt_schedule(debts: Sequence[Debt], as_of: Optional[date] = None) -> Dict:
    """Schedule rows for every existing debt plus column totals"""
    rows = [debt_schedule_row(debt, as_of) for debt in debts]
    totals = {
        "balance": sum(row.balance for row in rows),
        "payment": sum(row.payment for row in rows),
        "annual_debt_service": sum(row.annual_debt_service for row in rows),
    }
    logger.debug("Debt schedule: %d debts, annual service %.2f", len(rows), totals["annual_debt_service"])
    return {"rows": rows, "totals": totals}


def update_debt_field(debts: Sequence[Debt], debt_id: str, field: str, value: str) -> Tuple[Debt, ...]:
    """
    Set one field on a debt, re-deriving the payment when its inputs change

    The payment is recomputed (to cents) only once balance, rate and term
    are all positive; a hand-entered payment survives otherwise.
    """
    updated = update_item(debts, debt_id, **{field: value})
    debt = get_item(updated, debt_id)
    if field not in _PAYMENT_INPUTS or debt is None:
        return updated

    balance = parse_money(debt.balance)
    rate = parse_money(debt.rate)
    term = parse_money(debt.term)
    if balance > 0 and rate > 0 and term > 0:
        payment = monthly_payment_for(balance, rate, term)
        updated = update_item(updated, debt_id, payment=f"{payment:.2f}")
    return updated
