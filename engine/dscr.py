"""Debt service coverage: business cash flow plus guarantor income against all debt service"""
import logging
from typing import Optional, Sequence

from config.default_params import OFFICER_COMP_TAX_RATE
from .business import annualization_factor, period_months
from .finance import FEE_SCHEDULE_B, loan_annual_debt_service
from .models import BusinessPeriod, Debt, DSCRResult, PersonalLiabilities, PersonalPeriod, UseOfFunds
from .parsing import parse_money
from .personal import monthly_liability_payments, personal_expenses, sched_c_cash_flow, w2_income

logger = logging.getLogger(__name__)


def compute_dscr(
    business_period: BusinessPeriod,
    personal_period: Optional[PersonalPeriod],
    debts: Sequence[Debt],
    personal_liabilities: PersonalLiabilities,
    uses: Sequence[UseOfFunds],
    interest_rate,
    term_months,
    guarantee_percent,
    include_rent_addback: bool = False,
    affiliate_cash_flow: float = 0.0,
    fee_schedule: str = FEE_SCHEDULE_B,
    period_label: str = ""
) -> DSCRResult:
    """
    Global DSCR for one business period

    Business figures are annualized by 12 / period months; personal figures
    are taken as already annual. Officer compensation is carved out of
    EBITDA and added back as owner cash flow, less a flat tax estimate.

    Args:
        business_period: Business P&L column
        personal_period: Guarantor income column (None reads as all zeros)
        debts: Existing business debts
        personal_liabilities: Guarantor liabilities with monthly payments
        uses: Proposed loan use-of-proceeds rows
        interest_rate: Proposed loan rate, annual percent
        term_months: Proposed loan term
        guarantee_percent: SBA guarantee percent
        include_rent_addback: Add annualized rent back to available cash
        affiliate_cash_flow: Annualized affiliate cash flow
        fee_schedule: Upfront fee schedule for the proposed loan
        period_label: Carried onto the result for display

    Returns:
        DSCRResult with every intermediate of the calculation
    """
    personal = personal_period or PersonalPeriod()
    months = period_months(business_period)
    factor = annualization_factor(business_period)

    def annual(value) -> float:
        return parse_money(value) * factor

    p = business_period
    business_ebitda = (
        parse_money(p.revenue) + parse_money(p.other_income)
        - parse_money(p.cogs) - parse_money(p.operating_expenses)
        - parse_money(p.rent_expense) - parse_money(p.other_expenses)
    ) * factor
    officers_comp = annual(p.officers_comp)

    depreciation_addback = annual(p.depreciation)
    amortization_addback = annual(p.amortization)
    section_179_addback = annual(p.section_179)
    other_addbacks = annual(p.addbacks)
    business_cash_flow = (
        business_ebitda + depreciation_addback + amortization_addback
        + section_179_addback + other_addbacks
    )

    personal_w2_income = w2_income(personal)
    sched_c = sched_c_cash_flow(personal)
    total_income_available = (
        business_cash_flow + officers_comp + personal_w2_income + sched_c + affiliate_cash_flow
    )

    expenses = personal_expenses(personal)
    estimated_tax = officers_comp * OFFICER_COMP_TAX_RATE
    rent_addback = annual(p.rent_expense) if include_rent_addback else 0.0
    net_cash_available = total_income_available - expenses - estimated_tax + rent_addback

    existing_debt_payment = sum(parse_money(debt.payment) for debt in debts) * 12
    personal_debt_payment = monthly_liability_payments(personal_liabilities) * 12
    proposed_debt_payment = loan_annual_debt_service(
        uses, interest_rate, term_months, guarantee_percent, schedule=fee_schedule
    )
    annual_debt_service = existing_debt_payment + personal_debt_payment + proposed_debt_payment

    dscr = net_cash_available / annual_debt_service if annual_debt_service > 0 else 0.0
    business_service = existing_debt_payment + proposed_debt_payment
    business_dscr = business_cash_flow / business_service if business_service > 0 else 0.0

    logger.debug(
        "DSCR %s: net cash %.2f / debt service %.2f = %.2f (business %.2f)",
        period_label or "-", net_cash_available, annual_debt_service, dscr, business_dscr
    )

    return DSCRResult(
        period_label=period_label,
        period_months=months,
        annualization_factor=factor,
        business_ebitda=business_ebitda,
        officers_comp=officers_comp,
        depreciation_addback=depreciation_addback,
        amortization_addback=amortization_addback,
        section_179_addback=section_179_addback,
        other_addbacks=other_addbacks,
        business_cash_flow=business_cash_flow,
        personal_w2_income=personal_w2_income,
        sched_c_cash_flow=sched_c,
        affiliate_cash_flow=affiliate_cash_flow,
        total_income_available=total_income_available,
        personal_expenses=expenses,
        estimated_tax_on_officers_comp=estimated_tax,
        rent_addback=rent_addback,
        net_cash_available=net_cash_available,
        existing_debt_payment=existing_debt_payment,
        personal_debt_payment=personal_debt_payment,
        proposed_debt_payment=proposed_debt_payment,
        annual_debt_service=annual_debt_service,
        dscr=dscr,
        business_dscr=business_dscr,
        fee_schedule=fee_schedule,
    )
