"""Input records and derived metric records for the spreads engine

Input records keep every amount as the raw string typed into the cell;
parsing happens at computation time. All records are frozen, so an edit
always produces a new record.
"""
import re
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Optional, Tuple

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

# camelCase keys that the generic conversion would split wrongly
_KEY_ALIASES = {
    "section179": "section_179",
    "schedCCOGS": "sched_c_cogs",
}


def snake_key(key: str) -> str:
    """Convert a host payload key (camelCase or snake_case) to a field name"""
    if key in _KEY_ALIASES:
        return _KEY_ALIASES[key]
    key = _ACRONYM_BOUNDARY.sub(r"\1_\2", key)
    return _CAMEL_BOUNDARY.sub(r"\1_\2", key).lower()


class RecordMixin:
    """Construction from plain host records"""

    @classmethod
    def from_record(cls, record: dict):
        names = {f.name for f in fields(cls)}
        values = {}
        for key, value in record.items():
            name = snake_key(key)
            if name in names:
                values[name] = value
        return cls(**values)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BusinessPeriod(RecordMixin):
    revenue: str = "0"
    cogs: str = "0"
    operating_expenses: str = "0"
    rent_expense: str = "0"
    officers_comp: str = "0"
    depreciation: str = "0"
    amortization: str = "0"
    section_179: str = "0"
    interest: str = "0"
    other_income: str = "0"
    other_expenses: str = "0"
    addbacks: str = "0"
    taxes: str = "0"
    # Schedule M-1 reconciliation
    m1_book_income: str = "0"
    m1_fed_tax_expense: str = "0"
    m1_excess_depr: str = "0"
    m1_other: str = "0"
    period_date: str = ""
    period_months: str = "12"
    is_projection: bool = False


@dataclass(frozen=True)
class PersonalPeriod(RecordMixin):
    salary: str = "0"
    bonuses: str = "0"
    investments: str = "0"
    rental_income: str = "0"
    retirement_income: str = "0"
    other_income: str = "0"
    cost_of_living: str = "0"
    personal_taxes: str = "0"
    # Schedule C
    sched_c_revenue: str = "0"
    sched_c_cogs: str = "0"
    sched_c_expenses: str = "0"
    sched_c_interest: str = "0"
    sched_c_depreciation: str = "0"
    sched_c_amortization: str = "0"
    sched_c_other: str = "0"
    # Schedule E / K-1
    sched_e_rents: str = "0"
    sched_e_expenses: str = "0"
    sched_e_depreciation: str = "0"
    sched_e_interest: str = "0"
    k1_income: str = "0"
    period_date: str = ""
    period_months: str = "12"


@dataclass(frozen=True)
class BalanceSheetPeriod(RecordMixin):
    cash: str = "0"
    accounts_receivable: str = "0"
    inventory: str = "0"
    other_current_assets: str = "0"
    real_estate: str = "0"
    accumulated_depreciation: str = "0"
    accounts_payable: str = "0"
    accrued_expenses: str = "0"
    short_term_debt: str = "0"
    current_liabilities: str = "0"  # other current liabilities
    long_term_debt: str = "0"


@dataclass(frozen=True)
class Debt(RecordMixin):
    id: str = "1"
    creditor: str = ""
    balance: str = "0"
    payment: str = "0"  # monthly
    rate: str = "0"  # annual %
    term: str = "0"  # original term, months


@dataclass(frozen=True)
class UseOfFunds(RecordMixin):
    id: str = "1"
    description: str = ""
    amount: str = "0"


@dataclass(frozen=True)
class LoanTerms(RecordMixin):
    interest_rate: str = "0"
    term_months: str = "120"
    guarantee_percent: str = "75"
    injection_equity: str = "0"
    equity_percentage: str = "0"


@dataclass(frozen=True)
class PersonalAssets(RecordMixin):
    liquid_assets: str = "0"
    real_estate: str = "0"
    vehicles: str = "0"
    accounts_receivable: str = "0"
    other_assets: str = "0"


@dataclass(frozen=True)
class PersonalLiabilities(RecordMixin):
    credit_cards: str = "0"
    credit_cards_monthly: str = "0"
    mortgages: str = "0"
    mortgages_monthly: str = "0"
    vehicle_loans: str = "0"
    vehicle_loans_monthly: str = "0"
    other_liabilities: str = "0"
    other_liabilities_monthly: str = "0"


@dataclass(frozen=True)
class AffiliateIncomePeriod(RecordMixin):
    revenue: str = "0"
    cogs: str = "0"
    officers_comp: str = "0"
    rent_expense: str = "0"
    operating_expenses: str = "0"
    depreciation: str = "0"
    amortization: str = "0"
    section_179: str = "0"
    interest: str = "0"
    other_income: str = "0"
    other_expenses: str = "0"
    addbacks: str = "0"
    taxes: str = "0"
    period_date: str = ""
    period_months: str = "12"
    is_projection: bool = False


@dataclass(frozen=True)
class AffiliateBalancePeriod(RecordMixin):
    cash: str = "0"
    accounts_receivable: str = "0"
    inventory: str = "0"
    real_estate: str = "0"
    accumulated_depreciation: str = "0"
    current_liabilities: str = "0"
    long_term_debt: str = "0"


@dataclass(frozen=True)
class AffiliateEntity(RecordMixin):
    id: str = "1"
    name: str = ""
    income_periods: Tuple[AffiliateIncomePeriod, ...] = ()
    balance_periods: Tuple[AffiliateBalancePeriod, ...] = ()

    @classmethod
    def from_record(cls, record: dict):
        income = record.get("incomePeriods", record.get("income_periods", ()))
        balance = record.get("balancePeriods", record.get("balance_periods", ()))
        return cls(
            id=str(record.get("id", "1")),
            name=record.get("name", ""),
            income_periods=tuple(AffiliateIncomePeriod.from_record(p) for p in income),
            balance_periods=tuple(AffiliateBalancePeriod.from_record(p) for p in balance),
        )


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PeriodClassification:
    index: int
    months: float
    label: str
    is_interim: bool
    is_projection: bool
    is_fye: bool


@dataclass(frozen=True)
class BusinessMetrics:
    revenue: float
    cogs: float
    gross_profit: float
    gross_margin: float
    ebitda: float
    ebit: float
    ebt: float
    net_income: float
    net_margin: float
    cash_flow: float
    operating_expenses: float
    rent_expense: float
    officers_comp: float
    depreciation: float
    amortization: float
    section_179: float
    interest: float
    taxes: float
    other_income: float
    other_expenses: float
    addbacks: float


@dataclass(frozen=True)
class BalanceSheetMetrics:
    current_assets: float
    net_fixed_assets: float
    total_assets: float
    current_liabilities: float
    long_term_debt: float
    total_liabilities: float
    equity: float
    working_capital: float
    current_ratio: float
    quick_ratio: float
    debt_to_equity: float
    debt_to_assets: float


@dataclass(frozen=True)
class TurnoverRatios:
    ar_turnover: float
    ar_days: float
    inventory_turnover: float
    inventory_days: float
    ap_turnover: float
    ap_days: float
    cash_conversion_cycle: float


@dataclass(frozen=True)
class SBALoanFees:
    schedule: str
    primary_request: float
    guaranteed_amount: float
    upfront_fee: float
    final_loan_amount: float
    annual_servicing_fee: float
    monthly_payment: float
    annual_debt_service: float


@dataclass(frozen=True)
class DebtScheduleRow:
    debt: Debt
    balance: float
    payment: float
    rate: float
    original_term: int
    remaining_term: int
    maturity_date: Optional[date]
    annual_debt_service: float
    negative_amortization: bool


@dataclass(frozen=True)
class AffiliateMetrics:
    gross_profit: float
    total_income: float
    ebitda: float
    ebit: float
    ebt: float
    net_income: float
    cash_flow: float
    total_assets: float
    total_liabilities: float
    equity: float


@dataclass(frozen=True)
class PersonalMetrics:
    total_assets: float
    total_liabilities: float
    net_worth: float
    liquid_assets: float
    total_income: float
    total_expenses: float
    net_cash_flow: float
    monthly_debt_payment: float
    annual_debt_service: float
    debt_to_income: float
    debt_to_assets: float
    savings_rate: float
    liquidity_ratio: float
    current_ratio: float
    schedule_e_cash_flow: float


@dataclass(frozen=True)
class GlobalMetrics:
    consolidated_net_worth: float
    total_assets: float
    total_liabilities: float
    total_income: float
    total_expenses: float
    debt_to_assets: float
    liquidity_ratio: float
    current_ratio: float
    savings_rate: float
    dscr: float


@dataclass(frozen=True)
class DSCRResult:
    """Every intermediate of one DSCR computation, for the audit trail"""
    period_label: str
    period_months: float
    annualization_factor: float
    business_ebitda: float
    officers_comp: float
    depreciation_addback: float
    amortization_addback: float
    section_179_addback: float
    other_addbacks: float
    business_cash_flow: float
    personal_w2_income: float
    sched_c_cash_flow: float
    affiliate_cash_flow: float
    total_income_available: float
    personal_expenses: float
    estimated_tax_on_officers_comp: float
    rent_addback: float
    net_cash_available: float
    existing_debt_payment: float
    personal_debt_payment: float
    proposed_debt_payment: float
    annual_debt_service: float
    dscr: float
    business_dscr: float
    fee_schedule: str = field(default="B")
