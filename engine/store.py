"""Single process-wide spreadsheet state with explicit getters and setters

SpreadsheetState is frozen and hashable; every setter on SpreadsheetStore
builds a new state and swaps it in, so a state handed out earlier never
changes underneath its holder.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence, Tuple

from config.default_params import (
    AFFILIATE_PERIOD_LABELS,
    BALANCE_SHEET_LABELS,
    BUSINESS_PERIOD_LABELS,
    DEFAULT_LOAN_TERMS,
    DEFAULT_USES,
    PERSONAL_PERIOD_LABELS,
)
from .debts import update_debt_field
from .lists import add_item, check_fields, clear_item, clear_record, get_item, next_id, remove_item, update_item
from .models import (
    AffiliateBalancePeriod,
    AffiliateEntity,
    AffiliateIncomePeriod,
    BalanceSheetPeriod,
    BusinessPeriod,
    Debt,
    LoanTerms,
    PersonalAssets,
    PersonalLiabilities,
    PersonalPeriod,
    UseOfFunds,
)
from .periods import infer_period_months

logger = logging.getLogger(__name__)

# Fields a cleared period keeps
_PERIOD_KEEP = ("period_date", "period_months", "is_projection")

# Fixed-length period sections: state attribute -> label attribute
PERIOD_SECTIONS = {
    "business": ("business_periods", "business_labels"),
    "personal": ("personal_periods", "personal_labels"),
    "balance_sheet": ("balance_sheet_periods", "balance_sheet_labels"),
}


@dataclass(frozen=True)
class SpreadsheetState:
    loan_terms: LoanTerms = field(default_factory=LoanTerms)
    uses: Tuple[UseOfFunds, ...] = ()
    business_periods: Tuple[BusinessPeriod, ...] = ()
    business_labels: Tuple[str, ...] = ()
    personal_periods: Tuple[PersonalPeriod, ...] = ()
    personal_labels: Tuple[str, ...] = ()
    balance_sheet_periods: Tuple[BalanceSheetPeriod, ...] = ()
    balance_sheet_labels: Tuple[str, ...] = ()
    personal_assets: PersonalAssets = field(default_factory=PersonalAssets)
    personal_liabilities: PersonalLiabilities = field(default_factory=PersonalLiabilities)
    debts: Tuple[Debt, ...] = ()
    affiliates: Tuple[AffiliateEntity, ...] = ()
    affiliate_labels: Tuple[str, ...] = ()
    include_rent_addback: bool = False


def _new_affiliate(entity_id: str, columns: int) -> AffiliateEntity:
    return AffiliateEntity(
        id=entity_id,
        name=f"Affiliate {entity_id}",
        income_periods=tuple(AffiliateIncomePeriod() for _ in range(columns)),
        balance_periods=tuple(AffiliateBalancePeriod() for _ in range(columns)),
    )


def default_state() -> SpreadsheetState:
    """Blank spreadsheet with the standard period columns and loan uses"""
    return SpreadsheetState(
        loan_terms=LoanTerms(**DEFAULT_LOAN_TERMS),
        uses=tuple(
            UseOfFunds(id=str(i + 1), description=description)
            for i, description in enumerate(DEFAULT_USES)
        ),
        business_periods=tuple(BusinessPeriod() for _ in BUSINESS_PERIOD_LABELS),
        business_labels=tuple(BUSINESS_PERIOD_LABELS),
        personal_periods=tuple(PersonalPeriod() for _ in PERSONAL_PERIOD_LABELS),
        personal_labels=tuple(PERSONAL_PERIOD_LABELS),
        balance_sheet_periods=tuple(BalanceSheetPeriod() for _ in BALANCE_SHEET_LABELS),
        balance_sheet_labels=tuple(BALANCE_SHEET_LABELS),
        debts=(Debt(id="1", creditor="Creditor 1"),),
        affiliates=(_new_affiliate("1", len(AFFILIATE_PERIOD_LABELS)),),
        affiliate_labels=tuple(AFFILIATE_PERIOD_LABELS),
    )


def state_from_records(payload: Dict) -> SpreadsheetState:
    """Build a state from host records; sections missing from the payload keep their defaults"""
    base = default_state()
    changes = {}
    if "loanTerms" in payload:
        changes["loan_terms"] = LoanTerms.from_record(payload["loanTerms"])
    if "uses" in payload:
        changes["uses"] = tuple(UseOfFunds.from_record(r) for r in payload["uses"])
    if "businessPeriods" in payload:
        changes["business_periods"] = tuple(BusinessPeriod.from_record(r) for r in payload["businessPeriods"])
    if "personalPeriods" in payload:
        changes["personal_periods"] = tuple(PersonalPeriod.from_record(r) for r in payload["personalPeriods"])
    if "balanceSheetPeriods" in payload:
        changes["balance_sheet_periods"] = tuple(
            BalanceSheetPeriod.from_record(r) for r in payload["balanceSheetPeriods"]
        )
    if "personalAssets" in payload:
        changes["personal_assets"] = PersonalAssets.from_record(payload["personalAssets"])
    if "personalLiabilities" in payload:
        changes["personal_liabilities"] = PersonalLiabilities.from_record(payload["personalLiabilities"])
    if "debts" in payload:
        changes["debts"] = tuple(Debt.from_record(r) for r in payload["debts"])
    if "affiliates" in payload:
        changes["affiliates"] = tuple(AffiliateEntity.from_record(r) for r in payload["affiliates"])
    for key, attr in (
        ("businessLabels", "business_labels"),
        ("personalLabels", "personal_labels"),
        ("balanceSheetLabels", "balance_sheet_labels"),
        ("affiliateLabels", "affiliate_labels"),
    ):
        if key in payload:
            changes[attr] = tuple(payload[key])
    if "includeRentAddback" in payload:
        changes["include_rent_addback"] = bool(payload["includeRentAddback"])
    return replace(base, **changes)


def _replace_at(items: Sequence, index: int, item) -> tuple:
    updated = list(items)
    updated[index] = item
    return tuple(updated)


def _check_index(items: Sequence, index: int, what: str) -> None:
    if not 0 <= index < len(items):
        raise ValueError(f"{what} index {index} out of range (0-{len(items) - 1})")


class SpreadsheetStore:
    """Holder of the current SpreadsheetState"""

    def __init__(self, state: Optional[SpreadsheetState] = None):
        self._state = state or default_state()

    @property
    def state(self) -> SpreadsheetState:
        return self._state

    def _commit(self, **changes) -> SpreadsheetState:
        self._state = replace(self._state, **changes)
        return self._state

    def reset(self) -> SpreadsheetState:
        self._state = default_state()
        return self._state

    # Loan terms and uses of funds

    def get_loan_terms(self) -> LoanTerms:
        return self._state.loan_terms

    def set_loan_term(self, field_name: str, value: str) -> SpreadsheetState:
        terms = self._state.loan_terms
        check_fields(terms, [field_name])
        return self._commit(loan_terms=replace(terms, **{field_name: value}))

    def get_uses(self) -> Tuple[UseOfFunds, ...]:
        return self._state.uses

    def add_use(self, description: str = "", amount: str = "0") -> SpreadsheetState:
        uses = self._state.uses
        use = UseOfFunds(id=next_id(uses), description=description, amount=amount)
        return self._commit(uses=add_item(uses, use))

    def update_use(self, use_id: str, field_name: str, value: str) -> SpreadsheetState:
        return self._commit(uses=update_item(self._state.uses, use_id, **{field_name: value}))

    def remove_use(self, use_id: str) -> SpreadsheetState:
        return self._commit(uses=remove_item(self._state.uses, use_id))

    def set_include_rent_addback(self, include: bool) -> SpreadsheetState:
        return self._commit(include_rent_addback=bool(include))

    # Fixed-length period sections

    def get_periods(self, section: str) -> tuple:
        periods_attr, _ = self._section(section)
        return getattr(self._state, periods_attr)

    def get_labels(self, section: str) -> Tuple[str, ...]:
        _, labels_attr = self._section(section)
        return getattr(self._state, labels_attr)

    def update_period(self, section: str, index: int, field_name: str, value) -> SpreadsheetState:
        periods_attr, _ = self._section(section)
        periods = getattr(self._state, periods_attr)
        _check_index(periods, index, section)
        check_fields(periods[index], [field_name])
        period = replace(periods[index], **{field_name: value})
        return self._commit(**{periods_attr: _replace_at(periods, index, period)})

    def clear_period(self, section: str, index: int) -> SpreadsheetState:
        """Reset a period's amounts to zero, keeping its date and month count"""
        periods_attr, _ = self._section(section)
        periods = getattr(self._state, periods_attr)
        _check_index(periods, index, section)
        period = periods[index]
        keep = [name for name in _PERIOD_KEEP if name in type(period).field_names()]
        return self._commit(**{periods_attr: _replace_at(periods, index, clear_record(period, keep))})

    def set_label(self, section: str, index: int, label: str) -> SpreadsheetState:
        _, labels_attr = self._section(section)
        labels = getattr(self._state, labels_attr)
        _check_index(labels, index, f"{section} label")
        return self._commit(**{labels_attr: _replace_at(labels, index, label)})

    def _section(self, section: str) -> Tuple[str, str]:
        if section not in PERIOD_SECTIONS:
            raise ValueError(f"Unknown period section: {section!r}")
        return PERIOD_SECTIONS[section]

    # Personal financial statement

    def update_personal_asset(self, field_name: str, value: str) -> SpreadsheetState:
        assets = self._state.personal_assets
        check_fields(assets, [field_name])
        return self._commit(personal_assets=replace(assets, **{field_name: value}))

    def update_personal_liability(self, field_name: str, value: str) -> SpreadsheetState:
        liabilities = self._state.personal_liabilities
        check_fields(liabilities, [field_name])
        return self._commit(personal_liabilities=replace(liabilities, **{field_name: value}))

    # Existing debts

    def get_debts(self) -> Tuple[Debt, ...]:
        return self._state.debts

    def add_debt(self) -> SpreadsheetState:
        debts = self._state.debts
        debt_id = next_id(debts)
        return self._commit(debts=add_item(debts, Debt(id=debt_id, creditor=f"Creditor {debt_id}")))

    def update_debt(self, debt_id: str, field_name: str, value: str) -> SpreadsheetState:
        return self._commit(debts=update_debt_field(self._state.debts, debt_id, field_name, value))

    def remove_debt(self, debt_id: str) -> SpreadsheetState:
        return self._commit(debts=remove_item(self._state.debts, debt_id, min_items=0))

    def clear_debt(self, debt_id: str) -> SpreadsheetState:
        return self._commit(debts=clear_item(self._state.debts, debt_id, keep=("id", "creditor")))

    # Affiliates

    def get_affiliates(self) -> Tuple[AffiliateEntity, ...]:
        return self._state.affiliates

    def add_affiliate(self) -> SpreadsheetState:
        affiliates = self._state.affiliates
        entity = _new_affiliate(next_id(affiliates), len(self._state.affiliate_labels))
        return self._commit(affiliates=add_item(affiliates, entity))

    def rename_affiliate(self, entity_id: str, name: str) -> SpreadsheetState:
        return self._commit(affiliates=update_item(self._state.affiliates, entity_id, name=name))

    def remove_affiliate(self, entity_id: str) -> SpreadsheetState:
        return self._commit(affiliates=remove_item(self._state.affiliates, entity_id, min_items=0))

    def update_affiliate_income(self, entity_id: str, index: int, field_name: str, value) -> SpreadsheetState:
        """
        Edit one affiliate income cell

        Setting a period date re-derives the month count from the previous
        column's date when both parse.
        """
        entity = self._affiliate(entity_id)
        periods = entity.income_periods
        _check_index(periods, index, "affiliate income")
        check_fields(periods[index], [field_name])
        changes = {field_name: value}
        if field_name == "period_date" and value and index > 0:
            months = infer_period_months(periods[index - 1].period_date, value)
            if months is not None:
                changes["period_months"] = str(months)
        period = replace(periods[index], **changes)
        return self._commit(affiliates=update_item(
            self._state.affiliates, entity_id, income_periods=_replace_at(periods, index, period)
        ))

    def update_affiliate_balance(self, entity_id: str, index: int, field_name: str, value) -> SpreadsheetState:
        entity = self._affiliate(entity_id)
        periods = entity.balance_periods
        _check_index(periods, index, "affiliate balance")
        check_fields(periods[index], [field_name])
        period = replace(periods[index], **{field_name: value})
        return self._commit(affiliates=update_item(
            self._state.affiliates, entity_id, balance_periods=_replace_at(periods, index, period)
        ))

    def set_affiliate_label(self, index: int, label: str) -> SpreadsheetState:
        labels = self._state.affiliate_labels
        _check_index(labels, index, "affiliate label")
        return self._commit(affiliate_labels=_replace_at(labels, index, label))

    def add_affiliate_projection_column(self) -> SpreadsheetState:
        """Append a projection column to every affiliate"""
        labels = self._state.affiliate_labels
        count = sum(1 for label in labels if "Projection" in label)
        affiliates = tuple(
            replace(
                entity,
                income_periods=entity.income_periods + (AffiliateIncomePeriod(is_projection=True),),
                balance_periods=entity.balance_periods + (AffiliateBalancePeriod(),),
            )
            for entity in self._state.affiliates
        )
        return self._commit(affiliates=affiliates, affiliate_labels=labels + (f"Projection {count + 1}",))

    def remove_affiliate_column(self, index: int) -> SpreadsheetState:
        """Drop one period column from every affiliate; the last column stays"""
        labels = self._state.affiliate_labels
        if len(labels) <= 1:
            logger.debug("Refusing to remove the only affiliate period column")
            return self._state
        _check_index(labels, index, "affiliate label")

        def drop(items):
            return tuple(item for i, item in enumerate(items) if i != index)

        affiliates = tuple(
            replace(entity, income_periods=drop(entity.income_periods), balance_periods=drop(entity.balance_periods))
            for entity in self._state.affiliates
        )
        return self._commit(affiliates=affiliates, affiliate_labels=drop(labels))

    def _affiliate(self, entity_id: str) -> AffiliateEntity:
        entity = get_item(self._state.affiliates, entity_id)
        if entity is None:
            raise ValueError(f"Unknown affiliate id: {entity_id!r}")
        return entity
