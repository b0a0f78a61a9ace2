import pytest

from engine.lists import (
    add_item,
    clear_item,
    get_item,
    next_id,
    remove_item,
    reorder_items,
    update_item,
)
from engine.models import UseOfFunds, snake_key
from engine.store import SpreadsheetStore, default_state, state_from_records
from engine.validation import validate_financial_field


def sample_uses():
    return (
        UseOfFunds(id="1", description="RE Purchase", amount="100"),
        UseOfFunds(id="2", description="Working Capital", amount="50"),
    )


# ----- Copy-on-write lists -----

def test_list_operations_return_new_tuples():
    uses = sample_uses()
    added = add_item(uses, UseOfFunds(id=next_id(uses), description="Inventory"))
    assert len(uses) == 2
    assert len(added) == 3
    assert added[-1].id == "3"

    updated = update_item(uses, "2", amount="75")
    assert updated[1].amount == "75"
    assert uses[1].amount == "50"
    assert get_item(updated, "2").amount == "75"
    assert get_item(updated, "9") is None


def test_remove_respects_minimum():
    uses = sample_uses()
    assert remove_item(uses, "1") == (uses[1],)
    assert remove_item((uses[0],), "1") == (uses[0],)
    assert remove_item((uses[0],), "1", min_items=0) == ()


def test_next_id_after_removal():
    uses = remove_item(sample_uses(), "1")
    assert next_id(uses) == "3"
    assert next_id(()) == "1"


def test_clear_and_reorder():
    uses = sample_uses()
    cleared = clear_item(uses, "1")
    assert cleared[0] == UseOfFunds(id="1")
    assert cleared[1] == uses[1]

    assert [u.id for u in reorder_items(uses, 0, 1)] == ["2", "1"]
    with pytest.raises(ValueError):
        reorder_items(uses, 0, 5)


def test_update_unknown_field_raises():
    with pytest.raises(ValueError):
        update_item(sample_uses(), "1", price="10")


# ----- Store -----

def test_default_state_shape():
    state = default_state()
    assert len(state.business_periods) == 4
    assert state.business_labels[-1] == "Interim"
    assert len(state.personal_periods) == 3
    assert len(state.balance_sheet_periods) == 4
    assert [u.description for u in state.uses][:2] == ["RE Purchase", "Refinance"]
    assert len(state.uses) == 8
    assert state.debts[0].creditor == "Creditor 1"
    assert len(state.affiliates[0].income_periods) == 4
    assert state.loan_terms.term_months == "120"
    assert state.loan_terms.guarantee_percent == "75"


def test_state_is_hashable_and_value_equal():
    assert default_state() == default_state()
    assert hash(default_state()) == hash(default_state())


def test_updates_never_mutate_previous_state():
    store = SpreadsheetStore()
    before = store.state
    after = store.update_period("business", 0, "revenue", "500000")
    assert before.business_periods[0].revenue == "0"
    assert after.business_periods[0].revenue == "500000"
    assert store.state is after
    assert hash(before) != hash(after)


def test_invalid_store_operations_raise():
    store = SpreadsheetStore()
    with pytest.raises(ValueError):
        store.update_period("business", 9, "revenue", "1")
    with pytest.raises(ValueError):
        store.update_period("business", 0, "sales", "1")
    with pytest.raises(ValueError):
        store.update_period("cash_flow", 0, "revenue", "1")
    with pytest.raises(ValueError):
        store.set_loan_term("apr", "6")
    with pytest.raises(ValueError):
        store.update_affiliate_income("99", 0, "revenue", "1")


def test_clear_period_keeps_date_and_months():
    store = SpreadsheetStore()
    store.update_period("business", 3, "revenue", "1000")
    store.update_period("business", 3, "period_months", "6")
    store.update_period("business", 3, "period_date", "06/30/2025")
    cleared = store.clear_period("business", 3).business_periods[3]
    assert cleared.revenue == "0"
    assert cleared.period_months == "6"
    assert cleared.period_date == "06/30/2025"

    store.update_period("balance_sheet", 0, "cash", "10")
    assert store.clear_period("balance_sheet", 0).balance_sheet_periods[0].cash == "0"


def test_labels():
    store = SpreadsheetStore()
    store.set_label("personal", 2, "2025 Return")
    assert store.get_labels("personal")[2] == "2025 Return"


def test_debt_edits_fill_payment():
    store = SpreadsheetStore()
    store.update_debt("1", "balance", "100000")
    store.update_debt("1", "rate", "6")
    state = store.update_debt("1", "term", "120")
    assert state.debts[0].payment == "1110.21"

    store.add_debt()
    assert store.get_debts()[1].creditor == "Creditor 2"
    store.remove_debt("1")
    store.remove_debt("2")
    assert store.get_debts() == ()


def test_uses_and_loan_terms():
    store = SpreadsheetStore()
    store.update_use("1", "amount", "300000")
    store.set_loan_term("interest_rate", "6")
    store.add_use("Equipment", "5000")
    assert store.get_uses()[-1].id == "9"
    assert store.get_loan_terms().interest_rate == "6"
    store.remove_use("9")
    assert len(store.get_uses()) == 8


def test_affiliate_date_edit_infers_months():
    store = SpreadsheetStore()
    store.update_affiliate_income("1", 0, "period_date", "12/31/2023")
    state = store.update_affiliate_income("1", 1, "period_date", "06/30/2024")
    assert state.affiliates[0].income_periods[1].period_months == "6"
    # Unparseable date leaves the month count alone
    state = store.update_affiliate_income("1", 2, "period_date", "sometime")
    assert state.affiliates[0].income_periods[2].period_months == "12"


def test_affiliate_columns():
    store = SpreadsheetStore()
    store.add_affiliate()
    state = store.add_affiliate_projection_column()
    assert state.affiliate_labels[-1] == "Projection 1"
    assert all(len(e.income_periods) == 5 for e in state.affiliates)
    assert state.affiliates[1].income_periods[-1].is_projection

    state = store.remove_affiliate_column(0)
    assert len(state.affiliate_labels) == 4
    assert all(len(e.balance_periods) == 4 for e in state.affiliates)

    store.update_affiliate_balance("2", 0, "cash", "500")
    store.rename_affiliate("2", "Real Estate LLC")
    entity = store.get_affiliates()[1]
    assert entity.name == "Real Estate LLC"
    assert entity.balance_periods[0].cash == "500"


def test_state_from_camel_case_records():
    state = state_from_records({
        "businessPeriods": [{"revenue": "100", "periodMonths": "6", "section179": "5", "unknownKey": "x"}],
        "personalPeriods": [{"salary": "60000", "schedCCOGS": "10"}],
        "loanTerms": {"interestRate": "6", "termMonths": "120"},
        "affiliates": [{"id": "1", "name": "A", "incomePeriods": [{"revenue": "1"}], "balancePeriods": []}],
        "includeRentAddback": True,
    })
    assert len(state.business_periods) == 1
    assert state.business_periods[0].period_months == "6"
    assert state.business_periods[0].section_179 == "5"
    assert state.personal_periods[0].sched_c_cogs == "10"
    assert state.loan_terms.interest_rate == "6"
    assert state.affiliates[0].income_periods[0].revenue == "1"
    assert state.include_rent_addback
    # Sections absent from the payload keep defaults
    assert len(state.uses) == 8


# ----- Field validation -----

@pytest.mark.parametrize("value, field_type, valid", [
    ("6.5", "interest_rate", True),
    ("101", "interest_rate", False),
    ("0", "term_months", False),
    ("600", "term_months", True),
    ("13", "period_months", False),
    ("75", "percentage", True),
    ("-1", "amount", False),
    ("$1,000", "amount", True),
])
def test_validate_financial_field(value, field_type, valid):
    assert validate_financial_field(value, field_type).is_valid is valid


def test_validate_rejects_non_numbers():
    result = validate_financial_field("12abc", "amount")
    assert not result.is_valid
    assert result.error == "Must be a valid number"
    with pytest.raises(ValueError):
        validate_financial_field("1", "color")


@pytest.mark.parametrize("key, name", [
    ("schedCRevenue", "sched_c_revenue"),
    ("schedCCOGS", "sched_c_cogs"),
    ("schedERents", "sched_e_rents"),
    ("m1BookIncome", "m1_book_income"),
    ("section179", "section_179"),
    ("creditCardsMonthly", "credit_cards_monthly"),
    ("period_months", "period_months"),
])
def test_snake_key(key, name):
    assert snake_key(key) == name
