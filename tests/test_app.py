import pytest
from streamlit.testing.v1 import AppTest


@pytest.fixture
def at():
    app = AppTest.from_file("../app.py", default_timeout=60)
    app.run()
    assert not app.exception
    return app


def store_of(app):
    return app.session_state["store"]


def test_debt_payment_fill_survives_rerun(at):
    at.text_input(key="debt-balance-1").input("100000").run()
    at.text_input(key="debt-rate-1").input("6").run()
    at.text_input(key="debt-term-1").input("120").run()
    assert at.text_input(key="debt-payment-1").value == "1110.21"

    # A plain rerun must not write the old widget value back
    at.run()
    assert not at.exception
    assert at.text_input(key="debt-payment-1").value == "1110.21"
    assert store_of(at).get_debts()[0].payment == "1110.21"


def test_reset_restores_defaults(at):
    at.text_input(key="loan-interest_rate").input("7").run()
    assert store_of(at).get_loan_terms().interest_rate == "7"

    at.button(key="reset-spreadsheet").click().run()
    assert not at.exception
    assert at.text_input(key="loan-interest_rate").value == "0"

    at.run()
    assert at.text_input(key="loan-interest_rate").value == "0"
    assert store_of(at).get_loan_terms().interest_rate == "0"


def test_period_labels_dates_and_projection(at):
    at.text_input(key="business-label-3").input("Projection 2026").run()
    at.text_input(key="business-date-0").input("12/31/2022").run()
    at.checkbox(key="business-projection-1").check().run()
    assert not at.exception

    store = store_of(at)
    assert store.get_labels("business")[3] == "Projection 2026"
    periods = store.get_periods("business")
    assert periods[0].period_date == "12/31/2022"
    assert periods[1].is_projection is True
    assert at.checkbox(key="business-projection-1").value is True


def test_clear_column_button(at):
    store = store_of(at)
    store.update_period("business", 2, "revenue", "500000")
    store.update_period("business", 2, "period_months", "6")
    at.run()

    at.button(key="business-clear-2").click().run()
    assert not at.exception
    cleared = store_of(at).get_periods("business")[2]
    assert cleared.revenue == "0"
    assert cleared.period_months == "6"
    assert at.text_input(key="business-months-2").value == "6"


def test_rent_addback_toggle(at):
    at.checkbox(key="dscr-rent-addback").check().run()
    assert store_of(at).state.include_rent_addback is True
    at.run()
    assert store_of(at).state.include_rent_addback is True
