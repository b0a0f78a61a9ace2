"""Proposed loan, existing debt and personal financial statement inputs."""

from functools import partial

import streamlit as st
import pandas as pd

from components.inputs import bound_text_input
from utils.formatting import format_currency, format_percent, format_ratio

LOAN_TERM_INPUTS = [
    ("Interest Rate (%)", "interest_rate", "interest_rate"),
    ("Term (months)", "term_months", "term_months"),
    ("SBA Guarantee (%)", "guarantee_percent", "percentage"),
    ("Equity Injection ($)", "injection_equity", "amount"),
    ("Equity (%)", "equity_percentage", "percentage"),
]

DEBT_INPUTS = [
    ("Creditor", "creditor", None),
    ("Balance", "balance", "amount"),
    ("Payment", "payment", "amount"),
    ("Rate", "rate", "interest_rate"),
    ("Term", "term", "term_months"),
]


def render_loan_tab(store, spread):
    """Loan terms, uses of funds and the Schedule A loan summary."""
    st.subheader("Proposed Loan")
    terms = store.get_loan_terms()
    cols = st.columns(len(LOAN_TERM_INPUTS))
    for col, (label, attr, field_type) in zip(cols, LOAN_TERM_INPUTS):
        with col:
            bound_text_input(label, f"loan-{attr}", getattr(terms, attr),
                             partial(store.set_loan_term, attr), field_type)

    st.markdown("**Uses of Funds**")
    for use in store.get_uses():
        use_cols = st.columns([3, 2, 1])
        with use_cols[0]:
            bound_text_input("Description", f"use-desc-{use.id}", use.description,
                             partial(store.update_use, use.id, "description"),
                             label_visibility="collapsed")
        with use_cols[1]:
            bound_text_input("Amount", f"use-amt-{use.id}", use.amount,
                             partial(store.update_use, use.id, "amount"), "amount")
        with use_cols[2]:
            st.button("Remove", key=f"use-remove-{use.id}", on_click=store.remove_use, args=(use.id,))
    st.button("Add Use", on_click=store.add_use)

    loan = spread["loan"]
    metric_cols = st.columns(4)
    with metric_cols[0]:
        st.metric("Primary Request", format_currency(loan.primary_request))
    with metric_cols[1]:
        st.metric("SBA Upfront Fee", format_currency(loan.upfront_fee))
    with metric_cols[2]:
        st.metric("Final Loan Amount", format_currency(loan.final_loan_amount))
    with metric_cols[3]:
        st.metric("Monthly Payment", format_currency(loan.monthly_payment))
    st.caption(
        f"Guaranteed portion {format_currency(loan.guaranteed_amount)}; "
        f"annual servicing fee {format_currency(loan.annual_servicing_fee)} (not included in payment)"
    )


def render_debts_tab(store, spread):
    """Existing debt schedule with solved remaining terms."""
    st.subheader("Existing Debt Schedule")
    for debt in store.get_debts():
        cols = st.columns([3, 2, 2, 2, 2, 1])
        for col, (label, attr, field_type) in zip(cols[:5], DEBT_INPUTS):
            with col:
                bound_text_input(label, f"debt-{attr}-{debt.id}", getattr(debt, attr),
                                 partial(store.update_debt, debt.id, attr), field_type)
        with cols[5]:
            st.button("Remove", key=f"debt-remove-{debt.id}", on_click=store.remove_debt, args=(debt.id,))
    st.button("Add Debt", on_click=store.add_debt)

    schedule = spread["debts"]
    rows = [
        {
            "Creditor": row.debt.creditor,
            "Balance": format_currency(row.balance),
            "Payment": format_currency(row.payment),
            "Rate": f"{row.rate:.2f}%",
            "Remaining Term": row.remaining_term,
            "Maturity": row.maturity_date.strftime("%m/%Y") if row.maturity_date else "",
            "Annual Debt Service": format_currency(row.annual_debt_service),
        }
        for row in schedule["rows"]
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    for row in schedule["rows"]:
        if row.negative_amortization:
            st.warning(f"{row.debt.creditor}: payment does not cover interest; original term shown")
    st.metric("Total Existing Annual Debt Service", format_currency(schedule["totals"]["annual_debt_service"]))


def render_personal_statement(store, spread):
    """Personal assets and liabilities with the derived net worth."""
    st.subheader("Personal Financial Statement")
    state = store.state
    asset_col, liability_col = st.columns(2)
    with asset_col:
        st.markdown("**Assets**")
        for attr in type(state.personal_assets).field_names():
            bound_text_input(attr.replace("_", " ").title(), f"pa-{attr}", getattr(state.personal_assets, attr),
                             partial(store.update_personal_asset, attr), "amount")
    with liability_col:
        st.markdown("**Liabilities**")
        for attr in type(state.personal_liabilities).field_names():
            bound_text_input(attr.replace("_", " ").title(), f"pl-{attr}", getattr(state.personal_liabilities, attr),
                             partial(store.update_personal_liability, attr), "amount")

    personal = spread["personal"]
    cols = st.columns(4)
    with cols[0]:
        st.metric("Net Worth", format_currency(personal.net_worth))
    with cols[1]:
        st.metric("Liquidity Ratio", format_ratio(personal.liquidity_ratio))
    with cols[2]:
        st.metric("Debt to Income", format_percent(personal.debt_to_income))
    with cols[3]:
        st.metric("Schedule E / K-1 Cash Flow", format_currency(personal.schedule_e_cash_flow))
