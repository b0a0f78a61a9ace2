"""Editable period grids for the business, personal and balance sheet statements."""

from functools import partial

import streamlit as st
import pandas as pd

from engine.periods import period_label
from components.inputs import bound_checkbox, bound_text_input, grid_key
from utils.export import unique_labels

# (row label, field name) per section; the month count is edited separately
SECTION_FIELDS = {
    "business": [
        ("Revenue", "revenue"),
        ("COGS", "cogs"),
        ("Operating Expenses", "operating_expenses"),
        ("Rent Expense", "rent_expense"),
        ("Officers Compensation", "officers_comp"),
        ("Depreciation", "depreciation"),
        ("Amortization", "amortization"),
        ("Section 179", "section_179"),
        ("Interest", "interest"),
        ("Other Income", "other_income"),
        ("Other Expenses", "other_expenses"),
        ("Addbacks", "addbacks"),
        ("Taxes", "taxes"),
        ("M-1 Book Income", "m1_book_income"),
        ("M-1 Federal Tax Expense", "m1_fed_tax_expense"),
        ("M-1 Excess Depreciation", "m1_excess_depr"),
        ("M-1 Other", "m1_other"),
    ],
    "personal": [
        ("Salary", "salary"),
        ("Bonuses", "bonuses"),
        ("Investments", "investments"),
        ("Rental Income", "rental_income"),
        ("Retirement Income", "retirement_income"),
        ("Other Income", "other_income"),
        ("Cost of Living", "cost_of_living"),
        ("Personal Taxes", "personal_taxes"),
        ("Sched C Revenue", "sched_c_revenue"),
        ("Sched C COGS", "sched_c_cogs"),
        ("Sched C Expenses", "sched_c_expenses"),
        ("Sched C Interest", "sched_c_interest"),
        ("Sched C Depreciation", "sched_c_depreciation"),
        ("Sched C Amortization", "sched_c_amortization"),
        ("Sched C Other", "sched_c_other"),
        ("Sched E Rents", "sched_e_rents"),
        ("Sched E Expenses", "sched_e_expenses"),
        ("Sched E Depreciation", "sched_e_depreciation"),
        ("Sched E Interest", "sched_e_interest"),
        ("K-1 Income", "k1_income"),
    ],
    "balance_sheet": [
        ("Cash", "cash"),
        ("Accounts Receivable", "accounts_receivable"),
        ("Inventory", "inventory"),
        ("Other Current Assets", "other_current_assets"),
        ("Real Estate / Fixed Assets", "real_estate"),
        ("Accumulated Depreciation", "accumulated_depreciation"),
        ("Accounts Payable", "accounts_payable"),
        ("Accrued Expenses", "accrued_expenses"),
        ("Short-Term Debt", "short_term_debt"),
        ("Other Current Liabilities", "current_liabilities"),
        ("Long-Term Debt", "long_term_debt"),
    ],
}


def _push_grid_edits(df, edited, fields, update):
    """Write every changed cell through `update(column_index, field, value)`; rows map to `fields`."""
    changed = False
    for i, col in enumerate(df.columns):
        for row, field in zip(df.index, fields):
            value = str(edited.at[row, col])
            if value != str(df.at[row, col]):
                update(i, field, value)
                changed = True
    return changed


def render_column_controls(store, section, periods, columns):
    """Label, month count, date and projection flag per column, plus Clear."""
    if not periods:
        return
    field_names = type(periods[0]).field_names()
    header_cols = st.columns(len(periods))
    for i, period in enumerate(periods):
        with header_cols[i]:
            bound_text_input("Label", f"{section}-label-{i}", columns[i],
                             partial(store.set_label, section, i))
            # Balance sheet columns carry no month count
            if "period_months" in field_names:
                bound_text_input("Months", f"{section}-months-{i}", period.period_months,
                                 partial(store.update_period, section, i, "period_months"), "period_months")
            if "period_date" in field_names:
                bound_text_input("Period Date", f"{section}-date-{i}", period.period_date,
                                 partial(store.update_period, section, i, "period_date"))
            if "is_projection" in field_names:
                bound_checkbox("Projection", f"{section}-projection-{i}", period.is_projection,
                               partial(store.update_period, section, i, "is_projection"))
            st.button("Clear", key=f"{section}-clear-{i}", on_click=store.clear_period, args=(section, i))


def render_period_editor(store, section, title):
    """Render one statement grid and push edited cells into the store."""
    st.subheader(title)
    periods = store.get_periods(section)
    labels = store.get_labels(section)
    rows = SECTION_FIELDS[section]
    columns = [period_label(labels, i) for i in range(len(periods))]

    render_column_controls(store, section, periods, columns)
    grid_columns = unique_labels(labels, len(periods))

    df = pd.DataFrame(
        {col: [str(getattr(p, attr)) for _, attr in rows] for col, p in zip(grid_columns, periods)},
        index=[name for name, _ in rows],
    )
    edited = st.data_editor(
        df,
        key=grid_key(f"{section}-grid", periods, tuple(labels)),
        use_container_width=True,
    )
    if _push_grid_edits(df, edited, [attr for _, attr in rows], partial(store.update_period, section)):
        st.rerun()


def render_affiliates(store):
    """Affiliate income and balance grids, one expander per entity."""
    st.subheader("Affiliate Entities")
    labels = store.state.affiliate_labels

    btn_cols = st.columns(2)
    with btn_cols[0]:
        st.button("Add Affiliate", on_click=store.add_affiliate)
    with btn_cols[1]:
        st.button("Add Projection Column", on_click=store.add_affiliate_projection_column)

    label_cols = st.columns(len(labels)) if labels else []
    for i, col in enumerate(label_cols):
        with col:
            bound_text_input("Label", f"aff-label-{i}", labels[i], partial(store.set_affiliate_label, i))
            if len(labels) > 1:
                st.button("Remove Column", key=f"aff-col-remove-{i}",
                          on_click=store.remove_affiliate_column, args=(i,))

    income_fields = [
        "revenue", "cogs", "officers_comp", "rent_expense", "operating_expenses", "depreciation",
        "amortization", "section_179", "interest", "other_income", "other_expenses", "addbacks",
        "taxes", "period_date", "period_months",
    ]
    balance_fields = [
        "cash", "accounts_receivable", "inventory", "real_estate", "accumulated_depreciation",
        "current_liabilities", "long_term_debt",
    ]

    changed = False
    for entity in store.get_affiliates():
        with st.expander(entity.name or f"Affiliate {entity.id}", expanded=False):
            bound_text_input("Name", f"aff-name-{entity.id}", entity.name,
                             partial(store.rename_affiliate, entity.id))

            for kind, periods, fields, update in (
                ("income", entity.income_periods, income_fields, store.update_affiliate_income),
                ("balance", entity.balance_periods, balance_fields, store.update_affiliate_balance),
            ):
                df = pd.DataFrame(
                    {col: [str(getattr(p, f)) for f in fields]
                     for col, p in zip(unique_labels(labels, len(periods)), periods)},
                    index=fields,
                )
                edited = st.data_editor(
                    df,
                    key=grid_key(f"aff-{kind}-{entity.id}", periods, tuple(labels)),
                    use_container_width=True,
                )
                changed = _push_grid_edits(df, edited, fields, partial(update, entity.id)) or changed

            st.button("Remove", key=f"aff-remove-{entity.id}", on_click=store.remove_affiliate, args=(entity.id,))
    if changed:
        st.rerun()
