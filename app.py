"""
SBA Loan Spreads - Streamlit UI
A thin interface over the spreads engine; all figures come from build_spread
"""

import logging

import streamlit as st

from config.default_params import LOG_LEVEL
from engine.spreads import build_spread
from engine.store import SpreadsheetStore
from components.dscr_tab import render_dscr_tab
from components.inputs import reset_widgets
from components.loan_tab import render_debts_tab, render_loan_tab, render_personal_statement
from components.period_editor import render_affiliates, render_period_editor

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="SBA Loan Spreads",
    page_icon="🏦",
    layout="wide"
)


def get_store():
    """One store per browser session"""
    if 'store' not in st.session_state:
        st.session_state['store'] = SpreadsheetStore()
        logger.info("Started new spreadsheet session")
    return st.session_state['store']


def reset_spreadsheet(store):
    """Back to the default spreadsheet; widget values are dropped so they redraw from it"""
    store.reset()
    reset_widgets()
    logger.info("Spreadsheet reset to defaults")


def get_spread(store):
    """Recompute only when the state hash changes"""
    state = store.state
    state_hash = hash(state)
    cached = st.session_state.get('spread')
    if cached is None or cached.get('hash') != state_hash:
        logger.debug("State changed, rebuilding spread")
        st.session_state['spread'] = {
            'res': build_spread(state),
            'hash': state_hash,
        }
    return st.session_state['spread']['res']


def main():
    st.title("🏦 SBA Loan Spreads")
    st.caption("Business, personal and global cash flow analysis for SBA lending")

    store = get_store()
    with st.sidebar:
        st.header("Session")
        st.button("Reset Spreadsheet", key="reset-spreadsheet", on_click=reset_spreadsheet, args=(store,))

    spread = get_spread(store)

    tabs = st.tabs([
        "📊 DSCR Summary",
        "🏢 Business P&L",
        "📋 Balance Sheet",
        "👤 Personal",
        "🏘️ Affiliates",
        "💳 Existing Debts",
        "💰 Proposed Loan",
    ])

    with tabs[0]:
        render_dscr_tab(store, spread)
    with tabs[1]:
        render_period_editor(store, "business", "Business Income Statement")
    with tabs[2]:
        render_period_editor(store, "balance_sheet", "Business Balance Sheet")
    with tabs[3]:
        render_period_editor(store, "personal", "Personal Income")
        render_personal_statement(store, spread)
    with tabs[4]:
        render_affiliates(store)
    with tabs[5]:
        render_debts_tab(store, spread)
    with tabs[6]:
        render_loan_tab(store, spread)


if __name__ == "__main__":
    main()
