"""DSCR summary, audit breakdown, charts and export."""

from datetime import datetime

import streamlit as st

from components.inputs import bound_checkbox
from utils.export import dscr_breakdown_frame, export_to_excel
from utils.formatting import dscr_status, format_currency, format_percent, format_ratio
from utils.visualizations import (
    create_cash_flow_waterfall,
    create_dscr_by_period_chart,
    create_income_trend_chart,
)


def _summary_metric(title, summary):
    if summary is None:
        st.metric(title, "n/a")
        return
    st.metric(
        title,
        format_ratio(summary["global"]),
        delta=f"Business {format_ratio(summary['business'])}",
        delta_color="off",
        help=f"{summary['label']}: {dscr_status(summary['global'])}",
    )


def render_dscr_tab(store, spread):
    """Coverage summary for the latest full year and interim period."""
    bound_checkbox("Include rent addback", "dscr-rent-addback", store.state.include_rent_addback,
                   store.set_include_rent_addback)

    cols = st.columns(4)
    with cols[0]:
        _summary_metric("FYE DSCR", spread["dscr"]["fye"])
    with cols[1]:
        _summary_metric("Interim DSCR", spread["dscr"]["interim"])
    with cols[2]:
        st.metric("Consolidated Net Worth", format_currency(spread["global"].consolidated_net_worth))
    with cols[3]:
        st.metric("Global Debt to Assets", format_percent(spread["global"].debt_to_assets))

    results = spread["dscr_by_period"]
    st.plotly_chart(create_dscr_by_period_chart(results), use_container_width=True)

    st.markdown("### DSCR Breakdown")
    table = dscr_breakdown_frame(results)
    st.dataframe(table.style.format("{:,.2f}"), use_container_width=True)

    if results:
        labels = list(table.columns)
        selected = st.selectbox("Waterfall period", labels, index=len(labels) - 1)
        st.plotly_chart(create_cash_flow_waterfall(results[labels.index(selected)]),
                        use_container_width=True)

    labels = [c.label for c in spread["periods"]["business"]]
    st.plotly_chart(create_income_trend_chart(labels, spread["business"]["annualized"]),
                    use_container_width=True)

    for check, label in zip(spread["business"]["m1_tie_out"], labels):
        if not check["is_valid"]:
            st.warning(f"{label}: {check['warning']}")

    st.download_button(
        label="📥 Download Spread (Excel)",
        data=export_to_excel(spread),
        file_name=f"sba_spread_{datetime.now().strftime('%Y%m%d')}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
