"""Plotly charts for the loan spread."""

import plotly.graph_objects as go

from config.default_params import DSCR_BREAKEVEN, DSCR_TARGET
from utils.formatting import dscr_color


def create_dscr_by_period_chart(dscr_results):
    """Business and global DSCR per period against the target lines."""
    labels = [r.period_label for r in dscr_results]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=[r.business_dscr for r in dscr_results],
        name='Business DSCR',
        marker_color='lightblue'
    ))
    fig.add_trace(go.Bar(
        x=labels,
        y=[r.dscr for r in dscr_results],
        name='Global DSCR',
        marker_color=[dscr_color(r.dscr) for r in dscr_results]
    ))
    fig.add_hline(y=DSCR_TARGET, line_dash='dash', line_color='green',
                  annotation_text=f'Target {DSCR_TARGET:.2f}x')
    fig.add_hline(y=DSCR_BREAKEVEN, line_dash='dot', line_color='red',
                  annotation_text='Breakeven')
    fig.update_layout(
        title='Debt Service Coverage by Period',
        xaxis_title='Period',
        yaxis_title='DSCR (x)',
        barmode='group',
        height=400
    )
    return fig


def create_cash_flow_waterfall(result):
    """Walk from business EBITDA to net cash available for one DSCR result."""
    steps = [
        ('Business EBITDA', result.business_ebitda, 'absolute'),
        ('D&A / 179 / Other', result.depreciation_addback + result.amortization_addback
         + result.section_179_addback + result.other_addbacks, 'relative'),
        ('Officers Comp', result.officers_comp, 'relative'),
        ('Personal Income', result.personal_w2_income + result.sched_c_cash_flow, 'relative'),
        ('Affiliates', result.affiliate_cash_flow, 'relative'),
        ('Personal Expenses', -result.personal_expenses, 'relative'),
        ('Tax on Officers Comp', -result.estimated_tax_on_officers_comp, 'relative'),
        ('Rent Addback', result.rent_addback, 'relative'),
        ('Net Cash Available', result.net_cash_available, 'total'),
    ]
    fig = go.Figure(go.Waterfall(
        x=[s[0] for s in steps],
        y=[s[1] if s[2] != 'total' else 0 for s in steps],
        measure=[s[2] for s in steps],
        connector=dict(line=dict(color='gray'))
    ))
    fig.update_layout(
        title=f'Cash Available for Debt Service ({result.period_label})',
        yaxis_title='Amount ($)',
        height=450
    )
    return fig


def create_income_trend_chart(labels, annualized_metrics):
    """Annualized revenue, EBITDA and net income across periods."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=labels,
        y=[m.revenue for m in annualized_metrics],
        mode='lines+markers',
        name='Revenue',
        line=dict(color='blue', width=2)
    ))
    fig.add_trace(go.Scatter(
        x=labels,
        y=[m.ebitda for m in annualized_metrics],
        mode='lines+markers',
        name='EBITDA',
        line=dict(color='green', width=2)
    ))
    fig.add_trace(go.Scatter(
        x=labels,
        y=[m.net_income for m in annualized_metrics],
        mode='lines+markers',
        name='Net Income',
        line=dict(color='purple', width=2, dash='dash')
    ))
    fig.update_layout(
        title='Annualized Income Trend',
        xaxis_title='Period',
        yaxis_title='Amount ($)',
        height=400
    )
    return fig
