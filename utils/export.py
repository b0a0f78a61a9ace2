"""Spreadsheet export of a computed spread."""

from io import BytesIO

import pandas as pd

from engine.periods import period_label

# Row labels written with the ratio / percent formats instead of currency
RATIO_ROWS = {
    "Current Ratio", "Quick Ratio", "Debt to Equity", "AR Turnover",
    "Inventory Turnover", "AP Turnover", "DSCR", "Business DSCR", "Global DSCR",
    "Annualization Factor", "Liquidity Ratio",
}
PERCENT_ROWS = {"Gross Margin %", "Net Margin %", "EBITDA Margin %", "Debt to Assets %", "Savings Rate %"}
PLAIN_ROWS = {"Period Months", "AR Days", "Inventory Days", "AP Days", "Cash Conversion Cycle",
              "Original Term", "Remaining Term"}
# Debt schedule columns holding an annual rate in percent
RATE_COLUMNS = {"Rate %"}

BUSINESS_ROWS = [
    ("Revenue", "revenue"),
    ("COGS", "cogs"),
    ("Gross Profit", "gross_profit"),
    ("Gross Margin %", "gross_margin"),
    ("Operating Expenses", "operating_expenses"),
    ("Rent Expense", "rent_expense"),
    ("Officers Compensation", "officers_comp"),
    ("Other Income", "other_income"),
    ("Other Expenses", "other_expenses"),
    ("Addbacks", "addbacks"),
    ("EBITDA", "ebitda"),
    ("Depreciation", "depreciation"),
    ("Amortization", "amortization"),
    ("EBIT", "ebit"),
    ("Interest", "interest"),
    ("EBT", "ebt"),
    ("Taxes", "taxes"),
    ("Net Income", "net_income"),
    ("Net Margin %", "net_margin"),
    ("Section 179", "section_179"),
    ("Cash Flow", "cash_flow"),
]

BALANCE_SHEET_ROWS = [
    ("Current Assets", "current_assets"),
    ("Net Fixed Assets", "net_fixed_assets"),
    ("Total Assets", "total_assets"),
    ("Current Liabilities", "current_liabilities"),
    ("Long-Term Debt", "long_term_debt"),
    ("Total Liabilities", "total_liabilities"),
    ("Equity", "equity"),
    ("Working Capital", "working_capital"),
    ("Current Ratio", "current_ratio"),
    ("Quick Ratio", "quick_ratio"),
    ("Debt to Equity", "debt_to_equity"),
    ("Debt to Assets %", "debt_to_assets"),
]

TURNOVER_ROWS = [
    ("AR Turnover", "ar_turnover"),
    ("AR Days", "ar_days"),
    ("Inventory Turnover", "inventory_turnover"),
    ("Inventory Days", "inventory_days"),
    ("AP Turnover", "ap_turnover"),
    ("AP Days", "ap_days"),
    ("Cash Conversion Cycle", "cash_conversion_cycle"),
]

DSCR_ROWS = [
    ("Period Months", "period_months"),
    ("Annualization Factor", "annualization_factor"),
    ("Business EBITDA", "business_ebitda"),
    ("Depreciation Addback", "depreciation_addback"),
    ("Amortization Addback", "amortization_addback"),
    ("Section 179 Addback", "section_179_addback"),
    ("Other Addbacks", "other_addbacks"),
    ("Business Cash Flow", "business_cash_flow"),
    ("Officers Compensation", "officers_comp"),
    ("Personal W-2 Income", "personal_w2_income"),
    ("Schedule C Cash Flow", "sched_c_cash_flow"),
    ("Affiliate Cash Flow", "affiliate_cash_flow"),
    ("Total Income Available", "total_income_available"),
    ("Personal Expenses", "personal_expenses"),
    ("Est. Tax on Officers Comp", "estimated_tax_on_officers_comp"),
    ("Rent Addback", "rent_addback"),
    ("Net Cash Available", "net_cash_available"),
    ("Existing Debt Payment", "existing_debt_payment"),
    ("Personal Debt Payment", "personal_debt_payment"),
    ("Proposed Debt Payment", "proposed_debt_payment"),
    ("Annual Debt Service", "annual_debt_service"),
    ("Business DSCR", "business_dscr"),
    ("Global DSCR", "dscr"),
]


def unique_labels(labels, count, reserved=()):
    """One column name per period; a repeated label gets its position appended."""
    names = []
    for i in range(count):
        name = period_label(labels, i)
        if name in names or name in reserved:
            name = f"{name} ({i + 1})"
        names.append(name)
    return names


def _period_frame(records, rows, labels):
    """Line items down the side, one column per period."""
    data = {"Line Item": [name for name, _ in rows]}
    for column, record in zip(unique_labels(labels, len(records), reserved=("Line Item",)), records):
        data[column] = [getattr(record, attr) if record is not None else None for _, attr in rows]
    return pd.DataFrame(data)


def dscr_breakdown_frame(results):
    """DSCR line items indexed by name, one uniquely named column per period."""
    columns = unique_labels([r.period_label for r in results], len(results))
    return pd.DataFrame(
        {col: [getattr(r, attr) for _, attr in DSCR_ROWS] for col, r in zip(columns, results)},
        index=[name for name, _ in DSCR_ROWS],
    )


def build_export_frames(spread, labels=None):
    """
    Build one DataFrame per export sheet.

    Args:
        spread: Result of engine.spreads.build_spread
        labels: Period column labels; defaults to the classified business labels

    Returns:
        Ordered dict of sheet name -> DataFrame
    """
    if labels is None:
        labels = [c.label for c in spread["periods"]["business"]]

    loan = spread["loan"]
    fye = spread["dscr"]["fye"]
    interim = spread["dscr"]["interim"]
    personal = spread["personal"]
    global_metrics = spread["global"]
    summary = pd.DataFrame([
        ("Primary Request", loan.primary_request),
        ("Guaranteed Amount", loan.guaranteed_amount),
        ("Upfront Fee", loan.upfront_fee),
        ("Final Loan Amount", loan.final_loan_amount),
        ("Annual Servicing Fee", loan.annual_servicing_fee),
        ("Monthly Payment", loan.monthly_payment),
        ("Annual Debt Service", loan.annual_debt_service),
        ("FYE Business DSCR", fye["business"] if fye else 0.0),
        ("FYE Global DSCR", fye["global"] if fye else 0.0),
        ("Interim Business DSCR", interim["business"] if interim else 0.0),
        ("Interim Global DSCR", interim["global"] if interim else 0.0),
        ("Personal Net Worth", personal.net_worth),
        ("Consolidated Net Worth", global_metrics.consolidated_net_worth),
    ], columns=["Item", "Value"])

    business = _period_frame(spread["business"]["annualized"], BUSINESS_ROWS, labels)
    business.loc[len(business)] = ["EBITDA Margin %"] + list(spread["business"]["ebitda_margin"])

    balance_sheet = pd.concat([
        _period_frame(spread["balance_sheet"]["metrics"], BALANCE_SHEET_ROWS, labels),
        _period_frame(spread["balance_sheet"]["turnover"], TURNOVER_ROWS, labels),
    ], ignore_index=True)

    dscr = _period_frame(spread["dscr_by_period"], DSCR_ROWS, labels)

    debt_rows = [
        {
            "Creditor": row.debt.creditor,
            "Balance": row.balance,
            "Monthly Payment": row.payment,
            "Rate %": row.rate,
            "Original Term": row.original_term,
            "Remaining Term": row.remaining_term,
            "Maturity Date": row.maturity_date.strftime("%m/%d/%Y") if row.maturity_date else "",
            "Annual Debt Service": row.annual_debt_service,
            "Negative Amortization": "Yes" if row.negative_amortization else "",
        }
        for row in spread["debts"]["rows"]
    ]
    debts = pd.DataFrame(debt_rows, columns=[
        "Creditor", "Balance", "Monthly Payment", "Rate %", "Original Term", "Remaining Term",
        "Maturity Date", "Annual Debt Service", "Negative Amortization",
    ])

    return {
        "Summary": summary,
        "Business P&L": business,
        "Balance Sheet": balance_sheet,
        "DSCR": dscr,
        "Debt Schedule": debts,
    }


def export_to_excel(spread, labels=None):
    """Write the export frames to an .xlsx workbook and return its bytes."""
    frames = build_export_frames(spread, labels)

    bio = BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        workbook = writer.book

        header_format = workbook.add_format({
            'bold': True,
            'align': 'center',
            'valign': 'vcenter',
            'bg_color': '#F0F0F0'
        })
        # Whole dollars, negatives in parentheses
        currency_format = workbook.add_format({'num_format': '#,##0;(#,##0)', 'align': 'right'})
        ratio_format = workbook.add_format({'num_format': '0.00"x"', 'align': 'right'})
        percent_format = workbook.add_format({'num_format': '0.0"%"', 'align': 'right'})
        plain_format = workbook.add_format({'num_format': '#,##0', 'align': 'right'})
        rate_format = workbook.add_format({'num_format': '0.00"%"', 'align': 'right'})

        for sheet_name, df in frames.items():
            df.to_excel(writer, sheet_name=sheet_name, index=False)
            worksheet = writer.sheets[sheet_name]

            for col_idx, column in enumerate(df.columns):
                worksheet.write(0, col_idx, column, header_format)
                worksheet.set_column(col_idx, col_idx, 28 if col_idx == 0 else 16)

            for row_idx, row in enumerate(df.itertuples(index=False), start=1):
                label = str(row[0])
                for col_idx in range(1, len(row)):
                    value = row[col_idx]
                    if not pd.api.types.is_number(value) or pd.isna(value):
                        continue
                    column = df.columns[col_idx]
                    if column in RATE_COLUMNS:
                        fmt = rate_format
                    elif label in RATIO_ROWS or "DSCR" in label:
                        fmt = ratio_format
                    elif label in PERCENT_ROWS:
                        fmt = percent_format
                    elif label in PLAIN_ROWS or column in PLAIN_ROWS:
                        fmt = plain_format
                    else:
                        fmt = currency_format
                    worksheet.write_number(row_idx, col_idx, value, fmt)

    return bio.getvalue()
