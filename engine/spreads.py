"""Assemble every computed section of a loan spread from one state"""
import logging
from datetime import date
from typing import Dict, Optional

from .affiliates import affiliate_cash_flow, compute_affiliate_metrics, compute_all_affiliate_metrics
from .balance_sheet import compute_balance_sheet_metrics, turnover_for_period, validate_m1_tie_out
from .business import compute_all_business_metrics, ebitda_margin, m1_taxable_income
from .debts import build_debt_schedule
from .dscr import compute_dscr
from .finance import FEE_SCHEDULE_A, sba_loan_fees
from .parsing import parse_money
from .periods import classify_periods, find_current_interim_index, find_last_fye_index, period_label
from .personal import compute_global_metrics, compute_personal_metrics
from .store import SpreadsheetState

logger = logging.getLogger(__name__)


def _clamp(index: int, size: int) -> Optional[int]:
    if size == 0:
        return None
    return min(max(index, 0), size - 1)


def _dscr_summary(results, index: Optional[int]) -> Optional[Dict]:
    if index is None:
        return None
    result = results[index]
    return {
        "index": index,
        "label": result.period_label,
        "result": result,
        "business": result.business_dscr,
        "global": result.dscr,
    }


def build_spread(state: SpreadsheetState, as_of: Optional[date] = None) -> Dict:
    """
    Compute the full spread for the current spreadsheet state

    Args:
        state: Current spreadsheet inputs
        as_of: Date that debt maturities count from (today when None)

    Returns:
        Dict with periods, business, balance_sheet, debts, loan,
        dscr_by_period, dscr, personal, global and affiliates sections
    """
    business_periods = state.business_periods
    personal_periods = state.personal_periods
    bs_periods = state.balance_sheet_periods

    classifications = classify_periods(business_periods, state.business_labels)
    affiliate_classifications = [
        classify_periods(entity.income_periods, state.affiliate_labels) for entity in state.affiliates
    ]
    fye_index = find_last_fye_index(classifications)
    interim_index = find_current_interim_index(classifications)

    # Business P&L
    business = compute_all_business_metrics(business_periods)
    business["ebitda_margin"] = [ebitda_margin(m) for m in business["annualized"]]
    business["m1_taxable_income"] = [m1_taxable_income(p) for p in business_periods]
    business["m1_tie_out"] = [
        validate_m1_tie_out(m.net_income, parse_money(p.m1_book_income))
        for p, m in zip(business_periods, business["raw"])
    ]

    # Balance sheet, with turnover against the P&L column at the same position
    balance_sheet = {
        "metrics": [compute_balance_sheet_metrics(p) for p in bs_periods],
        "turnover": [
            turnover_for_period(p, business_periods[i]) if i < len(business_periods) else None
            for i, p in enumerate(bs_periods)
        ],
    }

    debts = build_debt_schedule(state.debts, as_of)
    loan = sba_loan_fees(state.uses, state.loan_terms, FEE_SCHEDULE_A)

    terms = state.loan_terms
    dscr_by_period = []
    for i, period in enumerate(business_periods):
        personal_index = _clamp(i, len(personal_periods))
        dscr_by_period.append(compute_dscr(
            business_period=period,
            personal_period=personal_periods[personal_index] if personal_index is not None else None,
            debts=state.debts,
            personal_liabilities=state.personal_liabilities,
            uses=state.uses,
            interest_rate=terms.interest_rate,
            term_months=terms.term_months,
            guarantee_percent=terms.guarantee_percent,
            include_rent_addback=state.include_rent_addback,
            affiliate_cash_flow=affiliate_cash_flow(state.affiliates, i),
            period_label=period_label(state.business_labels, i),
        ))
    dscr = {
        "fye": _dscr_summary(dscr_by_period, fye_index),
        "interim": _dscr_summary(dscr_by_period, interim_index),
    }

    latest_personal = personal_periods[-1] if personal_periods else None
    personal = compute_personal_metrics(
        state.personal_assets, state.personal_liabilities, latest_personal, state.debts
    )

    # Consolidation uses the most recent full year, else the last column
    anchor = fye_index if fye_index is not None else _clamp(len(business_periods) - 1, len(business_periods))
    bs_index = _clamp(anchor if anchor is not None else len(bs_periods) - 1, len(bs_periods))
    affiliate_index = _clamp(anchor if anchor is not None else 0, len(state.affiliate_labels))

    affiliate_latest = [
        compute_affiliate_metrics(entity, affiliate_index)
        for entity in state.affiliates
    ] if affiliate_index is not None else []
    summary = dscr["fye"] or dscr["interim"]
    global_metrics = compute_global_metrics(
        personal=personal,
        business_bs=balance_sheet["metrics"][bs_index] if bs_index is not None else None,
        affiliate_bs=affiliate_latest,
        business_net_income=business["annualized"][anchor].net_income if anchor is not None else 0.0,
        affiliate_net_income=sum(m.net_income for m in affiliate_latest),
        dscr=summary["global"] if summary else 0.0,
        business_cash=parse_money(bs_periods[bs_index].cash) if bs_index is not None else 0.0,
    )

    affiliates = [
        {
            "entity": entity,
            "metrics": compute_all_affiliate_metrics(entity),
            "periods": classes,
        }
        for entity, classes in zip(state.affiliates, affiliate_classifications)
    ]

    logger.debug(
        "Spread built: %d business periods, FYE index %s, interim index %s, global DSCR %.2f",
        len(business_periods), fye_index, interim_index, global_metrics.dscr
    )

    return {
        "periods": {
            "business": classifications,
            "affiliates": affiliate_classifications,
            "fye_index": fye_index,
            "interim_index": interim_index,
        },
        "business": business,
        "balance_sheet": balance_sheet,
        "debts": debts,
        "loan": loan,
        "dscr_by_period": dscr_by_period,
        "dscr": dscr,
        "personal": personal,
        "global": global_metrics,
        "affiliates": affiliates,
    }
