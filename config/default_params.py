"""Default parameters for the SBA spreads model."""

import os

# Runtime switches
LOG_LEVEL = os.getenv("SPREADS_LOG_LEVEL", "INFO")

# Fixed-length period columns created at start-up
BUSINESS_PERIOD_LABELS = ["12/31/2023", "12/31/2024", "12/31/2025", "Interim"]
PERSONAL_PERIOD_LABELS = ["12/31/2023", "12/31/2024", "12/31/2025"]
BALANCE_SHEET_LABELS = ["12/31/2023", "12/31/2024", "12/31/2025", "Interim"]
AFFILIATE_PERIOD_LABELS = ["12/31/2023", "12/31/2024", "12/31/2025", "Interim"]

# Proposed loan use-of-proceeds rows
DEFAULT_USES = [
    "RE Purchase",
    "Refinance",
    "Working Capital",
    "Inventory",
    "Business Acquisition",
    "Construction",
    "Contingency",
    "Interest Reserve",
]

DEFAULT_LOAN_TERMS = {
    'interest_rate': "0",
    'term_months': "120",
    'guarantee_percent': "75",
    'injection_equity': "0",
    'equity_percentage': "0",
}

# Fallbacks applied when a loan term cell is blank or zero
DEFAULT_GUARANTEE_PERCENT = 75.0
DEFAULT_PERIOD_MONTHS = 12.0

# Flat-rate heuristic for personal tax on owner compensation
OFFICER_COMP_TAX_RATE = 0.30

# SBA annual servicing fee, charged on the guaranteed portion
ANNUAL_SERVICING_FEE_RATE = 0.0055

# Fee Schedule A: $150K / $700K breakpoints
FEE_SCHEDULE_A_TIERS = {
    'exempt_up_to': 150_000.0,
    'tier_1_up_to': 700_000.0,
    'tier_1_rate': 0.03,
    'tier_2_rate': 0.035,
}

# Fee Schedule B: term-sensitive, $500K / $1M breakpoints.
# The 0.25% short-term rate and the 3.75% tier above $1M are assumed values,
# pending confirmation from the product owner.
FEE_SCHEDULE_B_TIERS = {
    'short_term_months': 12,
    'short_term_rate': 0.0025,  # of guaranteed portion
    'exempt_up_to': 150_000.0,
    'tier_1_up_to': 500_000.0,
    'tier_2_up_to': 1_000_000.0,
    'tier_1_rate': 0.03,
    'tier_2_rate': 0.035,
    'tier_3_rate': 0.0375,
}

DAYS_IN_YEAR = 365.0
DAYS_PER_MONTH = 30.44

# Display thresholds for DSCR colouring
DSCR_TARGET = 1.25
DSCR_BREAKEVEN = 1.0

# Advisory bounds for field validation
FIELD_BOUNDS = {
    'interest_rate': (0.0, 100.0),
    'term_months': (1.0, 600.0),
    'period_months': (1.0, 12.0),
    'percentage': (0.0, 100.0),
    'amount': (0.0, None),
}
