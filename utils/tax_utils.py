# utils/tax_utils.py
from typing import Dict, Tuple, Union

from models import FilingStatus

# Filing status as it may arrive from the UI, XML or callers
TaxFilingStatus = Union[FilingStatus, str]

# =============================================================================
# 1. Long-Term Capital Gains Breakpoints (0% / 15% / 20%)
# =============================================================================
# (top of 0% bracket, top of 15% bracket) on total taxable income
CAPGAINS_THRESHOLDS: Dict[FilingStatus, Tuple[float, float]] = {
    FilingStatus.SINGLE: (48_350, 533_400),
    FilingStatus.MARRIED_JOINT: (96_700, 600_050),
    FilingStatus.MARRIED_SEPARATE: (48_350, 300_000),
    FilingStatus.HEAD_OF_HOUSEHOLD: (64_750, 566_700),
}

DEFAULT_FILING_STATUS = FilingStatus.MARRIED_JOINT

# =============================================================================
# 2. Filing Status Aliases
# =============================================================================
FILING_STATUS_ALIASES: Dict[str, FilingStatus] = {
    "marriedjoint": FilingStatus.MARRIED_JOINT,
    "married_filing_jointly": FilingStatus.MARRIED_JOINT,
    "mfj": FilingStatus.MARRIED_JOINT,
    "marriedseparate": FilingStatus.MARRIED_SEPARATE,
    "married_filing_separately": FilingStatus.MARRIED_SEPARATE,
    "mfs": FilingStatus.MARRIED_SEPARATE,
    "headofhousehold": FilingStatus.HEAD_OF_HOUSEHOLD,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
}


def normalize_filing_status(filing_status: TaxFilingStatus) -> Union[FilingStatus, None]:
    """
    Maps a filing status (enum, snake_case or camelCase string) onto FilingStatus.
    Returns None when the status is not recognised.
    """
    if isinstance(filing_status, FilingStatus):
        return filing_status
    if filing_status is None:
        return None

    key = str(filing_status).strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return FilingStatus(key)
    except ValueError:
        pass
    return FILING_STATUS_ALIASES.get(key) or FILING_STATUS_ALIASES.get(key.replace("_", ""))


def get_capgains_thresholds(filing_status: TaxFilingStatus) -> Tuple[float, float]:
    """Returns the (0%, 15%) breakpoints, or None if the status is unknown."""
    status = normalize_filing_status(filing_status)
    if status is None:
        return None
    return CAPGAINS_THRESHOLDS[status]
