"""
Simplified tax model for portfolio withdrawals.
Maps an account's tax treatment and the year's taxable income onto an
effective rate. Bracket breakpoints live in utils.tax_utils.
"""
import logging

from models import AccountType
from utils.tax_utils import (
    CAPGAINS_THRESHOLDS,
    DEFAULT_FILING_STATUS,
    TaxFilingStatus,
    get_capgains_thresholds,
)

# Configure logging for filing status fallbacks
logger = logging.getLogger(__name__)


def capital_gains_rate(total_taxable_income: float, filing_status: TaxFilingStatus) -> float:
    """
    Two-breakpoint long-term capital gains lookup.

    Returns:
        float: 0.0, 0.15 or 0.20
    """
    thresholds = get_capgains_thresholds(filing_status)
    if thresholds is None:
        logger.warning(
            f"Unknown filing status '{filing_status}'. "
            "Defaulting to married filing jointly capital gains brackets."
        )
        thresholds = CAPGAINS_THRESHOLDS[DEFAULT_FILING_STATUS]

    bracket0, bracket15 = thresholds
    if total_taxable_income <= bracket0:
        return 0.0
    if total_taxable_income <= bracket15:
        return 0.15
    return 0.20


def account_tax_rate(
    account_type: AccountType,
    total_taxable_income: float,
    flat_rate: float,
    filing_status: TaxFilingStatus = DEFAULT_FILING_STATUS,
) -> float:
    """
    Effective tax rate on a withdrawal from an account of the given type.

    Args:
        account_type: Tax treatment of the account.
        total_taxable_income: Income used for the capital gains bracket lookup.
        flat_rate: Ordinary income rate as a fraction (0.22 for 22%).
        filing_status: Used only for taxable (capital gains) accounts.
    """
    account_type = AccountType(account_type)

    if account_type in (AccountType.ROTH, AccountType.HSA):
        return 0.0
    if account_type == AccountType.TRADITIONAL:
        return flat_rate
    if account_type == AccountType.TAXABLE:
        return capital_gains_rate(total_taxable_income, filing_status)
    raise ValueError(f"No tax treatment defined for account type '{account_type}'")
