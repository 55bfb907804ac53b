# withdrawal_policy.py
#
# Age-banded withdrawal tiers and the preset strategies that generate them
#

import logging
from typing import List, Sequence, Tuple

from config.market_assumptions import default_withdrawal_rate
from models import InvestmentAccount, WithdrawalMode, WithdrawalTier

logger = logging.getLogger(__name__)

# Amounts used when a new tier is appended after the last one
NEW_TIER_RATE = 4.0
NEW_TIER_DOLLAR_AMOUNT = 60000

PRESET_NAMES = {
    "conservative": "Conservative",
    "moderate": "Moderate",
    "aggressive": "Aggressive",
    "age_decreasing": "Age-Decreasing",
    "die_with_nothing": "Die with Nothing",
}


def find_tier(age: int, tiers: Sequence[WithdrawalTier]):
    """First tier whose [age_start, age_end] band contains age, or None."""
    for tier in tiers:
        if tier.age_start <= age <= tier.age_end:
            return tier
    return None


def target_withdrawal(age: int,
                      total_balance: float,
                      tiers: Sequence[WithdrawalTier],
                      mode: WithdrawalMode) -> float:
    """
    Annual amount the policy asks the portfolio for at this age.
    Tiers are used as given: no reordering or clipping. With no matching
    tier (including an empty tier set) the 4% rule applies in either mode.
    """
    tier = find_tier(age, tiers)
    if tier is None:
        logger.debug(f"No withdrawal tier covers age {age}; using {default_withdrawal_rate}% fallback")
        return total_balance * default_withdrawal_rate / 100

    if WithdrawalMode(mode) == WithdrawalMode.DOLLAR:
        return tier.dollar_amount
    return total_balance * tier.rate / 100


# -----------------------------------------------------------
# Preset strategies
# -----------------------------------------------------------

def _die_with_nothing_tiers(retirement_age: int,
                            max_age: int,
                            accounts: Sequence[InvestmentAccount]) -> List[WithdrawalTier]:
    """
    Spreads today's total balance evenly over the retirement years.
    Computed once; it is not re-derived as balances change during a projection.
    """
    total_investments = sum(acct.balance for acct in accounts)
    # A zero-length retirement is treated as a single year
    years_in_retirement = max(max_age - retirement_age, 1)
    annual_withdrawal = total_investments / years_in_retirement
    return [WithdrawalTier(retirement_age, max_age, rate=0.0, dollar_amount=annual_withdrawal)]


def preset_strategy(key: str,
                    retirement_age: int,
                    max_age: int,
                    accounts: Sequence[InvestmentAccount] = ()) -> Tuple[List[WithdrawalTier], WithdrawalMode]:
    """
    Builds the tier set for a named preset, anchored at retirement_age.

    Returns:
        (tiers, mode): percentage mode for the rate presets, dollar mode for
        die_with_nothing.
    """
    r = retirement_age

    if key == "die_with_nothing":
        return _die_with_nothing_tiers(r, max_age, accounts), WithdrawalMode.DOLLAR

    if key == "conservative":
        tiers = [WithdrawalTier(r, max_age, 3.5, 45000)]
    elif key == "moderate":
        tiers = [
            WithdrawalTier(r, r + 5, 3.5, 50000),
            WithdrawalTier(r + 6, max_age, 4.0, 60000),
        ]
    elif key == "aggressive":
        tiers = [WithdrawalTier(r, max_age, 5.0, 75000)]
    elif key == "age_decreasing":
        tiers = [
            WithdrawalTier(r, r + 5, 4.5, 70000),
            WithdrawalTier(r + 6, r + 15, 3.5, 55000),
            WithdrawalTier(r + 16, max_age, 2.5, 40000),
        ]
    else:
        raise ValueError(f"Unknown withdrawal preset '{key}'. Expected one of {sorted(PRESET_NAMES)}")

    return tiers, WithdrawalMode.PERCENTAGE


# -----------------------------------------------------------
# Tier editing helpers (used by the editor callbacks)
# -----------------------------------------------------------

def anchor_tiers(tiers: Sequence[WithdrawalTier], retirement_age: int) -> List[WithdrawalTier]:
    """
    Moves the first tier to start at retirement_age and pushes each later tier
    so it starts no earlier than the previous tier's end + 1. End ages are kept.
    """
    anchored: List[WithdrawalTier] = []
    for i, tier in enumerate(tiers):
        age_start = tier.age_start
        if i == 0:
            age_start = retirement_age
        elif age_start < anchored[-1].age_end + 1:
            age_start = anchored[-1].age_end + 1
        anchored.append(
            WithdrawalTier(age_start, tier.age_end, tier.rate, tier.dollar_amount)
        )
    return anchored


def next_tier(tiers: Sequence[WithdrawalTier], max_age: int, retirement_age: int = None) -> WithdrawalTier:
    """New tier covering the ages after the last tier through max_age."""
    if tiers:
        age_start = tiers[-1].age_end + 1
    else:
        age_start = retirement_age if retirement_age is not None else max_age
    return WithdrawalTier(age_start, max_age, NEW_TIER_RATE, NEW_TIER_DOLLAR_AMOUNT)
