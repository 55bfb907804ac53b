import pytest

from engine.withdrawal_policy import (
    anchor_tiers,
    next_tier,
    preset_strategy,
    target_withdrawal,
)
from models import AccountType, InvestmentAccount, WithdrawalMode, WithdrawalTier

TIERS = [
    WithdrawalTier(65, 70, rate=3.5, dollar_amount=50_000),
    WithdrawalTier(71, 80, rate=4.0, dollar_amount=60_000),
]


def test_percentage_mode_uses_tier_rate():
    assert target_withdrawal(66, 1_000_000, TIERS, WithdrawalMode.PERCENTAGE) == pytest.approx(35_000)
    assert target_withdrawal(71, 1_000_000, TIERS, WithdrawalMode.PERCENTAGE) == pytest.approx(40_000)


def test_dollar_mode_uses_tier_amount():
    assert target_withdrawal(70, 1_000_000, TIERS, WithdrawalMode.DOLLAR) == 50_000
    assert target_withdrawal(80, 10, TIERS, WithdrawalMode.DOLLAR) == 60_000


def test_first_matching_tier_wins():
    overlapping = [WithdrawalTier(65, 75, rate=3.0), WithdrawalTier(70, 80, rate=6.0)]
    assert target_withdrawal(72, 100_000, overlapping, WithdrawalMode.PERCENTAGE) == pytest.approx(3_000)


def test_uncovered_age_falls_back_to_four_percent():
    assert target_withdrawal(90, 500_000, TIERS, WithdrawalMode.PERCENTAGE) == pytest.approx(20_000)
    assert target_withdrawal(90, 500_000, TIERS, WithdrawalMode.DOLLAR) == pytest.approx(20_000)


def test_empty_tier_set_falls_back_to_four_percent():
    assert target_withdrawal(70, 250_000, [], WithdrawalMode.PERCENTAGE) == pytest.approx(10_000)
    assert target_withdrawal(70, 250_000, (), WithdrawalMode.DOLLAR) == pytest.approx(10_000)


def test_conservative_preset():
    tiers, mode = preset_strategy("conservative", 62, 95)
    assert mode == WithdrawalMode.PERCENTAGE
    assert tiers == [WithdrawalTier(62, 95, 3.5, 45_000)]


def test_moderate_preset_is_anchored_at_retirement():
    tiers, mode = preset_strategy("moderate", 60, 90)
    assert mode == WithdrawalMode.PERCENTAGE
    assert [(t.age_start, t.age_end, t.rate) for t in tiers] == [(60, 65, 3.5), (66, 90, 4.0)]


def test_age_decreasing_preset():
    tiers, _ = preset_strategy("age_decreasing", 65, 95)
    assert [(t.age_start, t.age_end, t.rate, t.dollar_amount) for t in tiers] == [
        (65, 70, 4.5, 70_000),
        (71, 80, 3.5, 55_000),
        (81, 95, 2.5, 40_000),
    ]


def test_aggressive_preset():
    tiers, _ = preset_strategy("aggressive", 65, 95)
    assert tiers == [WithdrawalTier(65, 95, 5.0, 75_000)]


def test_die_with_nothing_divides_current_balance():
    accounts = [
        InvestmentAccount(1, "A", 400_000, AccountType.TAXABLE, 1),
        InvestmentAccount(2, "B", 200_000, AccountType.ROTH, 2),
    ]
    tiers, mode = preset_strategy("die_with_nothing", 65, 95, accounts)
    assert mode == WithdrawalMode.DOLLAR
    assert len(tiers) == 1
    assert (tiers[0].age_start, tiers[0].age_end) == (65, 95)
    assert tiers[0].dollar_amount == pytest.approx(20_000)


def test_die_with_nothing_single_year_retirement():
    accounts = [InvestmentAccount(1, "A", 50_000, AccountType.TAXABLE, 1)]
    tiers, _ = preset_strategy("die_with_nothing", 95, 95, accounts)
    assert tiers[0].dollar_amount == pytest.approx(50_000)


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        preset_strategy("yolo", 65, 95)


def test_anchor_tiers_moves_first_tier_and_closes_overlaps():
    tiers = [
        WithdrawalTier(65, 70, 3.5, 50_000),
        WithdrawalTier(71, 80, 4.0, 60_000),
        WithdrawalTier(81, 95, 5.0, 70_000),
    ]
    anchored = anchor_tiers(tiers, 72)
    assert [(t.age_start, t.age_end) for t in anchored] == [(72, 70), (71, 80), (81, 95)]

    earlier = anchor_tiers(tiers, 60)
    assert earlier[0].age_start == 60
    assert [t.rate for t in earlier] == [3.5, 4.0, 5.0]


def test_anchor_tiers_pushes_later_starts():
    tiers = [WithdrawalTier(65, 75, 3.5), WithdrawalTier(70, 90, 4.0)]
    anchored = anchor_tiers(tiers, 65)
    assert anchored[1].age_start == 76


def test_next_tier_starts_after_last_tier():
    tier = next_tier(TIERS, 95)
    assert tier == WithdrawalTier(81, 95, 4.0, 60_000)


def test_next_tier_with_no_tiers_starts_at_retirement():
    assert next_tier([], 95, retirement_age=65).age_start == 65
