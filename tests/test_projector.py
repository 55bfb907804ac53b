import pytest

from engine.projector import project, snapshots_to_frame
from models import (
    AccountType,
    FilingStatus,
    IncomeStream,
    InvestmentAccount,
    PlannerInputs,
    WithdrawalMode,
    WithdrawalTier,
)


def make_inputs(**overrides):
    params = dict(
        starting_year=2025,
        max_age=95,
        current_age=65,
        retirement_age=65,
        tax_rate=22.0,
        filing_status=FilingStatus.MARRIED_JOINT,
        pre_retirement_return=7.0,
        post_retirement_return=5.0,
        accounts=(InvestmentAccount(1, "IRA", 100_000, AccountType.TRADITIONAL, withdrawal_order=1),),
        withdrawal_tiers=(WithdrawalTier(65, 95, rate=4.0),),
    )
    params.update(overrides)
    return PlannerInputs(**params)


def test_first_year_of_single_traditional_account():
    first = project(make_inputs())[0]

    assert first.age == 65
    assert first.year == 2025
    assert first.target_withdrawal == pytest.approx(4_200)
    assert first.withdrawal == pytest.approx(4_200)
    assert first.total_taxes == pytest.approx(924)
    assert first.total_net_income == pytest.approx(3_276)
    assert first.balance == pytest.approx(100_800)
    assert first.account_balances[0].balance == pytest.approx(100_800)


def test_runs_through_max_age():
    snapshots = project(make_inputs())
    assert [s.age for s in snapshots] == list(range(65, 96))
    assert [s.year for s in snapshots][-1] == 2025 + 30


def test_zero_balances_stop_after_first_year():
    inputs = make_inputs(
        current_age=40,
        accounts=(InvestmentAccount(1, "Empty", 0, AccountType.TAXABLE, withdrawal_order=1),),
    )
    snapshots = project(inputs)
    assert len(snapshots) == 1
    assert snapshots[0].age == 40
    assert snapshots[0].balance == 0


def test_no_withdrawals_before_retirement():
    inputs = make_inputs(current_age=60, retirement_age=62)
    snapshots = project(inputs)
    assert snapshots[0].withdrawal == 0
    assert snapshots[0].balance == pytest.approx(107_000)
    assert snapshots[2].age == 62
    assert snapshots[2].withdrawal > 0


def test_fixed_income_is_taxed_at_flat_rate_when_taxable():
    streams = (
        IncomeStream(1, "Pension", 1_000, 60, 95, taxable=True),
        IncomeStream(2, "VA Disability", 500, 60, 95, taxable=False),
    )
    first = project(make_inputs(income_streams=streams))[0]

    assert first.gross_fixed_income == pytest.approx(18_000)
    assert first.total_gross_income == pytest.approx(4_200 + 18_000)
    assert first.total_taxes == pytest.approx(924 + 12_000 * 0.22)
    assert first.total_net_income == pytest.approx(4_200 + 18_000 - 924 - 2_640)
    assert [s.name for s in first.income_streams_detail] == ["Pension", "VA Disability"]


def test_depletion_stops_projection():
    inputs = make_inputs(
        withdrawal_mode=WithdrawalMode.DOLLAR,
        withdrawal_tiers=(WithdrawalTier(65, 95, dollar_amount=60_000),),
    )
    snapshots = project(inputs)
    assert snapshots[-1].balance == 0
    assert snapshots[-1].age < 95
    assert snapshots[-1].withdrawal < 60_000


def test_age_gated_account_is_not_drawn_early():
    accounts = (
        InvestmentAccount(1, "Brokerage", 10_000, AccountType.TAXABLE, withdrawal_order=1),
        InvestmentAccount(2, "401k", 100_000, AccountType.TRADITIONAL, withdrawal_order=2, min_age=59.5),
    )
    inputs = make_inputs(
        current_age=55, retirement_age=55, post_retirement_return=0.0, accounts=accounts,
        withdrawal_mode=WithdrawalMode.DOLLAR,
        withdrawal_tiers=(WithdrawalTier(55, 95, dollar_amount=20_000),),
    )
    snapshots = project(inputs)
    assert snapshots[0].withdrawal == pytest.approx(10_000)
    assert {w.account_id for w in snapshots[0].withdrawals} == {1}
    # Nothing eligible at 56..59; the 401k opens at 60
    assert snapshots[1].withdrawal == 0
    assert snapshots[5].age == 60
    assert snapshots[5].withdrawal == pytest.approx(20_000)


def test_projection_is_idempotent_and_does_not_mutate_inputs():
    inputs = make_inputs()
    first = project(inputs)
    second = project(inputs)

    assert first == second
    assert inputs.accounts[0].balance == 100_000


def test_snapshots_to_frame_rounds_to_whole_dollars():
    streams = (IncomeStream(1, "Pension", 1_000.4, 65, 66, taxable=True, cola=1.0),)
    df = snapshots_to_frame(project(make_inputs(income_streams=streams)))

    assert list(df["age"][:3]) == [65, 66, 67]
    assert df.loc[0, "balance"] == 100_800
    assert df.loc[0, "total_taxes"] == round(924 + 12_004.8 * 0.22)
    assert "account: IRA" in df.columns
    # Stream ended at 66, so later rows are zero
    assert df.loc[2, "income: Pension"] == 0


def test_snapshots_to_frame_empty():
    assert snapshots_to_frame([]).empty
