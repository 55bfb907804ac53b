import threading

import numpy as np
import pytest

from engine import simulate
from engine.market_generator import generate_annual_returns
from engine.simulator import MonteCarloSimulator, run_trial, simulation_ages, summarize_trials
from models import (
    AccountType,
    FilingStatus,
    InvalidScenarioError,
    InvestmentAccount,
    PlannerInputs,
    SimulationCancelled,
    WithdrawalMode,
    WithdrawalTier,
)


def make_inputs(**overrides):
    params = dict(
        starting_year=2025,
        max_age=95,
        current_age=60,
        retirement_age=65,
        tax_rate=22.0,
        filing_status=FilingStatus.MARRIED_JOINT,
        pre_retirement_return=7.0,
        post_retirement_return=5.0,
        accounts=(
            InvestmentAccount(1, "Brokerage", 200_000, AccountType.TAXABLE, withdrawal_order=1),
            InvestmentAccount(2, "IRA", 400_000, AccountType.TRADITIONAL, withdrawal_order=2, min_age=59.5),
        ),
        withdrawal_tiers=(WithdrawalTier(65, 95, rate=6.0),),
        volatility=15.0,
        nsims=200,
        seed=1234,
    )
    params.update(overrides)
    return PlannerInputs(**params)


def test_returns_stay_within_volatility_band():
    rng = np.random.default_rng(0)
    ages = np.arange(60, 70)
    returns = generate_annual_returns(rng, ages, 65, 7.0, 5.0, 10.0)

    assert returns.shape == (10,)
    assert np.all(returns[:5] >= -0.03) and np.all(returns[:5] <= 0.17)
    assert np.all(returns[5:] >= -0.05) and np.all(returns[5:] <= 0.15)


def test_zero_volatility_is_deterministic_base_return():
    rng = np.random.default_rng(0)
    returns = generate_annual_returns(rng, np.arange(63, 67), 65, 7.0, 5.0, 0.0)
    assert returns.tolist() == pytest.approx([0.07, 0.07, 0.05, 0.05])


def test_horizon_is_capped_at_100():
    ages = simulation_ages(make_inputs(max_age=110))
    assert ages[0] == 60
    assert ages[-1] == 100


def test_trial_does_not_mutate_scenario_accounts():
    inputs = make_inputs()
    run_trial(inputs, 15.0, np.random.SeedSequence(1))
    assert [a.balance for a in inputs.accounts] == [200_000, 400_000]


def test_depleting_trial_reports_depletion_age():
    inputs = make_inputs(
        current_age=65,
        withdrawal_mode=WithdrawalMode.DOLLAR,
        withdrawal_tiers=(WithdrawalTier(65, 95, dollar_amount=200_000),),
    )
    final_balance, depletion_age = run_trial(inputs, 0.0, np.random.SeedSequence(1))
    assert final_balance == 0
    assert depletion_age is not None and 65 <= depletion_age < 70


def test_summary_percentile_indices():
    results = [(float(b), None) for b in range(10)]
    summary = summarize_trials(results)
    # floor(N x p) on the sorted balances
    assert (summary.p10, summary.p25, summary.p50, summary.p75, summary.p90) == (1, 2, 5, 7, 9)
    assert summary.total_simulations == 10


def test_summary_survival_counts_depletion_at_or_before_checkpoint():
    results = [(0.0, 70), (0.0, 85), (10.0, None), (5.0, None)]
    summary = summarize_trials(results, checkpoint_ages=(70, 80, 90))
    assert summary.survival_probabilities == {70: 0.75, 80: 0.75, 90: 0.5}


def test_summary_reports_zero_past_horizon():
    results = [(10.0, None), (0.0, 75)]
    summary = summarize_trials(results, checkpoint_ages=(70, 80, 90), horizon_age=85)
    assert summary.survival_probabilities == {70: 1.0, 80: 0.5, 90: 0.0}
    assert summary.horizon_age == 85


def test_checkpoints_beyond_max_age_are_not_extrapolated():
    inputs = make_inputs(
        max_age=85,
        accounts=(InvestmentAccount(1, "IRA", 1_000_000, AccountType.TRADITIONAL, withdrawal_order=1),),
        withdrawal_tiers=(WithdrawalTier(65, 85, rate=4.0),),
    )
    summary = simulate(inputs, trials=20, volatility=5.0, processes=1)

    assert summary.survival_probabilities[70] == 1.0
    assert summary.survival_probabilities[80] == 1.0
    for age in (90, 95, 100):
        assert summary.survival_probabilities[age] == 0.0


def test_summary_of_no_trials_is_zero():
    summary = summarize_trials([])
    assert summary.p50 == 0
    assert all(p == 0 for p in summary.survival_probabilities.values())


def test_survival_is_monotone_and_bounded():
    summary = simulate(make_inputs(), processes=1)

    probs = [summary.survival_probabilities[age] for age in (70, 80, 90, 95, 100)]
    assert all(0.0 <= p <= 1.0 for p in probs)
    assert probs == sorted(probs, reverse=True)
    assert summary.survival_probabilities[100] <= summary.survival_probabilities[70]
    assert summary.p10 <= summary.p25 <= summary.p50 <= summary.p75 <= summary.p90


def test_seeded_runs_are_reproducible():
    first = simulate(make_inputs(), trials=50, processes=1)
    second = simulate(make_inputs(), trials=50, processes=1)
    assert first == second


def test_pool_matches_serial_run():
    inputs = make_inputs()
    serial = simulate(inputs, trials=40, processes=1)
    parallel = simulate(inputs, trials=40, processes=2)
    assert serial == parallel


def test_trials_and_volatility_override_inputs():
    summary = simulate(make_inputs(), trials=25, volatility=0.0, processes=1)
    assert summary.total_simulations == 25
    # Without volatility every trial follows the same path
    assert summary.p10 == summary.p90


def test_progress_is_reported_per_trial():
    calls = []
    simulate(make_inputs(), trials=5, processes=1, progress_callback=lambda done, total: calls.append((done, total)))
    assert calls == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]


def test_cancelled_simulation_raises():
    cancel = threading.Event()

    def cancel_after_three(done, total):
        if done == 3:
            cancel.set()

    with pytest.raises(SimulationCancelled):
        simulate(make_inputs(), trials=10, processes=1,
                 progress_callback=cancel_after_three, cancel_event=cancel)


def test_pool_run_honours_cancel_set_before_start():
    cancel = threading.Event()
    cancel.set()
    calls = []

    with pytest.raises(SimulationCancelled):
        simulate(make_inputs(), trials=10, processes=2,
                 progress_callback=lambda done, total: calls.append(done), cancel_event=cancel)
    assert calls == []


def test_non_positive_trial_count_is_rejected():
    with pytest.raises(InvalidScenarioError):
        simulate(make_inputs(), trials=0)
    with pytest.raises(InvalidScenarioError):
        MonteCarloSimulator(make_inputs(), nsims=-5)
