# engine/simulator.py

import copy
import logging
import math
import multiprocessing as mp
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from models import PlannerInputs, SimulationCancelled, SimulationSummary, InvalidScenarioError

# --- Configuration Imports
from config.market_assumptions import (
    max_simulation_age,
    survival_checkpoint_ages,
    percentile_levels,
)

from engine.withdrawal_engine import WithdrawalEngine
from engine.market_generator import generate_annual_returns
from engine.projector import apply_growth, retirement_withdrawal, total_balance

logger = logging.getLogger(__name__)

# (final_balance, depletion_age or None)
TrialResult = Tuple[float, Optional[int]]

# Scenario shared with pool workers, set once per worker by _init_worker
_WORKER_INPUTS: Optional[PlannerInputs] = None
_WORKER_VOLATILITY: float = 0.0


# =========================================================================
# 1. SINGLE TRIAL LOGIC
# =========================================================================
def simulation_horizon(inputs: PlannerInputs) -> int:
    """Last age any trial simulates."""
    return min(inputs.max_age, max_simulation_age)


def simulation_ages(inputs: PlannerInputs) -> np.ndarray:
    """Ages simulated by every trial: current_age through min(max_age, 100)."""
    return np.arange(inputs.current_age, simulation_horizon(inputs) + 1)


def run_trial(inputs: PlannerInputs, volatility: float, seed_seq: np.random.SeedSequence) -> TrialResult:
    """
    Runs a single simulation path on its own copy of the accounts.
    Only the aggregate balance trajectory is tracked.
    """
    rng = np.random.default_rng(seed_seq)
    ages = simulation_ages(inputs)
    returns = generate_annual_returns(
        rng,
        ages,
        inputs.retirement_age,
        inputs.pre_retirement_return,
        inputs.post_retirement_return,
        volatility,
    )

    current_accounts = copy.deepcopy(list(inputs.accounts))
    engine = WithdrawalEngine(inputs.tax_rate / 100, inputs.filing_status)
    depletion_age = None

    for age, growth_rate in zip(ages.tolist(), returns.tolist()):
        apply_growth(current_accounts, growth_rate)

        if age >= inputs.retirement_age and total_balance(current_accounts) > 0:
            retirement_withdrawal(current_accounts, age, inputs, engine)

        if total_balance(current_accounts) <= 0:
            depletion_age = age
            break

    return max(0.0, total_balance(current_accounts)), depletion_age


def _init_worker(inputs: PlannerInputs, volatility: float):
    global _WORKER_INPUTS, _WORKER_VOLATILITY
    _WORKER_INPUTS = inputs
    _WORKER_VOLATILITY = volatility


def _run_trial_in_worker(seed_seq: np.random.SeedSequence) -> TrialResult:
    return run_trial(_WORKER_INPUTS, _WORKER_VOLATILITY, seed_seq)


# =========================================================================
# 2. RESULTS SUMMARIZER
# =========================================================================
def summarize_trials(results: Sequence[TrialResult],
                     checkpoint_ages: Sequence[int] = survival_checkpoint_ages,
                     horizon_age: Optional[int] = None) -> SimulationSummary:
    """
    Percentiles of the final balances (sorted, index floor(N x p)) and the
    fraction of trials not yet depleted at each checkpoint age.

    Checkpoints past horizon_age (the last simulated age) were never observed
    and report 0.
    """
    n = len(results)
    final_balances = sorted(balance for balance, _ in results)

    percentiles: Dict[str, float] = {}
    for label, p in percentile_levels.items():
        idx = math.floor(n * p)
        percentiles[label] = final_balances[idx] if idx < n else 0.0

    survival: Dict[int, float] = {}
    for checkpoint in checkpoint_ages:
        if n == 0 or (horizon_age is not None and checkpoint > horizon_age):
            survival[checkpoint] = 0.0
            continue
        solvent = sum(
            1 for _, depletion_age in results
            if depletion_age is None or depletion_age > checkpoint
        )
        survival[checkpoint] = solvent / n

    return SimulationSummary(
        p10=percentiles["p10"],
        p25=percentiles["p25"],
        p50=percentiles["p50"],
        p75=percentiles["p75"],
        p90=percentiles["p90"],
        survival_probabilities=survival,
        total_simulations=n,
        horizon_age=horizon_age,
    )


# =========================================================================
# 3. CORE SIMULATION RUNNER
# =========================================================================
class MonteCarloSimulator:
    """
    Runs Monte Carlo trials of the retirement phase under randomized returns
    and aggregates percentile and survival statistics.
    """
    def __init__(self,
                 inputs: PlannerInputs,
                 nsims: Optional[int] = None,
                 volatility: Optional[float] = None,
                 processes: Optional[int] = None):
        self.inputs = inputs
        self.nsims = inputs.nsims if nsims is None else nsims
        self.volatility = inputs.volatility if volatility is None else volatility

        if self.nsims <= 0:
            raise InvalidScenarioError(f"Number of simulations must be positive, got {self.nsims}")

        if processes is None:
            processes = max(1, mp.cpu_count() - 1)  # leave 1 core free
        self.processes = max(1, min(processes, self.nsims))

    def _seed_sequences(self) -> List[np.random.SeedSequence]:
        # One child sequence per trial keeps results independent of scheduling order
        return np.random.SeedSequence(self.inputs.seed).spawn(self.nsims)

    def run_simulation(self,
                       progress_callback: Optional[Callable[[int, int], None]] = None,
                       cancel_event=None) -> SimulationSummary:
        """
        Runs all trials and returns the summary.

        Args:
            progress_callback: Called as (completed, total) after every trial.
            cancel_event: Anything with is_set(); checked between trials.

        Raises:
            SimulationCancelled: if cancel_event is set before all trials finish.
        """
        start = time.perf_counter()
        logger.info(
            f"Starting {self.nsims} Monte Carlo trials "
            f"(volatility {self.volatility}%, {self.processes} process(es))"
        )

        seeds = self._seed_sequences()
        if self.processes == 1:
            results = self._run_serial(seeds, progress_callback, cancel_event)
        else:
            results = self._run_parallel(seeds, progress_callback, cancel_event)

        summary = summarize_trials(results, horizon_age=simulation_horizon(self.inputs))
        logger.info(
            f"Finished {self.nsims} trials in {time.perf_counter() - start:.2f}s; "
            f"median final balance ${summary.p50:,.0f}"
        )
        return summary

    def _check_cancelled(self, cancel_event, completed: int):
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Simulation cancelled after {completed} of {self.nsims} trials")
            raise SimulationCancelled(f"Simulation cancelled after {completed} of {self.nsims} trials")

    def _run_serial(self, seeds, progress_callback, cancel_event) -> List[TrialResult]:
        results: List[TrialResult] = []
        for seed_seq in seeds:
            self._check_cancelled(cancel_event, len(results))
            results.append(run_trial(self.inputs, self.volatility, seed_seq))
            if progress_callback is not None:
                progress_callback(len(results), self.nsims)
        return results

    def _run_parallel(self, seeds, progress_callback, cancel_event) -> List[TrialResult]:
        results: List[TrialResult] = []
        chunksize = max(1, self.nsims // (self.processes * 8))
        self._check_cancelled(cancel_event, 0)

        with mp.Pool(self.processes, initializer=_init_worker,
                     initargs=(self.inputs, self.volatility)) as pool:
            for trial_result in pool.imap_unordered(_run_trial_in_worker, seeds, chunksize=chunksize):
                results.append(trial_result)
                if progress_callback is not None:
                    progress_callback(len(results), self.nsims)
                if len(results) < self.nsims:
                    try:
                        self._check_cancelled(cancel_event, len(results))
                    except SimulationCancelled:
                        pool.terminate()
                        raise
        return results
