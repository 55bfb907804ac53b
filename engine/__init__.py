# engine/__init__.py

from typing import Optional

from models import InvalidScenarioError, PlannerInputs, SimulationSummary

# Deterministic path and its display helper (for the callbacks file)
from .projector import RetirementProjector, project, snapshots_to_frame

# Expose the simulator
from .simulator import MonteCarloSimulator


def simulate(inputs: PlannerInputs,
             trials: Optional[int] = None,
             volatility: Optional[float] = None,
             **kwargs) -> SimulationSummary:
    """
    Monte Carlo summary for the scenario. trials and volatility default to the
    values carried by inputs; other keyword arguments (processes,
    progress_callback, cancel_event) go to MonteCarloSimulator.
    """
    if trials is not None and trials <= 0:
        raise InvalidScenarioError(f"Number of trials must be positive, got {trials}")

    simulator = MonteCarloSimulator(
        inputs,
        nsims=trials,
        volatility=volatility,
        processes=kwargs.pop("processes", None),
    )
    return simulator.run_simulation(**kwargs)
