# market_generator.py
#
# This code generates the annual market returns for one Monte Carlo trial.
# Each year's return is drawn uniformly from base +/- volatility, where the
# base is the pre- or post-retirement return for that year's age. The same
# return is applied to every account (no cross-account correlation).
#

import numpy as np
from numpy.typing import NDArray


def base_return_path(
    ages: NDArray[np.int64],
    retirement_age: int,
    pre_retirement_return: float,
    post_retirement_return: float,
) -> NDArray[np.float64]:
    """Base return (percent) for each simulated age."""
    return np.where(ages >= retirement_age, post_retirement_return, pre_retirement_return).astype(float)


def generate_annual_returns(
    rng: np.random.Generator,
    ages: NDArray[np.int64],
    retirement_age: int,
    pre_retirement_return: float,
    post_retirement_return: float,
    volatility: float,
) -> NDArray[np.float64]:
    """
    Generate one trial's annual growth rates.

    Args:
        rng: The trial's own generator; never shared between trials.
        ages: The simulated ages, one draw per age.
        retirement_age: Ages at or above this use the post-retirement base.
        pre_retirement_return, post_retirement_return: Base returns in percent.
        volatility: Half-width of the uniform band in percent.

    Returns:
        A 1D array of growth rates as fractions (0.05 for 5%).
    """
    base = base_return_path(ages, retirement_age, pre_retirement_return, post_retirement_return)

    # Uniform shock in [-volatility, +volatility)
    shocks = rng.uniform(-volatility, volatility, size=len(ages))

    return (base + shocks) / 100
