# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class AccountType(str, Enum):
    TAXABLE = "taxable"
    TRADITIONAL = "traditional"
    ROTH = "roth"
    HSA = "hsa"


class WithdrawalMode(str, Enum):
    PERCENTAGE = "percentage"
    DOLLAR = "dollar"


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"


class InvalidScenarioError(ValueError):
    """Raised when a scenario configuration cannot be projected."""


class SimulationCancelled(RuntimeError):
    """Raised when a Monte Carlo run is abandoned between trials."""


# -----------------------------------------------------------
# Scenario inputs
# -----------------------------------------------------------

@dataclass
class InvestmentAccount:
    # balance is mutated in place by the withdrawal engine; runs work on copies
    id: int
    name: str
    balance: float
    type: AccountType
    withdrawal_order: int
    min_age: float = 0.0


@dataclass(frozen=True)
class IncomeStream:
    id: int
    name: str
    amount: float           # monthly unless is_annual
    start_age: int
    end_age: int            # inclusive
    taxable: bool = True
    cola: float = 0.0       # annual percent
    is_annual: bool = False


@dataclass(frozen=True)
class WithdrawalTier:
    age_start: int
    age_end: int            # inclusive
    rate: float = 0.0       # percent of total balance
    dollar_amount: float = 0.0


@dataclass(frozen=True)
class PlannerInputs:
    # Core
    starting_year: int
    max_age: int
    current_age: int
    retirement_age: int
    tax_rate: float                     # flat ordinary rate, percent
    filing_status: FilingStatus

    # Returns (nominal, percent)
    pre_retirement_return: float
    post_retirement_return: float

    # Portfolio & strategy
    accounts: Tuple[InvestmentAccount, ...] = ()
    income_streams: Tuple[IncomeStream, ...] = ()
    withdrawal_tiers: Tuple[WithdrawalTier, ...] = ()
    withdrawal_mode: WithdrawalMode = WithdrawalMode.PERCENTAGE

    # Monte Carlo
    volatility: float = 15.0            # +/- percent around the base return
    nsims: int = 1000
    seed: Optional[int] = None

    def __post_init__(self):
        if self.current_age > self.retirement_age:
            raise InvalidScenarioError(
                f"Current age {self.current_age} is after retirement age {self.retirement_age}"
            )
        if self.retirement_age > self.max_age:
            raise InvalidScenarioError(
                f"Retirement age {self.retirement_age} is after max age {self.max_age}"
            )
        if self.nsims <= 0:
            raise InvalidScenarioError(f"Number of simulations must be positive, got {self.nsims}")


# -----------------------------------------------------------
# Engine outputs
# -----------------------------------------------------------

@dataclass(frozen=True)
class AccountWithdrawal:
    account_id: int
    account_name: str
    amount: float
    taxes: float


@dataclass
class WithdrawalResult:
    withdrawals: list = field(default_factory=list)
    total_taxes: float = 0.0
    actual_withdrawn: float = 0.0


@dataclass(frozen=True)
class AccountBalance:
    id: int
    name: str
    balance: float


@dataclass(frozen=True)
class StreamPayment:
    id: int
    name: str
    amount: float
    taxable: bool


@dataclass(frozen=True)
class YearSnapshot:
    age: int
    year: int
    balance: float
    withdrawal: float
    target_withdrawal: float
    gross_fixed_income: float
    total_taxes: float
    total_gross_income: float
    total_net_income: float
    account_balances: Tuple[AccountBalance, ...] = ()
    income_streams_detail: Tuple[StreamPayment, ...] = ()
    withdrawals: Tuple[AccountWithdrawal, ...] = ()


@dataclass(frozen=True)
class SimulationSummary:
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    survival_probabilities: Dict[int, float]
    total_simulations: int
    horizon_age: Optional[int] = None    # last simulated age; later checkpoints report 0
