# engine/projector.py
#
# Deterministic year-by-year projection from current age to max age
#

import copy
import logging
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from engine.income_calculator import fixed_income_totals, stream_payments, taxable_fixed_income
from engine.withdrawal_engine import WithdrawalEngine
from engine.withdrawal_policy import target_withdrawal
from models import (
    AccountBalance,
    InvestmentAccount,
    PlannerInputs,
    WithdrawalResult,
    YearSnapshot,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------
# Helpers shared with the Monte Carlo simulator
# -----------------------------------------------------------

def total_balance(accounts: Sequence[InvestmentAccount]) -> float:
    return sum(acct.balance for acct in accounts)


def apply_growth(accounts: Sequence[InvestmentAccount], growth_rate: float) -> None:
    """One year of growth on every account; balances never go below zero."""
    for acct in accounts:
        if acct.balance <= 0:
            acct.balance = 0.0
        else:
            acct.balance = max(0.0, acct.balance * (1 + growth_rate))


def base_return(inputs: PlannerInputs, age: int) -> float:
    """Pre- or post-retirement return for the age, in percent."""
    if age >= inputs.retirement_age:
        return inputs.post_retirement_return
    return inputs.pre_retirement_return


def retirement_withdrawal(accounts: List[InvestmentAccount],
                          age: int,
                          inputs: PlannerInputs,
                          engine: WithdrawalEngine) -> Tuple[float, WithdrawalResult]:
    """
    Policy target + waterfall for one retired year.
    The waterfall runs on a copy; its per-account amounts are then applied to
    the live balances by id.

    Returns:
        (target, result)
    """
    balance = total_balance(accounts)
    target = target_withdrawal(age, balance, inputs.withdrawal_tiers, inputs.withdrawal_mode)
    taxable_income = taxable_fixed_income(inputs.income_streams, age)

    result = engine.withdraw(accounts, target, taxable_income, age, simulate_only=True)

    by_id: Dict[int, InvestmentAccount] = {acct.id: acct for acct in accounts}
    for w in result.withdrawals:
        acct = by_id.get(w.account_id)
        if acct is not None:
            acct.balance -= w.amount

    return target, result


# -----------------------------------------------------------
# Projector
# -----------------------------------------------------------

class RetirementProjector:
    """
    Runs one deterministic path. Every call to run() starts from a fresh
    copy of the scenario accounts, so repeated runs are independent.
    """
    def __init__(self, inputs: PlannerInputs):
        self.inputs = inputs
        self.flat_rate = inputs.tax_rate / 100
        self.engine = WithdrawalEngine(self.flat_rate, inputs.filing_status)

    def run(self) -> List[YearSnapshot]:
        inputs = self.inputs
        accounts = copy.deepcopy(list(inputs.accounts))
        snapshots: List[YearSnapshot] = []

        for age in range(inputs.current_age, inputs.max_age + 1):
            snapshot = self._project_year(accounts, age)
            snapshots.append(snapshot)

            if snapshot.balance <= 0:
                logger.debug(f"Portfolio depleted at age {age}; projection stops")
                break

        return snapshots

    def _project_year(self, accounts: List[InvestmentAccount], age: int) -> YearSnapshot:
        inputs = self.inputs
        year = inputs.starting_year + (age - inputs.current_age)
        is_retired = age >= inputs.retirement_age

        # --- 1. Growth ---
        apply_growth(accounts, base_return(inputs, age) / 100)

        # --- 2. Portfolio withdrawal ---
        balance = total_balance(accounts)
        target = 0.0
        result = WithdrawalResult()
        if is_retired and balance > 0:
            target, result = retirement_withdrawal(accounts, age, inputs, self.engine)

        # --- 3. Fixed income and taxes ---
        gross_fixed, taxable_fixed = fixed_income_totals(inputs.income_streams, age)
        fixed_income_taxes = taxable_fixed * self.flat_rate
        total_taxes = result.total_taxes + fixed_income_taxes

        # --- 4. Net income ---
        total_gross_income = result.actual_withdrawn + gross_fixed
        total_net_income = total_gross_income - total_taxes

        ending_balance = max(0.0, total_balance(accounts))
        logger.debug(
            f"Age {age}: balance ${ending_balance:,.0f}, withdrawal ${result.actual_withdrawn:,.0f}, "
            f"taxes ${total_taxes:,.0f}"
        )

        return YearSnapshot(
            age=age,
            year=year,
            balance=ending_balance,
            withdrawal=result.actual_withdrawn,
            target_withdrawal=target,
            gross_fixed_income=gross_fixed,
            total_taxes=total_taxes,
            total_gross_income=total_gross_income,
            total_net_income=total_net_income,
            account_balances=tuple(
                AccountBalance(id=acct.id, name=acct.name, balance=max(0.0, acct.balance))
                for acct in accounts
            ),
            income_streams_detail=tuple(stream_payments(inputs.income_streams, age)),
            withdrawals=tuple(result.withdrawals),
        )


def project(inputs: PlannerInputs) -> List[YearSnapshot]:
    """Ordered yearly snapshots from current_age until max_age or depletion."""
    return RetirementProjector(inputs).run()


# -----------------------------------------------------------
# Display helpers
# -----------------------------------------------------------

def snapshots_to_frame(snapshots: Sequence[YearSnapshot]) -> pd.DataFrame:
    """
    One row per year with whole-dollar values, plus one column per account
    balance and per income stream.
    """
    rows = []
    for snap in snapshots:
        row = {
            "age": snap.age,
            "year": snap.year,
            "balance": snap.balance,
            "withdrawal": snap.withdrawal,
            "target_withdrawal": snap.target_withdrawal,
            "gross_fixed_income": snap.gross_fixed_income,
            "total_taxes": snap.total_taxes,
            "total_gross_income": snap.total_gross_income,
            "total_net_income": snap.total_net_income,
        }
        for acct in snap.account_balances:
            row[f"account: {acct.name}"] = acct.balance
        for stream in snap.income_streams_detail:
            row[f"income: {stream.name}"] = stream.amount
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return df

    # Streams inactive in a given year show as zero
    money_cols = [c for c in df.columns if c not in ("age", "year")]
    df[money_cols] = df[money_cols].fillna(0.0).round(0)
    return df
