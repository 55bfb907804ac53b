# withdrawal_engine.py

import copy
import logging
from typing import List

from engine.tax_engine import account_tax_rate
from models import AccountWithdrawal, FilingStatus, InvestmentAccount, WithdrawalResult

logger = logging.getLogger(__name__)


# Handles logic for prioritizing account withdrawals
#
class WithdrawalEngine:
    """
    Drains accounts in withdrawal_order to meet a cash need, computing the tax
    owed on each account's share.
    """
    def __init__(self, flat_rate: float, filing_status: FilingStatus = FilingStatus.MARRIED_JOINT):
        # flat_rate is the ordinary income rate as a fraction (0.22 for 22%)
        self.flat_rate = flat_rate
        self.filing_status = filing_status

    def _get_withdrawal_order(self, accounts: List[InvestmentAccount], current_age: float) -> list:
        """
        Accounts eligible at current_age, lowest withdrawal_order first.
        Ineligible accounts are skipped for the year, not deferred.
        sorted() is stable, so ties keep their input order.
        """
        eligible = [acct for acct in accounts if current_age >= acct.min_age]
        return sorted(eligible, key=lambda acct: acct.withdrawal_order)

    def withdraw(self,
                 accounts: List[InvestmentAccount],
                 target_amount: float,
                 other_taxable_income: float,
                 current_age: float,
                 simulate_only: bool = False) -> WithdrawalResult:
        """
        The Core Engine: withdraws target_amount following the account priority order.

        Args:
            accounts: Account records; their balances are reduced in place.
            target_amount: The cash needed from the portfolio.
            other_taxable_income: Taxable fixed income already known for the year.
            current_age: Used for the per-account minimum age gate.
            simulate_only: If True, works on a copy and leaves the accounts untouched.

        Returns:
            WithdrawalResult. A shortfall is reported as actual_withdrawn < target_amount.
        """
        working_accounts = accounts
        if simulate_only:
            working_accounts = copy.deepcopy(accounts)

        remaining = target_amount
        result = WithdrawalResult()

        for acct in self._get_withdrawal_order(working_accounts, current_age):
            if remaining <= 0:
                break
            if acct.balance <= 0:
                continue

            amt = min(remaining, acct.balance)

            # Marginal against fixed income only, not earlier withdrawals this pass
            rate = account_tax_rate(
                acct.type,
                other_taxable_income + amt,
                self.flat_rate,
                self.filing_status,
            )
            taxes = amt * rate

            acct.balance -= amt
            remaining -= amt
            result.total_taxes += taxes
            result.withdrawals.append(
                AccountWithdrawal(
                    account_id=acct.id,
                    account_name=acct.name,
                    amount=amt,
                    taxes=taxes,
                )
            )

        result.actual_withdrawn = target_amount - remaining
        if remaining > 0:
            logger.debug(f"Withdrawal shortfall at age {current_age}: ${remaining:,.0f} unmet")

        return result
