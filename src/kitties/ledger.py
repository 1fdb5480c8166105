"""Ledger for native currency balances.

Balances are integers (discrete currency units). Every account must keep
at least the existential deposit to exist; an account whose balance
drops to zero is reaped (its entry is dropped).

Transfers come in two flavors:
- preserve=True: the payer must keep >= existential_deposit afterwards
  (used for purchases, so a buyer can never empty their account)
- preserve=False: the payer may go below the minimum, in which case the
  account is reaped and any dust is burned

All balance mutations go through here. Never allow negative balances.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from .constants import DEFAULT_EXISTENTIAL_DEPOSIT
from .models import AccountId, Balance

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Raised when the ledger refuses a balance change."""

    def __init__(self, message: str, account: AccountId, amount: Balance) -> None:
        self.account = account
        self.amount = amount
        super().__init__(message)


class InsufficientFundsError(LedgerError):
    """Payer cannot cover the amount (or would fall below the minimum)."""


class ExistentialDepositError(LedgerError):
    """Payee would end up holding less than the existential deposit."""


class Currency(Protocol):
    """Moves funds between accounts atomically with respect to the caller."""

    def transfer(
        self,
        payer: AccountId,
        payee: AccountId,
        amount: Balance,
        preserve: bool = True,
    ) -> None: ...


class Ledger:
    """Tracks native currency balances per account.

    Thread-safety: This class is NOT thread-safe. Concurrent access should
    be synchronized externally.
    """

    balances: dict[AccountId, Balance]
    existential_deposit: Balance

    def __init__(self, existential_deposit: Balance = DEFAULT_EXISTENTIAL_DEPOSIT) -> None:
        if existential_deposit < 0:
            raise ValueError("existential_deposit must be >= 0")
        self.balances = {}
        self.existential_deposit = existential_deposit

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        genesis_balances: dict[AccountId, Balance] | None = None,
    ) -> Ledger:
        """Create a Ledger from the 'ledger' config section.

        Args:
            config: Configuration dict, may contain 'existential_deposit'
            genesis_balances: Starting balances to force-set

        Returns:
            Configured Ledger instance
        """
        ledger = cls(
            existential_deposit=config.get("existential_deposit", DEFAULT_EXISTENTIAL_DEPOSIT)
        )
        for account, amount in (genesis_balances or {}).items():
            ledger.set_balance(account, amount)
        return ledger

    def balance_of(self, account: AccountId) -> Balance:
        """Get balance (0 for unknown accounts)."""
        return self.balances.get(account, 0)

    def account_exists(self, account: AccountId) -> bool:
        return account in self.balances

    def total_issuance(self) -> Balance:
        return sum(self.balances.values())

    def set_balance(self, account: AccountId, amount: Balance) -> None:
        """Force-set a balance (genesis and tests). Zero reaps the account."""
        if amount < 0:
            raise ValueError("balance cannot be negative")
        self._write(account, amount)

    def deposit(self, account: AccountId, amount: Balance) -> None:
        """Mint new funds into an account."""
        if amount < 0:
            raise ValueError("deposit amount cannot be negative")
        new_balance = self.balance_of(account) + amount
        if new_balance < self.existential_deposit:
            raise ExistentialDepositError(
                f"deposit leaves {account} below the existential deposit",
                account=account,
                amount=amount,
            )
        self._write(account, new_balance)

    def can_afford(self, account: AccountId, amount: Balance, preserve: bool = True) -> bool:
        """Check if account can pay amount, optionally keeping the minimum."""
        balance = self.balance_of(account)
        if balance < amount:
            return False
        if preserve and balance - amount < self.existential_deposit:
            return False
        return True

    def transfer(
        self,
        payer: AccountId,
        payee: AccountId,
        amount: Balance,
        preserve: bool = True,
    ) -> None:
        """Move amount from payer to payee.

        A zero amount or a transfer to oneself changes nothing.

        Raises:
            ValueError: If amount is negative
            InsufficientFundsError: If payer cannot cover amount, or would
                drop below the existential deposit with preserve=True
            ExistentialDepositError: If payee would hold less than the
                existential deposit afterwards
        """
        if amount < 0:
            raise ValueError("transfer amount cannot be negative")
        if amount == 0 or payer == payee:
            return

        payer_balance = self.balance_of(payer)
        if payer_balance < amount:
            raise InsufficientFundsError(
                f"{payer} has {payer_balance}, needs {amount}",
                account=payer,
                amount=amount,
            )
        if preserve and payer_balance - amount < self.existential_deposit:
            raise InsufficientFundsError(
                f"{payer} would fall below the existential deposit "
                f"({self.existential_deposit})",
                account=payer,
                amount=amount,
            )
        payee_balance = self.balance_of(payee) + amount
        if payee_balance < self.existential_deposit:
            raise ExistentialDepositError(
                f"{payee} would hold {payee_balance}, below the existential deposit "
                f"({self.existential_deposit})",
                account=payee,
                amount=amount,
            )

        remaining = payer_balance - amount
        if remaining < self.existential_deposit:
            if remaining > 0:
                logger.debug("Reaping %s, burning dust %d", payer, remaining)
            remaining = 0
        self._write(payer, remaining)
        self._write(payee, payee_balance)

    def _write(self, account: AccountId, amount: Balance) -> None:
        if amount == 0:
            self.balances.pop(account, None)
        else:
            self.balances[account] = amount

    def snapshot(self) -> dict[AccountId, Balance]:
        return dict(self.balances)

    def restore(self, snapshot: dict[AccountId, Balance]) -> None:
        self.balances = dict(snapshot)

    def get_all_balances(self) -> dict[AccountId, Balance]:
        """Get snapshot of all balances."""
        return dict(self.balances)
