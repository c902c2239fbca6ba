from __future__ import annotations

import logging
from typing import Type

from .errors import InsufficientFunds, InsufficientSystemFunds, InvalidAmount, SettlementError

log = logging.getLogger(__name__)


def require_amount(amount: int) -> int:
    # bool is an int subclass; True is not a stake
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(repr(amount))
    return amount


class FundPool:
    """Custodied balance. Never negative, never moves out more than it holds."""

    def __init__(self, balance: int = 0) -> None:
        if balance < 0:
            raise InvalidAmount(f"opening balance {balance}")
        self._balance = int(balance)

    @property
    def balance(self) -> int:
        return self._balance

    def deposit(self, amount: int) -> int:
        self._balance += require_amount(amount)
        log.debug("Pool deposit %d -> balance %d", amount, self._balance)
        return self._balance

    def ensure_covers(
        self, amount: int, error: Type[SettlementError] = InsufficientSystemFunds
    ) -> None:
        if amount > self._balance:
            raise error(f"needs {amount}, pool holds {self._balance}")

    def debit(
        self, amount: int, error: Type[SettlementError] = InsufficientSystemFunds
    ) -> int:
        self.ensure_covers(amount, error)
        self._balance -= amount
        return self._balance

    def withdraw(self, amount: int) -> int:
        require_amount(amount)
        return self.debit(amount, InsufficientFunds)

    def payout(self, amount: int) -> int:
        require_amount(amount)
        return self.debit(amount, InsufficientSystemFunds)
