from decimal import Decimal
import logging
from typing import List, Tuple

from .domain import HistoryEntry, q2
from .errors import InvalidAmountError

log = logging.getLogger("account")


class Account:
    """The single in-memory account: a cent-precise balance plus its log."""

    def __init__(self, initial_balance: Decimal = Decimal("1000.00")):
        if initial_balance < 0:
            raise ValueError("initial_balance must be >= 0")
        self._balance = q2(initial_balance)
        self._history: List[HistoryEntry] = []

    def get_balance(self) -> Decimal:
        return self._balance

    def deposit(self, amount: Decimal) -> None:
        amount = q2(amount)
        if amount <= 0:
            raise InvalidAmountError(amount)
        self._balance += amount
        self._history.append(HistoryEntry.for_deposit(amount))
        log.info("deposit amount=%s new_balance=%s", amount, self._balance)

    def withdraw(self, amount: Decimal) -> bool:
        """
        Subtract `amount` if the balance covers it.
        Returns False, leaving balance and history untouched, on insufficient funds.
        """
        amount = q2(amount)
        if amount <= 0:
            raise InvalidAmountError(amount)
        if amount > self._balance:
            log.info("withdraw insufficient amount=%s balance=%s", amount, self._balance)
            return False
        self._balance -= amount
        self._history.append(HistoryEntry.for_withdraw(amount))
        log.info("withdraw amount=%s new_balance=%s", amount, self._balance)
        return True

    def get_transaction_history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    def clear_transaction_history(self) -> None:
        log.info("history cleared entries=%d", len(self._history))
        self._history.clear()

    def __repr__(self) -> str:
        return f"Account(balance={self._balance}, entries={len(self._history)})"
