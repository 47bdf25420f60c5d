import hmac
import logging
from typing import Optional

from .account import Account
from .domain import (
    AmountParseError,
    AuthResult,
    Command,
    CommandResult,
    ErrorKind,
    parse_amount,
    q2,
)

log = logging.getLogger("session")

AUTH_OK_MESSAGE = "Authentication successful. Please choose a transaction."
WRONG_PIN_MESSAGE = "Invalid PIN. Please try again."


class Session:
    """Authentication gate in front of one Account.

    Starts unauthenticated. ``authenticate`` with the configured PIN unlocks
    ``dispatch``; a wrong PIN locks it again. There is no logout.
    """

    def __init__(self, account: Account, pin: str):
        self._account = account
        self._pin = pin
        self._authenticated = False

    @property
    def account(self) -> Account:
        return self._account

    def is_authenticated(self) -> bool:
        return self._authenticated

    def authenticate(self, entered_pin: str) -> AuthResult:
        # compare bytes so non-ascii input doesn't raise
        matched = hmac.compare_digest(
            (entered_pin or "").encode("utf-8"), self._pin.encode("utf-8")
        )
        if matched:
            self._authenticated = True
            log.info("authenticate ok")
            return AuthResult(success=True, message=AUTH_OK_MESSAGE)
        self._authenticated = False
        log.warning("authenticate failed: wrong pin")
        return AuthResult(success=False, message=WRONG_PIN_MESSAGE, error=ErrorKind.WRONG_PIN)

    def dispatch(self, command: Command, amount_text: Optional[str] = None) -> CommandResult:
        if not self._authenticated:
            log.info("dispatch %s refused: not authenticated", command.value)
            return CommandResult.failure(command, ErrorKind.NOT_AUTHENTICATED)

        if command is Command.CHECK_BALANCE:
            return CommandResult(command=command, ok=True, balance=self._account.get_balance())

        if command is Command.VIEW_HISTORY:
            return CommandResult(
                command=command,
                ok=True,
                balance=self._account.get_balance(),
                history=self._account.get_transaction_history(),
            )

        try:
            raw = parse_amount(amount_text)
        except AmountParseError as e:
            log.info("dispatch %s invalid amount: %s", command.value, e)
            return CommandResult.failure(command, ErrorKind.INVALID_AMOUNT)
        # sign is judged on the typed value; 0.001 rounds to 0.00 and is refused too
        amount = q2(raw)
        if raw <= 0 or amount <= 0:
            log.info("dispatch %s non-positive amount=%s", command.value, raw)
            return CommandResult.failure(command, ErrorKind.NON_POSITIVE_AMOUNT, amount=raw)

        if command is Command.DEPOSIT:
            self._account.deposit(amount)
            return CommandResult(command=command, ok=True, amount=amount, balance=self._account.get_balance())

        if command is Command.WITHDRAW:
            if self._account.withdraw(amount):
                return CommandResult(command=command, ok=True, amount=amount, balance=self._account.get_balance())
            balance = self._account.get_balance()
            return CommandResult.failure(
                command,
                ErrorKind.INSUFFICIENT_FUNDS,
                amount=amount,
                balance=balance,
                shortfall=amount - balance,
            )

        raise AssertionError(f"unhandled command: {command!r}")
