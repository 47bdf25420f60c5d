from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

CENT = Decimal("0.01")


def q2(x) -> Decimal:
    if not isinstance(x, Decimal):
        x = Decimal(str(x))
    return x.quantize(CENT, rounding=ROUND_HALF_UP)


def fmt_money(x: Decimal) -> str:
    return f"${q2(x):.2f}"


class AmountParseError(ValueError):
    pass


def parse_amount(text: Optional[str]) -> Decimal:
    """Parse user-typed amount text into a finite Decimal.

    Raises AmountParseError for blank, non-numeric, non-finite or
    out-of-range input. The sign and sub-cent digits are left to the caller.
    """
    if text is None or not text.strip():
        raise AmountParseError("amount is empty")
    try:
        value = Decimal(text.strip())
    except InvalidOperation as e:
        raise AmountParseError(f"not a number: {text!r}") from e
    if not value.is_finite():
        raise AmountParseError(f"not a finite number: {text!r}")
    try:
        q2(value)
    except InvalidOperation as e:
        # too many digits for the decimal context
        raise AmountParseError(f"amount out of range: {text!r}") from e
    return value


class Command(str, Enum):
    CHECK_BALANCE = "check_balance"
    VIEW_HISTORY = "view_history"
    WITHDRAW = "withdraw"
    DEPOSIT = "deposit"

    @property
    def needs_amount(self) -> bool:
        return self in (Command.WITHDRAW, Command.DEPOSIT)

    @classmethod
    def parse(cls, name: str) -> "Command":
        """Accept either the enum value or the button label shown to the user."""
        key = name.strip().lower()
        for command in cls:
            if key in (command.value, command.label.lower()):
                return command
        raise ValueError(f"unknown command: {name!r}")

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Command.CHECK_BALANCE: "Check Balance",
    Command.VIEW_HISTORY: "Transaction History",
    Command.WITHDRAW: "Withdraw",
    Command.DEPOSIT: "Deposit",
}


class TransactionKind(str, Enum):
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"


class ErrorKind(str, Enum):
    WRONG_PIN = "WRONG_PIN"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    NON_POSITIVE_AMOUNT = "NON_POSITIVE_AMOUNT"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind
    amount: Decimal
    text: str

    @classmethod
    def for_deposit(cls, amount: Decimal) -> "HistoryEntry":
        return cls(kind=TransactionKind.DEPOSIT, amount=amount, text=f"Deposited: {fmt_money(amount)}")

    @classmethod
    def for_withdraw(cls, amount: Decimal) -> "HistoryEntry":
        return cls(kind=TransactionKind.WITHDRAW, amount=amount, text=f"Withdrew: {fmt_money(amount)}")


class AuthResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    error: Optional[ErrorKind] = None


class CommandResult(BaseModel):
    """Tagged outcome of Session.dispatch.

    ``ok`` results carry the value for their command; failures carry an
    ``error`` and, for a refused withdrawal, the unchanged balance and the
    shortfall.
    """

    model_config = ConfigDict(frozen=True)

    command: Command
    ok: bool
    error: Optional[ErrorKind] = None
    balance: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    history: Optional[Tuple[HistoryEntry, ...]] = None
    shortfall: Optional[Decimal] = None

    @property
    def empty(self) -> bool:
        return self.history is not None and len(self.history) == 0

    @classmethod
    def failure(cls, command: Command, error: ErrorKind, **fields) -> "CommandResult":
        return cls(command=command, ok=False, error=error, **fields)
