class ATMError(Exception):
    """Base class for errors raised by the ATM core."""


class InvalidAmountError(ATMError, ValueError):
    """Raised by Account when asked to move a zero or negative amount."""

    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"amount must be > 0, got {amount}")
