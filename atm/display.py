"""Text shown on the ATM screen for each session outcome."""

from .domain import AuthResult, Command, CommandResult, ErrorKind, fmt_money

WELCOME = "Welcome to ATM. Please authenticate with your PIN."
NO_TRANSACTIONS = "No transactions yet."

ERROR_TEXT = {
    ErrorKind.NOT_AUTHENTICATED: "Please authenticate first with your PIN.",
    ErrorKind.INVALID_AMOUNT: "Invalid input. Please enter a valid amount.",
    ErrorKind.NON_POSITIVE_AMOUNT: "Amount must be greater than zero.",
}


def render_auth(result: AuthResult) -> str:
    return result.message


def render_command(result: CommandResult) -> str:
    if result.error is ErrorKind.INSUFFICIENT_FUNDS:
        return f"Insufficient funds for withdrawal.\nBalance: {fmt_money(result.balance)}"
    if result.error is not None:
        return ERROR_TEXT[result.error]

    if result.command is Command.CHECK_BALANCE:
        return f"Current Balance: {fmt_money(result.balance)}"
    if result.command is Command.VIEW_HISTORY:
        if result.empty:
            return NO_TRANSACTIONS
        return "Transaction History:\n" + "\n".join(e.text for e in result.history)
    if result.command is Command.WITHDRAW:
        return f"Withdrawal of {fmt_money(result.amount)} successful.\nBalance: {fmt_money(result.balance)}"
    return f"Deposit of {fmt_money(result.amount)} successful.\nBalance: {fmt_money(result.balance)}"
