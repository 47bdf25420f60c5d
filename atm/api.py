import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from .display import ERROR_TEXT, WELCOME, render_auth, render_command
from .domain import Command, CommandResult, ErrorKind
from .session import Session

log = logging.getLogger("api")
router = APIRouter()

ERROR_STATUS = {
    ErrorKind.WRONG_PIN: 401,
    ErrorKind.NOT_AUTHENTICATED: 401,
    ErrorKind.INVALID_AMOUNT: 422,
    ErrorKind.NON_POSITIVE_AMOUNT: 422,
    ErrorKind.INSUFFICIENT_FUNDS: 400,
}


class ATMErrorResponse(HTTPException):
    """An ordinary session outcome that the client should show as an error."""

    def __init__(self, kind: ErrorKind, message: str, body: Optional[dict] = None):
        super().__init__(status_code=ERROR_STATUS[kind], detail=message)
        self.kind = kind
        self.body = body or {}


class PinBody(BaseModel):
    pin: str = Field(..., max_length=64, description="PIN as typed on the keypad")


class AmountBody(BaseModel):
    # raw text from the amount field; parsing happens in the session
    amount: Optional[str] = Field(None, description="Amount text, e.g. \"200\" or \"12.50\"")


@contextmanager
def locked_session(request: Request) -> Iterator[Session]:
    """Hold the app lock while touching the session; the core is single-caller."""
    with request.app.state.lock:
        yield request.app.state.session


def command_response(result: CommandResult) -> dict:
    body = result.model_dump(mode="json", exclude_none=True)
    body["display"] = render_command(result)
    if result.command is Command.VIEW_HISTORY:
        body["empty"] = result.empty
    return body


@router.get("/")
def root():
    return {"status": "ok", "message": WELCOME, "docs": "/docs"}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/session")
def session_status(request: Request):
    with locked_session(request) as session:
        return {"authenticated": session.is_authenticated()}


@router.post("/session/authenticate")
def authenticate(request: Request, body: PinBody):
    with locked_session(request) as session:
        result = session.authenticate(body.pin)
    if not result.success:
        raise ATMErrorResponse(result.error, render_auth(result))
    return {**result.model_dump(mode="json", exclude_none=True), "display": render_auth(result)}


# body is optional: check_balance and view_history may be posted without one
@router.post("/commands/{command}")
def run_command(request: Request, command: str, body: AmountBody = AmountBody()):
    try:
        cmd = Command.parse(command)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown command '{command}'")

    with locked_session(request) as session:
        result = session.dispatch(cmd, body.amount)
    if not result.ok:
        raise ATMErrorResponse(result.error, render_command(result), command_response(result))
    log.info("command %s ok", cmd.value)
    return command_response(result)


@router.post("/history/clear")
def clear_history(request: Request):
    with locked_session(request) as session:
        if not session.is_authenticated():
            kind = ErrorKind.NOT_AUTHENTICATED
            raise ATMErrorResponse(kind, ERROR_TEXT[kind])
        session.account.clear_transaction_history()
    return {"status": "ok", "display": "Transaction history cleared."}
