import logging
import uuid
from threading import Lock
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .account import Account
from .api import ATMErrorResponse, router
from .config import Settings, load_settings
from .logger_config import request_id_var, setup_logging
from .session import Session

log = logging.getLogger("app")

# ---- status -> code mapping ----
STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "UNPROCESSABLE_ENTITY",
}
def code_for(status: int) -> str:
    return STATUS_TO_CODE.get(status, f"HTTP_{status}")

def error_response(status: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": {"code": code_for(status), "message": message, **extra}},
    )

# ---- middleware ----
class EnforceJSONMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # a bodiless POST (e.g. check_balance) has nothing to type-check
        has_body = request.headers.get("content-length", "0") != "0" or "transfer-encoding" in request.headers
        if request.method in {"POST", "PUT", "PATCH"} and has_body:
            ct = request.headers.get("content-type", "").split(";")[0].strip().lower()
            if ct != "application/json":
                log.warning("Unsupported media type: %s %s", request.method, request.url.path)
                return error_response(415, "Content-Type must be application/json")
        return await call_next(request)

class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            request_id_var.reset(token)

@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("ATM started balance=%s", app.state.session.account.get_balance())
    try:
        yield
    finally:
        log.info("ATM stopped")

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_dir)

    app = FastAPI(title="ATM Simulator", lifespan=lifespan)
    # one account and one session per app instance
    app.state.session = Session(Account(settings.initial_balance), settings.pin)
    # requests run in a thread pool; session calls go through this one at a time
    app.state.lock = Lock()

    # middleware
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(EnforceJSONMiddleware)

    # exception handlers
    @app.exception_handler(ATMErrorResponse)
    async def atm_error_handler(request: Request, exc: ATMErrorResponse):
        log.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.kind.value)
        extra = {"kind": exc.kind.value}
        if exc.body:
            extra["result"] = exc.body
        return error_response(exc.status_code, exc.detail, **extra)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        msg = "Invalid request."
        errors = exc.errors()
        if errors:
            err = errors[0]
            loc = ".".join(str(x) for x in err.get("loc", []))
            detail = err.get("msg", "")
            msg = f"{loc}: {detail}" if loc else (detail or msg)
        log.warning("422 validation: %s %s -> %s", request.method, request.url.path, msg)
        return error_response(422, msg)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else code_for(exc.status_code).replace("_", " ").title()
        log.warning("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, detail)
        return error_response(exc.status_code, str(detail))

    # routers
    app.include_router(router)
    return app

app = create_app()
