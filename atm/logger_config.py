import logging
import os
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
import sys

from .config import DEFAULT_LOG_DIR

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(request_id)s] %(message)s"

# set per request by RequestIDMiddleware; "-" outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIDFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_id_var.get()
        return True


def setup_logging(log_dir: str = DEFAULT_LOG_DIR, level: int = logging.INFO):
    """Configure application-wide logging with console + rotating file."""
    root = logging.getLogger()
    if root.handlers:
        # Avoid double configuration if reloaded
        return

    root.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT)
    request_ids = RequestIDFilter()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    console.addFilter(request_ids)
    root.addHandler(console)

    os.makedirs(log_dir, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        os.path.join(log_dir, "atm.log"), when="midnight", backupCount=7, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)
    file_handler.addFilter(request_ids)
    root.addHandler(file_handler)
