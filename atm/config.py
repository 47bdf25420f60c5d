import os
from decimal import Decimal

from pydantic import BaseModel, field_validator

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs")


class Settings(BaseModel):
    pin: str = "1234"
    initial_balance: Decimal = Decimal("1000.00")
    log_dir: str = DEFAULT_LOG_DIR

    @field_validator("pin")
    @classmethod
    def non_empty(cls, v):
        if not v:
            raise ValueError("pin must not be empty")
        return v

    @field_validator("initial_balance")
    @classmethod
    def non_negative(cls, v):
        if not v.is_finite() or v < 0:
            raise ValueError("initial_balance must be >= 0")
        return v


def load_settings() -> Settings:
    """Read ATM_* environment variables; unset ones keep their defaults."""
    env = {
        "pin": os.environ.get("ATM_PIN"),
        "initial_balance": os.environ.get("ATM_INITIAL_BALANCE"),
        "log_dir": os.environ.get("ATM_LOG_DIR"),
    }
    return Settings(**{k: v for k, v in env.items() if v is not None})
