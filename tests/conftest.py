# tests/conftest.py
from decimal import Decimal

import pytest
from starlette.testclient import TestClient

from atm.account import Account
from atm.app import create_app
from atm.config import Settings
from atm.session import Session

PIN = "1234"


@pytest.fixture()
def account():
    return Account(Decimal("1000.00"))


@pytest.fixture()
def session(account):
    return Session(account, PIN)


@pytest.fixture()
def authed(session):
    assert session.authenticate(PIN).success
    return session


@pytest.fixture()
def app(tmp_path):
    # fresh account + session per test
    settings = Settings(pin=PIN, initial_balance=Decimal("1000.00"), log_dir=str(tmp_path / "logs"))
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c
