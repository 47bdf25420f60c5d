import os
from decimal import Decimal

import pytest
import httpx

# ---- Configuration ----
BASE_URL = os.environ.get("ATM_API_URL")
PIN = os.environ.get("ATM_PIN", "1234")

@pytest.fixture(scope="session", autouse=True)
def require_base_url():
    if not BASE_URL:
        pytest.skip("Set ATM_API_URL to a running ATM, e.g. http://127.0.0.1:8000")

@pytest.fixture()
def client():
    # Small timeout to fail fast
    with httpx.Client(base_url=BASE_URL, timeout=10.0) as c:
        yield c

# ---- Helpers ----
def run(client: httpx.Client, command: str, amount=None):
    payload = {"amount": amount} if amount is not None else {}
    return client.post(f"/commands/{command}", json=payload)

# ---- Tests ----

def test_health(client: httpx.Client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_login_deposit_withdraw_roundtrip(client: httpx.Client):
    # the remote ATM keeps state between runs, so only relative checks here
    assert client.post("/session/authenticate", json={"pin": PIN}).status_code == 200
    start = Decimal(run(client, "check_balance").json()["balance"])

    r = run(client, "deposit", "10.25")
    assert r.status_code == 200
    assert Decimal(r.json()["balance"]) == start + Decimal("10.25")

    r = run(client, "withdraw", "10.25")
    assert r.status_code == 200
    assert Decimal(r.json()["balance"]) == start

def test_overdraw_is_refused(client: httpx.Client):
    assert client.post("/session/authenticate", json={"pin": PIN}).status_code == 200
    start = Decimal(run(client, "check_balance").json()["balance"])
    r = run(client, "withdraw", str(start + 1))
    assert r.status_code == 400
    assert r.json()["error"]["kind"] == "INSUFFICIENT_FUNDS"
    assert Decimal(run(client, "check_balance").json()["balance"]) == start

def test_content_type_enforcement(client: httpx.Client):
    r = client.post("/commands/deposit", content="amount=10",
                    headers={"Content-Type": "application/x-www-form-urlencoded"})
    assert r.status_code == 415
