"""E2E tests for the membership login flow.

These tests require a running server and are executed in CI or manually:

    MEMBERGATE_E2E_URL=http://localhost:8080 MEMBERSHIP_PASSWORD=... pytest -m e2e
"""

import os
import time
from typing import Generator

import pytest
import requests

BASE_URL = os.getenv("MEMBERGATE_E2E_URL", "").rstrip("/")
# Must match the server's MEMBERSHIP_PASSWORD
MEMBERSHIP_PASSWORD = os.getenv("MEMBERSHIP_PASSWORD", "")

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(not BASE_URL, reason="MEMBERGATE_E2E_URL not set"),
]


@pytest.fixture(scope="module")
def wait_for_server() -> Generator[None, None, None]:
    """Wait for server to be ready."""
    max_retries = 30
    for i in range(max_retries):
        try:
            r = requests.get(f"{BASE_URL}/healthz", timeout=2)
            if r.status_code == 200:
                break
        except requests.RequestException:
            if i == max_retries - 1:
                raise Exception("Server failed to start within 30 seconds")
            time.sleep(1)
    yield


def test_healthz_endpoint(wait_for_server):
    r = requests.get(f"{BASE_URL}/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_protected_page_redirects_to_login(wait_for_server):
    r = requests.get(f"{BASE_URL}/", allow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"].startswith("/login?from=")


def test_login_flow(wait_for_server):
    r = requests.post(f"{BASE_URL}/api/auth/login", json={"password": MEMBERSHIP_PASSWORD})
    assert r.status_code == 200, f"Login failed: {r.text}"
    assert r.json()["success"] is True

    cookies = r.cookies
    assert "auth-token" in cookies

    r = requests.get(f"{BASE_URL}/api/auth/session", cookies=cookies)
    assert r.status_code == 200
    assert r.json()["authenticated"] is True


def test_invalid_password(wait_for_server):
    r = requests.post(f"{BASE_URL}/api/auth/login", json={"password": MEMBERSHIP_PASSWORD + "-wrong"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_logout(wait_for_server):
    r = requests.post(f"{BASE_URL}/api/auth/login", json={"password": MEMBERSHIP_PASSWORD})
    assert r.status_code == 200
    cookies = r.cookies

    r = requests.post(f"{BASE_URL}/api/auth/logout", cookies=cookies)
    assert r.status_code == 200
    # Use cookies from logout response (should have expired session cookie)
    logout_cookies = r.cookies

    r = requests.get(f"{BASE_URL}/api/auth/session", cookies=logout_cookies)
    assert r.status_code == 401
