"""
Pytest config.

Pins the repo root on sys.path so the local `membergate/` package imports even
when pytest is invoked through a global entrypoint without an editable install.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from membergate.auth.config import AuthConfig, load_auth_config  # noqa: E402
from membergate.auth.session import SessionAuthenticator  # noqa: E402

TEST_JWT_SECRET = "test-secret-key-for-testing-purposes-only"
TEST_PASSWORD = "note-members-2026"


@pytest.fixture(autouse=True)
def _isolate_auth_env(monkeypatch: pytest.MonkeyPatch):
    """
    `load_auth_config` is process-cached; clear it around every test and start
    from an environment without any auth variables.
    """
    for name in ("JWT_SECRET", "MEMBERSHIP_PASSWORD", "APP_ENV", "AUTH_COOKIE_SECURE"):
        monkeypatch.delenv(name, raising=False)
    load_auth_config.cache_clear()
    yield
    load_auth_config.cache_clear()


@pytest.fixture
def auth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("MEMBERSHIP_PASSWORD", TEST_PASSWORD)


@pytest.fixture
def auth_cfg() -> AuthConfig:
    return AuthConfig.from_values(jwt_secret=TEST_JWT_SECRET, membership_password=TEST_PASSWORD)


@pytest.fixture
def authenticator(auth_cfg: AuthConfig) -> SessionAuthenticator:
    return SessionAuthenticator(auth_cfg)
