from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

SESSION_TTL_SECONDS = 60 * 60 * 24 * 30  # 30 days
MIN_JWT_SECRET_LENGTH = 32
MIN_MEMBERSHIP_PASSWORD_LENGTH = 8

_SECRET_HINT = "Generate a strong secret with: openssl rand -base64 32 (or `python main.py --generate-secret`)"


class AuthConfigError(RuntimeError):
    """Missing or weak secret; the service cannot authenticate anyone until the environment is fixed."""


def _validate_jwt_secret(secret: Optional[str]) -> str:
    if not secret:
        raise AuthConfigError(f"SECURITY ERROR: JWT_SECRET environment variable is not set. {_SECRET_HINT}")
    if len(secret) < MIN_JWT_SECRET_LENGTH:
        raise AuthConfigError(
            f"SECURITY ERROR: JWT_SECRET is too short. "
            f"Must be at least {MIN_JWT_SECRET_LENGTH} characters. {_SECRET_HINT}"
        )
    return secret


def _validate_membership_password(password: Optional[str]) -> str:
    if not password:
        raise AuthConfigError("SECURITY ERROR: MEMBERSHIP_PASSWORD environment variable is not set.")
    if len(password) < MIN_MEMBERSHIP_PASSWORD_LENGTH:
        raise AuthConfigError(
            f"SECURITY ERROR: MEMBERSHIP_PASSWORD is too short. "
            f"Must be at least {MIN_MEMBERSHIP_PASSWORD_LENGTH} characters."
        )
    return password


@dataclass(frozen=True)
class AuthConfig:
    # Secrets (never logged, never trimmed)
    jwt_secret: str
    membership_password: str

    # Cookie / session configuration
    environment: str = "development"
    cookie_secure: bool = False
    session_ttl_seconds: int = SESSION_TTL_SECONDS

    def __post_init__(self) -> None:
        _validate_jwt_secret(self.jwt_secret)
        _validate_membership_password(self.membership_password)

    def __repr__(self) -> str:
        return (
            f"AuthConfig(environment={self.environment!r}, cookie_secure={self.cookie_secure!r}, "
            f"session_ttl_seconds={self.session_ttl_seconds!r})"
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_values(
        cls,
        *,
        jwt_secret: Optional[str],
        membership_password: Optional[str],
        environment: str = "development",
        cookie_secure: Optional[bool] = None,
    ) -> "AuthConfig":
        """
        Build a validated config without reading the process environment.

        `cookie_secure` defaults to True only for the production environment.
        """
        env = (environment or "development").strip().lower()
        return cls(
            jwt_secret=_validate_jwt_secret(jwt_secret),
            membership_password=_validate_membership_password(membership_password),
            environment=env,
            cookie_secure=(env == "production") if cookie_secure is None else bool(cookie_secure),
        )


def _parse_bool(value: Optional[str]) -> Optional[bool]:
    v = (value or "").strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    return None


@lru_cache(maxsize=1)
def load_auth_config() -> AuthConfig:
    """
    Load authentication configuration from environment variables.

    Read once per process and cached; call `load_auth_config.cache_clear()` to reload.

    Raises:
        AuthConfigError: JWT_SECRET / MEMBERSHIP_PASSWORD missing or too short
    """
    return AuthConfig.from_values(
        jwt_secret=os.getenv("JWT_SECRET"),
        membership_password=os.getenv("MEMBERSHIP_PASSWORD"),
        environment=os.getenv("APP_ENV", "") or "development",
        # Explicit override wins; otherwise secure cookies only in production.
        cookie_secure=_parse_bool(os.getenv("AUTH_COOKIE_SECURE")),
    )
