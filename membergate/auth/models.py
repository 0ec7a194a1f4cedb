from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict


@dataclass(frozen=True)
class AuthSession:
    """Authenticated membership session (lives only inside the signed cookie)."""

    authenticated: bool
    login_date: datetime

    def to_claims(self) -> Dict[str, Any]:
        # Keep the wire names stable: existing cookies carry `loginDate`.
        return {
            "authenticated": self.authenticated,
            "loginDate": format_login_date(self.login_date),
        }


def format_login_date(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a `Z` suffix (e.g. 2026-01-01T12:00:00.000Z)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
