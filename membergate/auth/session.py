from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from membergate.auth.config import AuthConfig
from membergate.auth.cookies import CookieStore
from membergate.auth.models import AuthSession
from membergate.auth.password import verify_password
from membergate.auth.tokens import create_token, verify_token

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "auth-token"


def session_cookie_kwargs(cfg: AuthConfig) -> Dict[str, Any]:
    return {
        "max_age": cfg.session_ttl_seconds,
        "httponly": True,
        "secure": cfg.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }


def clear_session_cookie_kwargs(cfg: AuthConfig) -> Dict[str, Any]:
    # Path/SameSite/Secure must match the original cookie or browsers keep it.
    return {
        "httponly": True,
        "secure": cfg.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }


class SessionAuthenticator:
    """
    Password check, token issue/verify and cookie lifecycle for one configuration.

    Stateless apart from the (immutable) config, so a single instance is shared
    across concurrent requests.
    """

    def __init__(self, cfg: AuthConfig) -> None:
        self._cfg = cfg

    @property
    def config(self) -> AuthConfig:
        return self._cfg

    def verify_password(self, candidate: object) -> bool:
        return verify_password(self._cfg, candidate)

    def create_token(self, *, now: Optional[datetime] = None) -> str:
        return create_token(self._cfg, now=now)

    def verify_token(self, token: object) -> Optional[AuthSession]:
        return verify_token(self._cfg, token)

    def get_session(self, store: CookieStore) -> Optional[AuthSession]:
        """
        Read and verify the session cookie.

        Returns None when the cookie is absent, invalid, expired, or cannot be read.
        """
        try:
            token = store.get_cookie(SESSION_COOKIE_NAME)
        except Exception as e:
            logger.warning("Session cookie read failed: %s", type(e).__name__)
            return None
        if not token:
            return None
        return self.verify_token(token)

    def set_session_cookie(self, store: CookieStore, token: str) -> None:
        store.set_cookie(SESSION_COOKIE_NAME, token, **session_cookie_kwargs(self._cfg))

    def clear_session(self, store: CookieStore) -> None:
        store.delete_cookie(SESSION_COOKIE_NAME, **clear_session_cookie_kwargs(self._cfg))
