from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, Request

from membergate.auth.config import load_auth_config
from membergate.auth.cookies import StarletteCookieStore
from membergate.auth.models import AuthSession
from membergate.auth.session import SessionAuthenticator

logger = logging.getLogger(__name__)


def get_authenticator(request: Request) -> SessionAuthenticator:
    """
    Return the app's SessionAuthenticator.

    Uses the instance injected via `create_app(authenticator=...)` when present;
    otherwise builds one from the environment (raises AuthConfigError when the
    secrets are missing or weak) and caches it on the app.
    """
    auth = getattr(request.app.state, "authenticator", None)
    if auth is None:
        auth = SessionAuthenticator(load_auth_config())
        request.app.state.authenticator = auth
    return auth


def authenticate_request(request: Request) -> Optional[AuthSession]:
    """
    Authenticate a request from its session cookie.

    Fails closed: anything that does not verify returns None.
    """
    auth = get_authenticator(request)
    return auth.get_session(StarletteCookieStore(request))


def require_session(request: Request) -> AuthSession:
    """FastAPI dependency for handlers that need the verified session."""
    session = getattr(request.state, "session", None)
    if session is None:
        session = authenticate_request(request)
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session
