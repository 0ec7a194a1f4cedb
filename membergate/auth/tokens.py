from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt  # PyJWT
from dateutil import parser as date_parser
from jwt.utils import base64url_decode, base64url_encode

from membergate.auth.config import AuthConfig
from membergate.auth.models import AuthSession

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


def _signing_key(cfg: AuthConfig) -> bytes:
    return cfg.jwt_secret.encode("utf-8")


def create_token(cfg: AuthConfig, *, now: Optional[datetime] = None) -> str:
    """
    Create a signed session token (valid for `cfg.session_ttl_seconds`, 30 days).

    `now` is the issue time; defaults to the current UTC time.
    """
    issued = now or datetime.now(timezone.utc)
    if issued.tzinfo is None:
        issued = issued.replace(tzinfo=timezone.utc)

    claims = AuthSession(authenticated=True, login_date=issued).to_claims()
    claims["iat"] = int(issued.timestamp())
    claims["exp"] = int((issued + timedelta(seconds=cfg.session_ttl_seconds)).timestamp())
    return jwt.encode(claims, _signing_key(cfg), algorithm=TOKEN_ALGORITHM)


def _has_canonical_signature(token: str) -> bool:
    # base64url leaves spare bits in the last character; reject encodings that
    # decode to the same bytes but differ in text.
    parts = token.split(".")
    if len(parts) != 3 or not parts[2]:
        return False
    try:
        sig = parts[2].encode("ascii")
        return base64url_encode(base64url_decode(sig)) == sig
    except (ValueError, UnicodeEncodeError):
        return False


def verify_token(cfg: AuthConfig, token: object) -> Optional[AuthSession]:
    """
    Verify a session token.

    Returns the embedded session, or None if the token is malformed, forged,
    expired, or carries an unexpected payload. Never raises.
    """
    if not isinstance(token, str) or not token:
        return None
    if not _has_canonical_signature(token):
        logger.debug("Session token rejected")
        return None
    try:
        claims = jwt.decode(
            token,
            key=_signing_key(cfg),
            algorithms=[TOKEN_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
        if not isinstance(claims, dict) or claims.get("authenticated") is not True:
            return None
        login_date = date_parser.isoparse(str(claims.get("loginDate") or ""))
        if login_date.tzinfo is None:
            login_date = login_date.replace(tzinfo=timezone.utc)
        return AuthSession(authenticated=True, login_date=login_date)
    except (jwt.InvalidTokenError, ValueError, TypeError, OverflowError):
        # Expired, forged and malformed all look the same to the caller.
        logger.debug("Session token rejected")
        return None
