from __future__ import annotations

import base64
import os
import re
from urllib.parse import quote

LOGIN_PATH = "/login"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def random_token(nbytes: int = 32) -> str:
    return b64url(os.urandom(nbytes))


def sanitize_next_path(next_path: str | None) -> str:
    """
    Prevent open-redirects: allow only relative paths like `/history`.
    """
    # Browsers drop tabs/newlines from URLs, so strip control characters before checking.
    p = _CONTROL_CHARS.sub("", next_path or "").strip()
    if not p:
        return "/"
    if not p.startswith("/"):
        return "/"
    # Disallow scheme-relative: `//evil.com` (and `/\evil.com`, which browsers normalize).
    if p.startswith("//") or p.startswith("/\\"):
        return "/"
    # Never bounce back to the login page itself.
    if p == LOGIN_PATH or p.startswith(LOGIN_PATH + "?"):
        return "/"
    return p or "/"


def login_redirect_url(path: str, query: str = "") -> str:
    """Login URL that carries the originally requested path (plus query) in `from`."""
    target = path or "/"
    if query:
        target = f"{target}?{query}"
    return f"{LOGIN_PATH}?from={quote(sanitize_next_path(target), safe='/')}"
