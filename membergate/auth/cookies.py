from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from fastapi import Request, Response


class CookieStore(Protocol):
    """Minimal cookie capability the session accessor needs from the host framework."""

    def get_cookie(self, name: str) -> Optional[str]: ...

    def set_cookie(self, name: str, value: str, **attrs: Any) -> None: ...

    def delete_cookie(self, name: str, **attrs: Any) -> None: ...


class StarletteCookieStore:
    """
    Cookie store over a FastAPI request (reads) and response (writes).

    Writes only affect the outgoing response; `get_cookie` keeps returning what
    the client sent with this request.
    """

    def __init__(self, request: Request, response: Optional[Response] = None) -> None:
        self._request = request
        self._response = response

    def _require_response(self) -> Response:
        if self._response is None:
            raise RuntimeError("Cookie store is read-only (no response attached)")
        return self._response

    def get_cookie(self, name: str) -> Optional[str]:
        return self._request.cookies.get(name)

    def set_cookie(self, name: str, value: str, **attrs: Any) -> None:
        self._require_response().set_cookie(key=name, value=value, **attrs)

    def delete_cookie(self, name: str, **attrs: Any) -> None:
        self._require_response().delete_cookie(key=name, **attrs)


class MemoryCookieStore:
    """Dict-backed cookie store (scripts and tests). Records attributes of the last write per cookie."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})
        self.attrs: Dict[str, Dict[str, Any]] = {}

    def get_cookie(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def set_cookie(self, name: str, value: str, **attrs: Any) -> None:
        self.values[name] = value
        self.attrs[name] = dict(attrs)

    def delete_cookie(self, name: str, **attrs: Any) -> None:
        self.values.pop(name, None)
        self.attrs[name] = {**attrs, "max_age": 0}
