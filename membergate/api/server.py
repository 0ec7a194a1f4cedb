"""
Membership gate HTTP server.

Serves the password login/logout API and guards every other route with the
signed session cookie. Page requests without a valid session are redirected to
`/login?from=<original path>`; API requests get a bare 401.
"""

from __future__ import annotations

import html
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from membergate.auth.config import AuthConfigError, load_auth_config
from membergate.auth.cookies import StarletteCookieStore
from membergate.auth.deps import authenticate_request, get_authenticator, require_session
from membergate.auth.models import AuthSession, format_login_date
from membergate.auth.session import SessionAuthenticator
from membergate.auth.util import LOGIN_PATH, login_redirect_url, sanitize_next_path

logger = logging.getLogger(__name__)

# Shown for every failed login; never says which check failed.
INVALID_PASSWORD_MESSAGE = "パスワードが正しくありません"
MISSING_PASSWORD_MESSAGE = "パスワードを入力してください"

_PUBLIC_PATHS = {
    "/healthz",
    "/favicon.ico",
    LOGIN_PATH,
    "/api/auth/login",
    # Allow logout even if the cookie is already missing/invalid.
    "/api/auth/logout",
}


def _is_public_path(path: str) -> bool:
    return path in _PUBLIC_PATHS


def _is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def _is_form_post(request: Request) -> bool:
    ctype = (request.headers.get("content-type") or "").split(";", 1)[0].strip().lower()
    return ctype in ("application/x-www-form-urlencoded", "multipart/form-data")


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = ""
    next_path: Optional[str] = Field(default=None, alias="from")


router = APIRouter()


@router.get("/healthz")
def healthz() -> Dict[str, Any]:
    return {"ok": True}


@router.post("/api/auth/login")
def auth_login(request: Request, body: LoginRequest) -> JSONResponse:
    """
    Membership password login.

    On success the signed session cookie is set and the sanitized post-login
    destination is returned as `redirectTo`.
    """
    auth = get_authenticator(request)
    client = request.client.host if request.client else "-"

    if not body.password:
        return JSONResponse(status_code=400, content={"success": False, "error": MISSING_PASSWORD_MESSAGE})

    if not auth.verify_password(body.password):
        logger.info("Login failed (client=%s)", client)
        resp = JSONResponse(status_code=401, content={"success": False, "error": INVALID_PASSWORD_MESSAGE})
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(content={"success": True, "redirectTo": sanitize_next_path(body.next_path)})
    resp.headers["Cache-Control"] = "no-store"
    auth.set_session_cookie(StarletteCookieStore(request, resp), auth.create_token())
    logger.info("Login succeeded (client=%s)", client)
    return resp


@router.post("/api/auth/logout")
def auth_logout(request: Request) -> Response:
    """
    Clear the session cookie.

    HTML form posts are sent back to the login page; API callers get JSON.
    """
    auth = get_authenticator(request)
    resp: Response
    if _is_form_post(request):
        resp = RedirectResponse(url=LOGIN_PATH, status_code=303)
    else:
        resp = JSONResponse(content={"success": True})
    resp.headers["Cache-Control"] = "no-store"
    auth.clear_session(StarletteCookieStore(request, resp))
    return resp


@router.get("/api/auth/session")
def auth_session(session: AuthSession = Depends(require_session)) -> Dict[str, Any]:
    return {"authenticated": session.authenticated, "loginDate": format_login_date(session.login_date)}


_LOGIN_PAGE = """<!doctype html>
<html lang="ja">
<head><meta charset="utf-8"><title>ログイン</title></head>
<body>
<form id="login">
  <label for="password">パスワード</label>
  <input type="password" id="password" name="password" required>
  <input type="hidden" id="from" value="{next_path}">
  <button type="submit">ログイン</button>
  <p id="error" role="alert"></p>
</form>
<script>
document.getElementById("login").addEventListener("submit", async (e) => {{
  e.preventDefault();
  const r = await fetch("/api/auth/login", {{
    method: "POST",
    headers: {{"Content-Type": "application/json"}},
    body: JSON.stringify({{password: document.getElementById("password").value,
                          from: document.getElementById("from").value}}),
  }});
  const data = await r.json();
  if (r.ok) {{ window.location.assign(data.redirectTo || "/"); }}
  else {{ document.getElementById("error").textContent = data.error || "ログインに失敗しました"; }}
}});
</script>
</body>
</html>
"""

_HOME_PAGE = """<!doctype html>
<html lang="ja">
<head><meta charset="utf-8"><title>記事分析 AI</title></head>
<body>
<p>ログイン日時: {login_date}</p>
<form method="post" action="/api/auth/logout">
  <input type="hidden" name="logout" value="1">
  <button type="submit">ログアウト</button>
</form>
</body>
</html>
"""


@router.get(LOGIN_PATH, response_class=HTMLResponse)
def login_page(next_path: str = Query("/", alias="from")) -> HTMLResponse:
    return HTMLResponse(_LOGIN_PAGE.format(next_path=html.escape(sanitize_next_path(next_path), quote=True)))


@router.get("/", response_class=HTMLResponse)
def home_page(session: AuthSession = Depends(require_session)) -> HTMLResponse:
    return HTMLResponse(_HOME_PAGE.format(login_date=html.escape(format_login_date(session.login_date))))


async def _auth_middleware(request: Request, call_next):
    """Enforce the session cookie on every non-public path and log requests."""
    start_time = time.time()
    path = request.url.path or ""
    try:
        if request.method == "OPTIONS" or _is_public_path(path):
            response = await call_next(request)
            logger.debug("%s %s - %d (%.3fs)", request.method, path, response.status_code, time.time() - start_time)
            return response

        # Fail closed: anything not explicitly public requires a valid session.
        session = authenticate_request(request)
        if session is None:
            if _is_api_path(path):
                # No `WWW-Authenticate`: it would pop a browser auth dialog over the login page.
                return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
            return RedirectResponse(url=login_redirect_url(path, request.url.query), status_code=307)

        request.state.session = session
        response = await call_next(request)
        logger.debug("%s %s - %d (%.3fs)", request.method, path, response.status_code, time.time() - start_time)
        return response
    except Exception as e:
        logger.exception("%s %s - ERROR after %.3fs: %s", request.method, path, time.time() - start_time, str(e))
        raise


def create_app(authenticator: Optional[SessionAuthenticator] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Pass `authenticator` to inject configuration explicitly; otherwise it is
    loaded from the environment on startup (or first request).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "authenticator", None) is None:
            try:
                app.state.authenticator = SessionAuthenticator(load_auth_config())
            except AuthConfigError as e:
                logger.error("Auth configuration invalid; refusing to start: %s", str(e))
                raise
        cfg = app.state.authenticator.config
        logger.info("Auth config: environment=%s cookie_secure=%s", cfg.environment, cfg.cookie_secure)
        yield

    app = FastAPI(title="Membership gate", lifespan=lifespan)
    app.state.authenticator = authenticator
    app.middleware("http")(_auth_middleware)
    app.include_router(router)
    return app


app = create_app()


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    import uvicorn

    log_level = os.getenv("LOG_LEVEL", "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    # Map Python logging levels to uvicorn log levels
    uvicorn_log_level = (
        log_level.lower() if log_level.lower() in ["critical", "error", "warning", "info", "debug", "trace"] else "info"
    )

    logger.info("Starting membership gate on %s:%d (log_level=%s)", host, port, log_level)
    uvicorn.run(app, host=host, port=port, log_level=uvicorn_log_level)
