from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from membergate.auth.util import login_redirect_url, random_token, sanitize_next_path


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "/"),
        ("", "/"),
        ("   ", "/"),
        ("/", "/"),
        ("/history", "/history"),
        ("/history?page=2", "/history?page=2"),
        ("https://evil.example/", "/"),
        ("//evil.example/", "/"),
        ("/\\evil.example/", "/"),
        ("history", "/"),
        ("/login", "/"),
        ("/login?from=/x", "/"),
        ("/a\r\nSet-Cookie: x=1", "/aSet-Cookie: x=1"),
        ("/\r/evil.example", "/"),
        ("/\t/evil.example", "/"),
        ("/\r\n/evil.example", "/"),
        ("/\x00/evil.example", "/"),
        ("\t//evil.example", "/"),
        ("/\x7f\\evil.example", "/"),
    ],
)
def test_sanitize_next_path(value, expected: str) -> None:
    assert sanitize_next_path(value) == expected


def test_login_redirect_url_keeps_original_path_and_query() -> None:
    url = login_redirect_url("/history", "page=2&sort=desc")
    parts = urlsplit(url)
    assert parts.path == "/login"
    assert parse_qs(parts.query)["from"] == ["/history?page=2&sort=desc"]


def test_login_redirect_url_root() -> None:
    assert login_redirect_url("/") == "/login?from=/"


def test_random_token_is_long_enough_for_a_signing_key() -> None:
    a = random_token(32)
    b = random_token(32)
    assert a != b
    assert len(a) >= 32
    assert "=" not in a
