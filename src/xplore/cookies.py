"""
Cookie store for a logged-in session.

Cookies are keyed by name (last write wins). The store never performs I/O;
persistence is done by whoever calls `pairs()` / `bulk_replace()`.

All access goes through one lock, held only for the body of each method.
Nothing here awaits, so the lock can never be held across a request.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Mapping, Optional, Union

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CSRF_COOKIE = "ct0"
AUTH_COOKIE = "auth_token"
DEFAULT_COOKIE_DOMAIN = "twitter.com"

HeadersLike = Union[httpx.Headers, Mapping[str, str], Iterable[tuple[str, str]]]


class Cookie(BaseModel):
    name: str
    value: str
    path: Optional[str] = None
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = False


def parse_set_cookie(header: str) -> Optional[Cookie]:
    """Parse one Set-Cookie header value. Returns None if malformed."""
    parts = header.split(";")
    name, sep, value = parts[0].partition("=")
    name = name.strip()
    if not sep or not name:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        value = value[1:-1]

    cookie = Cookie(name=name, value=value)
    for attr in parts[1:]:
        key, _, attr_value = attr.partition("=")
        key = key.strip().lower()
        if key == "path":
            cookie.path = attr_value.strip() or None
        elif key == "domain":
            cookie.domain = attr_value.strip().lstrip(".") or None
        elif key == "secure":
            cookie.secure = True
        elif key == "httponly":
            cookie.http_only = True
    return cookie


def parse_cookie_string(raw: str) -> list[tuple[str, str]]:
    """Split a browser-style `a=1; b=2` string into (name, value) pairs."""
    pairs = []
    for chunk in raw.split(";"):
        name, sep, value = chunk.strip().partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        pairs.append((name, value.strip()))
    return pairs


def _set_cookie_values(headers: HeadersLike) -> list[str]:
    if isinstance(headers, httpx.Headers):
        return headers.get_list("set-cookie")
    items = headers.items() if isinstance(headers, Mapping) else headers
    return [v for k, v in items if k.lower() == "set-cookie"]


class CookieStore:
    def __init__(self, domain: str = DEFAULT_COOKIE_DOMAIN):
        self._domain = domain
        self._cookies: dict[str, Cookie] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cookies)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._cookies

    def merge_from_headers(self, headers: HeadersLike) -> int:
        """Upsert every parseable Set-Cookie header. Returns how many were merged."""
        merged = 0
        for raw in _set_cookie_values(headers):
            cookie = parse_set_cookie(raw)
            if cookie is None:
                logger.debug("Skipping malformed Set-Cookie header")
                continue
            with self._lock:
                self._cookies[cookie.name] = cookie
            logger.debug("Merged cookie %s", cookie.name)
            merged += 1
        return merged

    def to_header_string(self) -> str:
        with self._lock:
            return "; ".join(f"{c.name}={c.value}" for c in self._cookies.values())

    def bulk_replace(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Clear the jar and reinsert each pair with normalized attributes."""
        cookies = [
            Cookie(name=name, value=value, path="/", domain=self._domain, secure=True, http_only=True)
            for name, value in pairs
        ]
        with self._lock:
            self._cookies = {c.name: c for c in cookies}

    def validate_authenticated(self) -> bool:
        with self._lock:
            return CSRF_COOKIE in self._cookies and AUTH_COOKIE in self._cookies

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            cookie = self._cookies.get(name)
            return cookie.value if cookie else None

    @property
    def csrf_token(self) -> Optional[str]:
        return self.get(CSRF_COOKIE)

    def pairs(self) -> list[tuple[str, str]]:
        with self._lock:
            return [(c.name, c.value) for c in self._cookies.values()]

    def cookies(self) -> list[Cookie]:
        with self._lock:
            return [c.model_copy() for c in self._cookies.values()]

    def snapshot(self) -> tuple[str, Optional[str]]:
        """Cookie header and CSRF value, read under a single lock acquisition."""
        with self._lock:
            header = "; ".join(f"{c.name}={c.value}" for c in self._cookies.values())
            csrf = self._cookies.get(CSRF_COOKIE)
            return header, csrf.value if csrf else None

    def clear(self) -> None:
        with self._lock:
            self._cookies = {}
