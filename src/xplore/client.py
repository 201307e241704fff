"""
AsyncXplore / Xplore: main client objects.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from xplore.auth import Auth
from xplore.config import ClientConfig
from xplore.cookies import AUTH_COOKIE, CSRF_COOKIE, parse_cookie_string
from xplore.errors import CookieError, IoError
from xplore.rate_limit import ErrorRateLimitStrategy, RateLimitEvent, RateLimitStrategy
from xplore.session import Session
from xplore.transport.http import HttpClient

logger = logging.getLogger(__name__)

_COOKIE_PAIRS = TypeAdapter(list[tuple[str, str]])

PathLike = Union[str, Path]


class AsyncXplore:
    """Async client (primary)."""

    def __init__(
        self,
        cookie: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        rate_limit_strategy: Optional[RateLimitStrategy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = Session(config)
        self.http = HttpClient(self.session, transport=transport)
        self.auth = Auth(self.http)
        self.rate_limit_strategy = rate_limit_strategy or ErrorRateLimitStrategy()
        if cookie:
            self.set_cookie(cookie)

    async def __aenter__(self) -> "AsyncXplore":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    @property
    def authenticated(self) -> bool:
        return self.session.authenticated

    async def login(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        two_factor_secret: Optional[Union[str, bytes]] = None,
    ) -> None:
        await self.auth.login(username, password, email=email, two_factor_secret=two_factor_secret)

    def logout(self) -> None:
        self.auth.logout()

    async def is_logged_in(self) -> bool:
        await self.auth.verify_credentials()
        return True

    # Cookies

    def set_cookie(self, raw: str) -> None:
        """Import a browser cookie string. Rejected unless it holds ct0 and auth_token."""
        pairs = parse_cookie_string(raw)
        names = {name for name, _ in pairs}
        if CSRF_COOKIE not in names or AUTH_COOKIE not in names:
            raise CookieError("Missing essential cookies (ct0 or auth_token)")
        self.session.cookies.bulk_replace(pairs)
        logger.debug("Imported %d cookies from cookie string", len(pairs))

    def get_cookie(self) -> str:
        return self.session.cookies.to_header_string()

    def set_cookies_json(self, json_str: Union[str, bytes]) -> None:
        """Import a JSON array of [name, value] pairs, replacing the jar."""
        try:
            pairs = _COOKIE_PAIRS.validate_json(json_str)
        except ValidationError as e:
            raise CookieError(f"Failed to parse cookie JSON: {e}") from e
        self.session.cookies.bulk_replace(pairs)

    def cookies_json(self) -> str:
        return json.dumps(self.session.cookies.pairs(), indent=2)

    def save_cookies(self, path: PathLike) -> None:
        """Write the jar to `path` as JSON, overwriting the file."""
        try:
            Path(path).write_text(self.cookies_json())
        except OSError as e:
            raise IoError(f"Failed to write cookie file {path}: {e}") from e

    def load_cookies(self, path: PathLike) -> None:
        path = Path(path)
        if not path.exists():
            raise CookieError("Cookie file does not exist")
        try:
            contents = path.read_bytes()
        except OSError as e:
            raise IoError(f"Failed to read cookie file {path}: {e}") from e
        self.set_cookies_json(contents)

    # Requests for collaborators

    def install_headers(self, headers: Optional[MutableMapping[str, str]] = None) -> MutableMapping[str, str]:
        return self.http.install_headers(headers)

    async def request(self, method: str, url: str, json: Optional[Any] = None, **kwargs: Any) -> tuple[Any, httpx.Headers]:
        return await self.http.request(method, url, json=json, **kwargs)

    async def request_form(
        self, url: str, user_name: str, form_data: Mapping[str, str], **kwargs: Any,
    ) -> tuple[Any, httpx.Headers]:
        return await self.http.request_form(url, user_name, form_data, **kwargs)

    async def request_multipart(
        self, url: str, files: Mapping[str, Any], data: Optional[Mapping[str, str]] = None, **kwargs: Any,
    ) -> tuple[Any, httpx.Headers]:
        return await self.http.request_multipart(url, files, data=data, **kwargs)

    async def on_rate_limit(self, event: RateLimitEvent) -> float:
        return await self.rate_limit_strategy.on_rate_limit(event)

    async def close(self) -> None:
        await self.http.close()


class Xplore:
    """Sync wrapper around AsyncXplore. Runs the event loop internally."""

    def __init__(self, **kwargs: Any):
        self._async = AsyncXplore(**kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def auth(self) -> Auth:
        return self._async.auth

    @property
    def session(self) -> Session:
        return self._async.session

    @property
    def authenticated(self) -> bool:
        return self._async.authenticated

    def login(self, username: str, password: str, **kwargs: Any) -> None:
        self._run(self._async.login(username, password, **kwargs))

    def logout(self) -> None:
        self._async.logout()

    def is_logged_in(self) -> bool:
        return self._run(self._async.is_logged_in())

    def set_cookie(self, raw: str) -> None:
        self._async.set_cookie(raw)

    def get_cookie(self) -> str:
        return self._async.get_cookie()

    def save_cookies(self, path: PathLike) -> None:
        self._async.save_cookies(path)

    def load_cookies(self, path: PathLike) -> None:
        self._async.load_cookies(path)

    def install_headers(self, headers: Optional[MutableMapping[str, str]] = None) -> MutableMapping[str, str]:
        return self._async.install_headers(headers)

    def request(self, method: str, url: str, **kwargs: Any) -> tuple[Any, httpx.Headers]:
        return self._run(self._async.request(method, url, **kwargs))

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
