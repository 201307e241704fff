"""
Request pipeline: signs every call with session material, sends it, decodes
the JSON body and classifies failures.
"""

import json
import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Mapping, MutableMapping, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from xplore.config import REQUEST_TIMEOUT_S, WEB_BASE_URL
from xplore.errors import ApiError, JsonError, NetworkError, XploreError
from xplore.session import Session

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

M = TypeVar("M", bound=BaseModel)
Payload = Union[Any, BaseModel]


def raise_for_errors(payload: Any, error_cls: type[XploreError]) -> None:
    """Raise `error_cls` with the first message of a non-empty `errors` array."""
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if isinstance(errors, list) and errors:
        first = errors[0]
        message = first.get("message") if isinstance(first, dict) else None
        raise error_cls(message or "Unknown error")


class HttpClient:
    def __init__(self, session: Session, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.session = session
        # httpx keeps no cookies of its own; the session CookieStore is the only jar.
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
            timeout=REQUEST_TIMEOUT_S,
            transport=transport,
        )

    def install_headers(
        self, headers: Optional[MutableMapping[str, str]] = None, authenticated: bool = True,
    ) -> MutableMapping[str, str]:
        """Fill `headers` with cookie, CSRF, bearer, guest-token and client headers.

        With authenticated=False only the bearer and client headers are set;
        that is what guest-token activation sends.
        """
        if headers is None:
            headers = {}
        if authenticated:
            cookie_header, csrf = self.session.cookies.snapshot()
            if cookie_header:
                headers["Cookie"] = cookie_header
            if csrf:
                headers["x-csrf-token"] = csrf
        headers["Authorization"] = f"Bearer {self.session.bearer_token}"
        guest = self.session.guest_token
        if authenticated and guest is not None:
            headers["x-guest-token"] = guest.token
        headers["x-twitter-active-user"] = "yes"
        headers["x-twitter-client-language"] = self.session.config.language
        headers["x-twitter-auth-type"] = "OAuth2Client"
        return headers

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            resp = await self._client.send(request)
        except httpx.DecodingError as e:
            raise JsonError(f"Failed to decode body from {request.url}: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"{request.method} {request.url} failed: {e}") from e
        logger.debug("%s %s -> %s", request.method, request.url, resp.status_code)
        if not resp.is_success:
            raise ApiError(resp.status_code, headers=resp.headers, url=str(request.url))
        return resp

    @staticmethod
    def _decode(resp: httpx.Response, model: Optional[type[M]]) -> Payload:
        text = resp.text
        if model is not None:
            try:
                return model.model_validate_json(text)
            except ValidationError as e:
                raise JsonError(f"Unexpected response shape from {resp.request.url}: {e}") from e
        try:
            return json.loads(text)
        except ValueError as e:
            raise JsonError(f"Invalid JSON from {resp.request.url}: {e}") from e

    async def request(
        self,
        method: str,
        url: str,
        json: Optional[Any] = None,
        model: Optional[type[M]] = None,
        authenticated: bool = True,
        capture_cookies: bool = False,
    ) -> tuple[Payload, httpx.Headers]:
        headers = self.install_headers(authenticated=authenticated)
        request = self._client.build_request(method, url, headers=headers, json=json)
        resp = await self._send(request)
        if capture_cookies:
            self.session.cookies.merge_from_headers(resp.headers)
        return self._decode(resp, model), resp.headers

    async def get(self, url: str, model: Optional[type[M]] = None) -> tuple[Payload, httpx.Headers]:
        return await self.request("GET", url, model=model)

    async def post(
        self, url: str, body: Optional[Any] = None, model: Optional[type[M]] = None,
    ) -> tuple[Payload, httpx.Headers]:
        return await self.request("POST", url, json=body, model=model)

    async def request_form(
        self,
        url: str,
        user_name: str,
        form_data: Mapping[str, str],
        model: Optional[type[M]] = None,
    ) -> tuple[Payload, httpx.Headers]:
        """POST a URL-encoded form. These endpoints also want a Referer and session auth type."""
        headers = self.install_headers()
        headers["Content-Type"] = "application/x-www-form-urlencoded"
        headers["Referer"] = f"{WEB_BASE_URL}/{user_name}"
        headers["x-twitter-active-user"] = "yes"
        headers["x-twitter-auth-type"] = "OAuth2Session"
        headers["x-twitter-client-language"] = self.session.config.language
        request = self._client.build_request("POST", url, headers=headers, data=dict(form_data))
        resp = await self._send(request)
        return self._decode(resp, model), resp.headers

    async def request_multipart(
        self,
        url: str,
        files: Mapping[str, Any],
        data: Optional[Mapping[str, str]] = None,
        model: Optional[type[M]] = None,
    ) -> tuple[Payload, httpx.Headers]:
        """POST a multipart form. Used for binary uploads."""
        headers = self.install_headers()
        request = self._client.build_request("POST", url, headers=headers, files=files, data=data)
        resp = await self._send(request)
        return self._decode(resp, model), resp.headers

    async def close(self) -> None:
        await self._client.aclose()
