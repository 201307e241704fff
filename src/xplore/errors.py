"""
Xplore error types.

Every failure raised by the client is an XploreError; `code` names the kind.
"""

from typing import Any, Optional

import httpx


class XploreError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class NetworkError(XploreError):
    """Transport failure: connect error, timeout, broken connection."""

    def __init__(self, message: str):
        super().__init__("network_error", message)


class ApiError(XploreError):
    """Non-2xx HTTP response. The body is not interpreted."""

    def __init__(self, status_code: int, headers: Optional[httpx.Headers] = None, url: Optional[str] = None):
        super().__init__("api_error", f"Request failed with status: {status_code}", {"status_code": status_code})
        self.status_code = status_code
        self.headers = headers if headers is not None else httpx.Headers()
        self.url = url


class AuthError(XploreError):
    def __init__(self, message: str, code: str = "auth_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class RateLimitError(XploreError):
    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__("rate_limit", message)


class InvalidResponseError(XploreError):
    def __init__(self, message: str):
        super().__init__("invalid_response", message)


class CookieError(XploreError):
    def __init__(self, message: str):
        super().__init__("cookie_error", message)


class JsonError(XploreError):
    def __init__(self, message: str):
        super().__init__("json_error", message)


class IoError(XploreError):
    def __init__(self, message: str):
        super().__init__("io_error", message)
