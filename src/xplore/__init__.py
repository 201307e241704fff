"""
xplore: cookie-session client for the platform's private web API.

Login flow, cookie jar and signed request pipeline.
"""

from xplore.client import Xplore, AsyncXplore
from xplore.auth import Auth, LoginState
from xplore.config import ClientConfig
from xplore.cookies import Cookie, CookieStore
from xplore.session import Session
from xplore.errors import (
    XploreError,
    NetworkError,
    ApiError,
    AuthError,
    RateLimitError,
    InvalidResponseError,
    CookieError,
    JsonError,
    IoError,
)
from xplore.models.flow import SubtaskType
from xplore.rate_limit import (
    RateLimitEvent,
    RateLimitStrategy,
    WaitingRateLimitStrategy,
    ErrorRateLimitStrategy,
)

__version__ = "0.1.0"
__all__ = [
    "Xplore",
    "AsyncXplore",
    "Auth",
    "LoginState",
    "ClientConfig",
    "Cookie",
    "CookieStore",
    "Session",
    "XploreError",
    "NetworkError",
    "ApiError",
    "AuthError",
    "RateLimitError",
    "InvalidResponseError",
    "CookieError",
    "JsonError",
    "IoError",
    "SubtaskType",
    "RateLimitEvent",
    "RateLimitStrategy",
    "WaitingRateLimitStrategy",
    "ErrorRateLimitStrategy",
]
