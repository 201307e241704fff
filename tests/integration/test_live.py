"""
Live tests against the real API.

Requires environment variables:
  X_COOKIE_STRING  browser cookie string with ct0 and auth_token
  X_USERNAME / X_PASSWORD (optional): account for the login flow test
  X_EMAIL, X_TWO_FACTOR_SECRET (optional)

Run: XPLORE_INTEGRATION=1 pytest tests/integration/ -v
"""

import os

import pytest

from xplore import AsyncXplore, ApiError, AuthError
from xplore.totp import decode_base32_secret

SKIP = not os.environ.get("XPLORE_INTEGRATION")
COOKIE = os.environ.get("X_COOKIE_STRING", "")
USERNAME = os.environ.get("X_USERNAME", "")
PASSWORD = os.environ.get("X_PASSWORD", "")
TWO_FACTOR_SECRET = os.environ.get("X_TWO_FACTOR_SECRET")

pytestmark = pytest.mark.skipif(SKIP, reason="XPLORE_INTEGRATION not set")


class TestCookieSession:

    @pytest.mark.asyncio
    async def test_cookie_string_verifies(self):
        async with AsyncXplore(cookie=COOKIE) as client:
            assert client.authenticated
            assert await client.is_logged_in()

    @pytest.mark.asyncio
    async def test_garbage_cookies_rejected(self):
        async with AsyncXplore(cookie="ct0=0; auth_token=0") as client:
            with pytest.raises((ApiError, AuthError)):
                await client.is_logged_in()


class TestLoginFlow:

    @pytest.mark.asyncio
    @pytest.mark.skipif(not USERNAME, reason="X_USERNAME not set")
    async def test_login(self):
        async with AsyncXplore() as client:
            await client.login(
                USERNAME, PASSWORD,
                email=os.environ.get("X_EMAIL"),
                two_factor_secret=decode_base32_secret(TWO_FACTOR_SECRET) if TWO_FACTOR_SECRET else None,
            )
            assert client.authenticated
            print(f"  Login finished in {client.auth.rounds} rounds")
