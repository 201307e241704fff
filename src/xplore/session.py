"""
Session state shared by every request issued through one client.
"""

import logging
from typing import Optional

from xplore.config import ClientConfig
from xplore.cookies import CookieStore
from xplore.tokens import GuestToken

logger = logging.getLogger(__name__)


class Session:
    """Owns the cookie jar, the bearer token and the optional guest token."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.cookies = CookieStore(domain=self.config.cookie_domain)
        self.guest_token: Optional[GuestToken] = None

    @property
    def bearer_token(self) -> str:
        return self.config.bearer_token

    @property
    def authenticated(self) -> bool:
        return self.cookies.validate_authenticated()

    def set_guest_token(self, token: str) -> GuestToken:
        self.guest_token = GuestToken(token=token)
        return self.guest_token

    def delete_guest_token(self) -> None:
        self.guest_token = None

    def reset(self) -> None:
        """Forget everything. Local only; the server is not told."""
        self.guest_token = None
        self.cookies.clear()
        logger.debug("Session reset")
