"""
Credential material: the static bearer token and the ephemeral guest token.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

# Public web-client bearer token shipped in the platform's own JS bundle.
BEARER_TOKEN = (
    "AAAAAAAAAAAAAAAAAAAAANRILgAAAAAAnNwIzUejRCOuH5E6I8xnZz4puTs"
    "%3D1Zv7ttfk8LF81IUq16cHjhLTvJu4FA33AGWWjCpTnA"
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GuestToken(BaseModel):
    token: str
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def age(self) -> timedelta:
        return _utcnow() - self.created_at


class GuestActivationResponse(BaseModel):
    """guest/activate.json response body"""
    guest_token: Optional[str] = None
