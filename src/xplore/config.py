"""
Client configuration and fixed endpoints.
"""

from pydantic import BaseModel, Field

from xplore.cookies import DEFAULT_COOKIE_DOMAIN
from xplore.tokens import BEARER_TOKEN

API_BASE_URL = "https://api.twitter.com"
WEB_BASE_URL = "https://twitter.com"

GUEST_ACTIVATE_URL = f"{API_BASE_URL}/1.1/guest/activate.json"
FLOW_TASK_URL = f"{API_BASE_URL}/1.1/onboarding/task.json"
VERIFY_CREDENTIALS_URL = f"{API_BASE_URL}/1.1/account/verify_credentials.json"

REQUEST_TIMEOUT_S = 30.0
DEFAULT_MAX_LOGIN_ROUNDS = 20


class ClientConfig(BaseModel):
    bearer_token: str = BEARER_TOKEN
    cookie_domain: str = DEFAULT_COOKIE_DOMAIN
    language: str = "en"
    max_login_rounds: int = Field(default=DEFAULT_MAX_LOGIN_ROUNDS, ge=1)
