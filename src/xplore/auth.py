"""
Login flow: the server-driven onboarding/task.json state machine.

Every round posts one subtask input tagged with the current flow token and
gets back a new flow token plus the next subtasks. Only the first pending
subtask is acted on; a deny anywhere in the list ends the login.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ValidationError

from xplore.config import FLOW_TASK_URL, GUEST_ACTIVATE_URL, VERIFY_CREDENTIALS_URL
from xplore.errors import AuthError, JsonError, XploreError
from xplore.models.flow import FlowInitRequest, FlowResponse, FlowTaskRequest, SubtaskType
from xplore.session import Session
from xplore.tokens import GuestActivationResponse
from xplore.totp import generate_code
from xplore.transport.http import HttpClient, raise_for_errors

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    INIT = "init"
    SUBTASK = "subtask"
    SUCCESS = "success"
    DENIED = "denied"
    ERROR = "error"


class LoginCredentials(BaseModel):
    username: str
    password: str
    email: Optional[str] = None
    two_factor_secret: Optional[Union[str, bytes]] = None


def _js_instrumentation(creds: LoginCredentials) -> list[dict[str, Any]]:
    return [{
        "subtask_id": SubtaskType.JS_INSTRUMENTATION.value,
        "js_instrumentation": {"response": "{}", "link": "next_link"},
    }]


def _enter_user_identifier(creds: LoginCredentials) -> list[dict[str, Any]]:
    return [{
        "subtask_id": SubtaskType.ENTER_USER_IDENTIFIER.value,
        "settings_list": {
            "setting_responses": [{
                "key": "user_identifier",
                "response_data": {"text_data": {"result": creds.username}},
            }],
            "link": "next_link",
        },
    }]


def _enter_password(creds: LoginCredentials) -> list[dict[str, Any]]:
    return [{
        "subtask_id": SubtaskType.ENTER_PASSWORD.value,
        "enter_password": {"password": creds.password, "link": "next_link"},
    }]


def _acid(creds: LoginCredentials) -> list[dict[str, Any]]:
    if not creds.email:
        raise AuthError("Email required for verification")
    return [{
        "subtask_id": SubtaskType.ACID.value,
        "enter_text": {"text": creds.email, "link": "next_link"},
    }]


def _account_duplication_check(creds: LoginCredentials) -> list[dict[str, Any]]:
    return [{
        "subtask_id": SubtaskType.ACCOUNT_DUPLICATION_CHECK.value,
        "check_logged_in_account": {"link": "AccountDuplicationCheck_false"},
    }]


def _two_factor(creds: LoginCredentials) -> list[dict[str, Any]]:
    if not creds.two_factor_secret:
        raise AuthError("Two factor authentication required")
    return [{
        "subtask_id": SubtaskType.TWO_FACTOR_AUTH_CHALLENGE.value,
        "enter_text": {"text": generate_code(creds.two_factor_secret), "link": "next_link"},
    }]


def _alternate_identifier(creds: LoginCredentials) -> list[dict[str, Any]]:
    if not creds.email:
        raise AuthError("Email required for alternate identifier")
    return [{
        "subtask_id": SubtaskType.ENTER_ALTERNATE_IDENTIFIER.value,
        "enter_text": {"text": creds.email, "link": "next_link"},
    }]


def _success(creds: LoginCredentials) -> list[dict[str, Any]]:
    return []


# DENY and UNKNOWN deliberately have no entry.
SUBTASK_HANDLERS: dict[SubtaskType, Callable[[LoginCredentials], list[dict[str, Any]]]] = {
    SubtaskType.JS_INSTRUMENTATION: _js_instrumentation,
    SubtaskType.ENTER_USER_IDENTIFIER: _enter_user_identifier,
    SubtaskType.ENTER_PASSWORD: _enter_password,
    SubtaskType.ACID: _acid,
    SubtaskType.ACCOUNT_DUPLICATION_CHECK: _account_duplication_check,
    SubtaskType.TWO_FACTOR_AUTH_CHALLENGE: _two_factor,
    SubtaskType.ENTER_ALTERNATE_IDENTIFIER: _alternate_identifier,
    SubtaskType.SUCCESS: _success,
}


class Auth:
    def __init__(self, http: HttpClient):
        self._http = http
        self.state = LoginState.INIT
        self.rounds = 0
        self.current_subtask: Optional[str] = None

    @property
    def session(self) -> Session:
        return self._http.session

    async def update_guest_token(self) -> str:
        """Activate a guest token using only the bearer token."""
        payload, _ = await self._http.request(
            "POST", GUEST_ACTIVATE_URL, model=GuestActivationResponse, authenticated=False,
        )
        if not payload.guest_token:
            raise AuthError("Failed to get guest token")
        self.session.set_guest_token(payload.guest_token)
        logger.debug("Guest token acquired")
        return payload.guest_token

    async def _execute_flow_task(self, body: dict[str, Any]) -> FlowResponse:
        payload, _ = await self._http.request("POST", FLOW_TASK_URL, json=body, capture_cookies=True)
        raise_for_errors(payload, AuthError)
        try:
            flow = FlowResponse.model_validate(payload)
        except ValidationError as e:
            raise JsonError(f"Unexpected flow response: {e}") from e

        if any(s.kind is SubtaskType.DENY for s in flow.pending):
            self.state = LoginState.DENIED
            raise AuthError("Login denied")
        return flow

    async def login(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        two_factor_secret: Optional[Union[str, bytes]] = None,
    ) -> None:
        """Run the login flow to completion. Raises on any failed round."""
        creds = LoginCredentials(
            username=username, password=password, email=email, two_factor_secret=two_factor_secret,
        )
        self.state = LoginState.INIT
        self.rounds = 0
        self.current_subtask = None
        try:
            await self._run(creds)
        except XploreError as e:
            if self.state is not LoginState.DENIED:
                self.state = LoginState.ERROR
            e.details = {**(e.details or {}), "round": self.rounds, "subtask": self.current_subtask}
            logger.warning("Login failed at round %d (%s): %s", self.rounds, self.current_subtask, e)
            raise

        self.state = LoginState.SUCCESS
        if not self.session.authenticated:
            logger.warning("Login flow finished but the session is missing ct0 or auth_token")
        logger.info("Login finished after %d rounds", self.rounds)

    async def _run(self, creds: LoginCredentials) -> None:
        await self.update_guest_token()
        flow = await self._execute_flow_task(FlowInitRequest().model_dump())
        max_rounds = self.session.config.max_login_rounds

        while flow.pending:
            subtask = flow.pending[0]
            self.current_subtask = subtask.subtask_id
            self.state = LoginState.SUBTASK
            if self.rounds >= max_rounds:
                raise AuthError(f"Login did not finish within {max_rounds} rounds")

            handler = SUBTASK_HANDLERS.get(subtask.kind)
            if handler is None:
                raise AuthError(f"Unhandled subtask: {subtask.subtask_id}")

            logger.debug("Login round %d: %s", self.rounds + 1, subtask.subtask_id)
            request = FlowTaskRequest(flow_token=flow.flow_token, subtask_inputs=handler(creds))
            flow = await self._execute_flow_task(request.model_dump())
            self.rounds += 1

        self.current_subtask = None

    def logout(self) -> None:
        """Drop the guest token and every cookie. Nothing is sent to the server."""
        self.session.reset()
        self.state = LoginState.INIT
        self.rounds = 0
        self.current_subtask = None

    async def verify_credentials(self) -> dict[str, Any]:
        """Check the current cookies against the account endpoint."""
        payload, _ = await self._http.get(VERIFY_CREDENTIALS_URL)
        raise_for_errors(payload, AuthError)
        return payload
