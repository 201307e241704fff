"""
Login flow wire models: onboarding/task.json requests and responses.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class SubtaskType(str, Enum):
    JS_INSTRUMENTATION = "LoginJsInstrumentationSubtask"
    ENTER_USER_IDENTIFIER = "LoginEnterUserIdentifierSSO"
    ENTER_PASSWORD = "LoginEnterPassword"
    ACID = "LoginAcid"
    ACCOUNT_DUPLICATION_CHECK = "AccountDuplicationCheck"
    TWO_FACTOR_AUTH_CHALLENGE = "LoginTwoFactorAuthChallenge"
    ENTER_ALTERNATE_IDENTIFIER = "LoginEnterAlternateIdentifierSubtask"
    SUCCESS = "LoginSuccessSubtask"
    DENY = "DenyLoginSubtask"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, subtask_id: str) -> "SubtaskType":
        """Map a server subtask id to a known type. Never raises."""
        if subtask_id == cls.UNKNOWN.value:
            return cls.UNKNOWN
        try:
            return cls(subtask_id)
        except ValueError:
            return cls.UNKNOWN


class Subtask(BaseModel):
    subtask_id: str

    @property
    def kind(self) -> SubtaskType:
        return SubtaskType.parse(self.subtask_id)


class FlowInitRequest(BaseModel):
    flow_name: str = "login"
    input_flow_data: dict[str, Any] = {
        "flow_context": {
            "debug_overrides": {},
            "start_location": {"location": "splash_screen"},
        }
    }


class FlowTaskRequest(BaseModel):
    flow_token: str
    subtask_inputs: list[dict[str, Any]] = []


class FlowResponse(BaseModel):
    flow_token: str
    status: Optional[str] = None
    subtasks: Optional[list[Subtask]] = None

    @property
    def pending(self) -> list[Subtask]:
        return self.subtasks or []
