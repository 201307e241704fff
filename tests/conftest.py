"""Scripted upstream server for offline tests, built on httpx.MockTransport."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from xplore.client import AsyncXplore
from xplore.config import FLOW_TASK_URL, GUEST_ACTIVATE_URL, VERIFY_CREDENTIALS_URL

SESSION_COOKIES = [
    "auth_token=a1b2c3; Path=/; Domain=.twitter.com; Secure; HttpOnly",
    "ct0=csrf-1; Path=/; Domain=.twitter.com; Secure",
]


def flow_response(flow_token: str, *subtask_ids: str, cookies: tuple = (), status: int = 200) -> httpx.Response:
    body = {
        "flow_token": flow_token,
        "status": "success",
        "subtasks": [{"subtask_id": s} for s in subtask_ids],
    }
    return httpx.Response(status, json=body, headers=[("set-cookie", c) for c in cookies])


class ScriptedServer:
    """Answers guest activation, then replays one scripted flow response per round."""

    def __init__(
        self,
        flow_responses: Optional[list] = None,
        guest_token: Optional[str] = "1700000000000000000",
        account: Optional[dict[str, Any]] = None,
        fallback: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ):
        self.flow_responses = list(flow_responses or [])
        self.guest_token = guest_token
        self.account = account if account is not None else {"screen_name": "tester"}
        self.fallback = fallback
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url == GUEST_ACTIVATE_URL:
            body = {"guest_token": self.guest_token} if self.guest_token else {}
            return httpx.Response(200, json=body)
        if url == FLOW_TASK_URL:
            assert self.flow_responses, "server received an unscripted flow round"
            return self.flow_responses.pop(0)
        if url == VERIFY_CREDENTIALS_URL:
            return httpx.Response(200, json=self.account)
        if self.fallback is not None:
            return self.fallback(request)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def flow_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url) == FLOW_TASK_URL]

    def flow_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.flow_requests]


@pytest.fixture
def make_client():
    def _make(server: ScriptedServer, **kwargs: Any) -> AsyncXplore:
        return AsyncXplore(transport=server.transport, **kwargs)
    return _make
