"""Basic unit tests for the xplore package."""

from xplore import (
    AsyncXplore,
    Xplore,
    XploreError,
    NetworkError,
    ApiError,
    AuthError,
    RateLimitError,
    InvalidResponseError,
    CookieError,
    JsonError,
    IoError,
    SubtaskType,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert Xplore is not None
    assert AsyncXplore is not None


def test_error_hierarchy():
    for cls in (NetworkError, ApiError, AuthError, RateLimitError, InvalidResponseError, CookieError, JsonError, IoError):
        assert issubclass(cls, XploreError)


def test_error_attributes():
    err = XploreError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    api = ApiError(503)
    assert api.code == "api_error"
    assert api.status_code == 503
    assert "503" in str(api)
    assert api.details == {"status_code": 503}

    assert AuthError("denied").code == "auth_error"
    assert RateLimitError().code == "rate_limit"
    assert CookieError("bad").code == "cookie_error"


def test_subtask_type_parse():
    assert SubtaskType.parse("LoginEnterPassword") is SubtaskType.ENTER_PASSWORD
    assert SubtaskType.parse("DenyLoginSubtask") is SubtaskType.DENY
    assert SubtaskType.parse("LoginArkoseChallenge") is SubtaskType.UNKNOWN
    assert SubtaskType.parse("Unknown") is SubtaskType.UNKNOWN
    assert SubtaskType.parse("") is SubtaskType.UNKNOWN
