"""
Second-factor codes: RFC 6238 TOTP, 6 digits, 30-second step, HMAC-SHA1.
"""

import base64
import binascii
import hashlib
from datetime import datetime
from typing import Optional, Union

import pyotp

from xplore.errors import AuthError

DIGITS = 6
INTERVAL_S = 30
MIN_SECRET_BYTES = 16

TimeLike = Union[int, float, datetime]


def _build(secret_b32: str) -> pyotp.TOTP:
    return pyotp.TOTP(secret_b32, digits=DIGITS, digest=hashlib.sha1, interval=INTERVAL_S)


def _generate(totp: pyotp.TOTP, for_time: Optional[TimeLike]) -> str:
    try:
        return totp.now() if for_time is None else totp.at(for_time)
    except (ValueError, TypeError, OverflowError, binascii.Error) as e:
        raise AuthError(f"Failed to generate TOTP code: {e}") from e


def generate_code(secret: Union[str, bytes], for_time: Optional[TimeLike] = None) -> str:
    """Code for the raw shared secret at `for_time` (default: now)."""
    raw = secret.encode() if isinstance(secret, str) else bytes(secret)
    if len(raw) < MIN_SECRET_BYTES:
        raise AuthError(f"Failed to create TOTP: secret must be at least {MIN_SECRET_BYTES * 8} bits")
    return _generate(_build(base64.b32encode(raw).decode()), for_time)


def decode_base32_secret(secret_b32: str) -> bytes:
    """Raw secret bytes from the base32 form authenticator apps show."""
    normalized = secret_b32.replace(" ", "").upper()
    try:
        return base64.b32decode(normalized + "=" * (-len(normalized) % 8))
    except (binascii.Error, ValueError) as e:
        raise AuthError(f"Failed to create TOTP: invalid base32 secret ({e})") from e


def generate_code_from_base32(secret_b32: str, for_time: Optional[TimeLike] = None) -> str:
    return generate_code(decode_base32_secret(secret_b32), for_time)
