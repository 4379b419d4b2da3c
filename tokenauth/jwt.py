"""
JWT (HS256) implementation using Python standard library only.
Base64url without padding, HMAC-SHA256 signature, exp validation.

Timestamps are handled in epoch milliseconds internally and written to the
payload as NumericDate seconds (fractional when not a whole second).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import math
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .errors import InvalidSignatureError, MalformedTokenError, TokenExpiredError

HEADER: Dict[str, str] = {"alg": "HS256", "typ": "JWT"}

# NumericDate 取值范围: 1970-01-01 到 9999-12-31T23:59:59Z
MAX_NUMERIC_DATE = 253_402_300_799


def _b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    """Base64url decode with automatic padding restoration."""
    s = data.encode("ascii")
    padding = b"=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)


def now_ms() -> int:
    """Return current UNIX timestamp (milliseconds)."""
    return time.time_ns() // 1_000_000


def to_numeric_date(millis: int) -> Any:
    """Epoch milliseconds -> NumericDate seconds (int when whole)."""
    if millis % 1000 == 0:
        return millis // 1000
    return millis / 1000


def from_numeric_date(value: Any) -> int:
    """NumericDate seconds -> epoch milliseconds. Raises ValueError on non-numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"not a NumericDate: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"not a finite NumericDate: {value!r}")
    if not 0 <= value <= MAX_NUMERIC_DATE:
        raise ValueError(f"NumericDate out of range: {value!r}")
    if isinstance(value, int):
        return value * 1000
    return int(round(value * 1000))


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return to_numeric_date(int(round(value.timestamp() * 1000)))
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _sign(signing_input: bytes, key: bytes) -> str:
    return _b64url_encode(hmac.new(key, signing_input, hashlib.sha256).digest())


def encode(payload: Dict[str, Any], key: bytes) -> str:
    """
    Encode a JWT token with HS256.
    Requires payload to contain 'exp' as a NumericDate.
    """
    try:
        if "exp" not in payload:
            raise ValueError("JWT payload missing 'exp'")
        from_numeric_date(payload["exp"])

        header_b64 = _b64url_encode(json.dumps(HEADER, separators=(",", ":")).encode("utf-8"))
        payload_b64 = _b64url_encode(
            json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=_json_default).encode("utf-8")
        )
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
        return f"{header_b64}.{payload_b64}.{_sign(signing_input, key)}"
    except Exception as e:
        # Normalize all errors to ValueError for caller simplicity
        if isinstance(e, ValueError):
            raise
        raise ValueError(f"JWT encode failed: {e}") from e


def _decode_segment(segment: str, what: str) -> Dict[str, Any]:
    try:
        value = json.loads(_b64url_decode(segment).decode("utf-8"))
    except Exception as e:
        # RecursionError from deeply nested JSON included
        raise MalformedTokenError(f"Invalid JWT {what}: {e}") from e
    if not isinstance(value, dict):
        raise MalformedTokenError(f"JWT {what} is not an object")
    return value


def decode(token: str, key: bytes, now: Optional[int] = None) -> Dict[str, Any]:
    """
    Decode and verify a JWT token with HS256.
    - Verifies signature before the payload is trusted
    - Validates 'exp' is present and later than `now` (epoch ms)
    Returns the payload (claims) on success.

    Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
    """
    if not isinstance(token, str) or not token:
        raise MalformedTokenError("JWT must be a non-empty string")
    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedTokenError("Invalid JWT format")

    header_b64, payload_b64, sig_b64 = parts
    header = _decode_segment(header_b64, "header")
    if header.get("alg") != HEADER["alg"] or header.get("typ") != HEADER["typ"]:
        raise MalformedTokenError("Unsupported JWT header")

    try:
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    except UnicodeEncodeError as e:
        raise MalformedTokenError("JWT contains non-ASCII characters") from e
    # Compare encoded forms so non-canonical signature encodings are rejected too
    if not sig_b64.isascii() or not hmac.compare_digest(_sign(signing_input, key), sig_b64):
        raise InvalidSignatureError("Invalid JWT signature")

    payload = _decode_segment(payload_b64, "payload")
    try:
        exp = from_numeric_date(payload.get("exp"))
    except ValueError as e:
        raise MalformedTokenError("Invalid 'exp' in payload") from e

    if now is None:
        now = now_ms()
    if now >= exp:
        raise TokenExpiredError("Token expired", payload=payload)
    return payload
