"""Read-only view over a verified claim set."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Iterator

from . import jwt as jwt_lib
from .errors import MalformedTokenError

# Claims set by the service itself; callers cannot override them
RESERVED_CLAIMS = ("sub", "iat", "exp")


class TokenClaims(Mapping):
    """
    Claims of a parsed token.

    Behaves as a read-only mapping of the raw payload and adds named
    accessors. `issued_at` and `expires_at` are epoch milliseconds.
    """

    __slots__ = ("_payload", "_subject", "_issued_at", "_expires_at")

    def __init__(self, payload: Dict[str, Any]):
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Token is missing its 'sub' claim")
        try:
            issued_at = jwt_lib.from_numeric_date(payload.get("iat"))
            expires_at = jwt_lib.from_numeric_date(payload.get("exp"))
        except ValueError as e:
            raise MalformedTokenError(f"Invalid timestamp claim: {e}") from e

        self._payload = MappingProxyType(dict(payload))
        self._subject = subject
        self._issued_at = issued_at
        self._expires_at = expires_at

    def __getitem__(self, name: str) -> Any:
        return self._payload[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._payload)

    def __len__(self) -> int:
        return len(self._payload)

    def __repr__(self) -> str:
        return f"TokenClaims(subject={self._subject!r}, expires_at={self._expires_at})"

    @property
    def subject(self) -> str:
        return self._subject

    @property
    def issued_at(self) -> int:
        return self._issued_at

    @property
    def expires_at(self) -> int:
        return self._expires_at

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self._expires_at / 1000, tz=timezone.utc)

    @property
    def custom(self) -> Dict[str, Any]:
        """Caller-supplied claims, without sub/iat/exp."""
        return {k: v for k, v in self._payload.items() if k not in RESERVED_CLAIMS}

    def is_expired(self, now: int) -> bool:
        return self._expires_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._payload)
