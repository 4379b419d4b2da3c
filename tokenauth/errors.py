"""
Token and configuration errors.

Everything subclasses ValueError so callers that only catch ValueError
(the way the codec reports failures) keep working.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TokenError(ValueError):
    """Base class for per-token failures."""


class MalformedTokenError(TokenError):
    """The token cannot be decoded into a header and a claim set."""


class InvalidSignatureError(TokenError):
    """The token decodes but its signature does not match the key."""


class TokenExpiredError(TokenError):
    """The signature verifies but the token is past its expiration."""

    def __init__(self, message: str = "Token expired", payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.payload: Dict[str, Any] = dict(payload or {})


class ConfigurationError(ValueError):
    """The secret, expiration or policy cannot be used."""
