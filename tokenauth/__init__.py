"""
tokenauth: HS256 token issuing and verification (codec on the standard library).
"""
from . import jwt, config
from .claims import TokenClaims
from .config import TokenServiceConfig
from .errors import (
    ConfigurationError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
)
from .keys import SigningKey, derive_signing_key
from .service import TokenService, get_token_service, reset_token_service

__all__ = [
    "jwt",
    "config",
    "TokenClaims",
    "TokenServiceConfig",
    "ConfigurationError",
    "InvalidSignatureError",
    "MalformedTokenError",
    "TokenError",
    "TokenExpiredError",
    "SigningKey",
    "derive_signing_key",
    "TokenService",
    "get_token_service",
    "reset_token_service",
]
