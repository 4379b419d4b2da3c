"""
Token service configuration.

- JWT secret: explicit value > ENV JWT_SECRET > none (a key is generated)
- Expiration (ms): explicit value > ENV JWT_EXPIRATION_MS > 86400000 (24 hours)
- Short secret policy: explicit value > ENV JWT_SHORT_SECRET_POLICY > "generate"
- Invalid values raise ConfigurationError; nothing is read from files.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION_MILLIS = 86_400_000

_ENV_JWT_SECRET = "JWT_SECRET"
_ENV_JWT_EXPIRATION_MS = "JWT_EXPIRATION_MS"
_ENV_JWT_SHORT_SECRET_POLICY = "JWT_SHORT_SECRET_POLICY"


class TokenServiceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    secret: Optional[str] = Field(None, description="HMAC secret, at least 32 bytes")
    expiration_millis: int = Field(DEFAULT_EXPIRATION_MILLIS, gt=0, description="Token lifetime in milliseconds")
    short_secret_policy: Literal["generate", "pad", "reject"] = Field(
        "generate", description="What to do with an absent or short secret"
    )

    def __repr__(self) -> str:
        # 不输出密钥
        return (
            f"TokenServiceConfig(secret={'***' if self.secret else None}, "
            f"expiration_millis={self.expiration_millis}, "
            f"short_secret_policy={self.short_secret_policy!r})"
        )

    __str__ = __repr__

    @classmethod
    def load(cls, data: Any) -> "TokenServiceConfig":
        """Accept a config instance or a plain mapping."""
        if isinstance(data, cls):
            return data
        if data is None:
            data = {}
        try:
            return cls.model_validate(dict(data))
        except (ValidationError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid token service configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "TokenServiceConfig":
        """Read settings from the environment; keyword overrides take priority."""
        env = os.environ if environ is None else environ
        data = {}

        secret = env.get(_ENV_JWT_SECRET)
        if secret:
            data["secret"] = secret

        raw_expiration = env.get(_ENV_JWT_EXPIRATION_MS)
        if raw_expiration is not None and raw_expiration.strip():
            try:
                data["expiration_millis"] = int(raw_expiration.strip())
            except ValueError as e:
                raise ConfigurationError(f"{_ENV_JWT_EXPIRATION_MS} must be an integer, got {raw_expiration!r}") from e

        policy = env.get(_ENV_JWT_SHORT_SECRET_POLICY)
        if policy and policy.strip():
            data["short_secret_policy"] = policy.strip().lower()

        data.update({k: v for k, v in overrides.items() if v is not None})
        config = cls.load(data)
        logger.debug(
            "Token config loaded. secret_from_env=%s, expiration_millis=%d, policy=%s",
            bool(secret) and overrides.get("secret") is None,
            config.expiration_millis,
            config.short_secret_policy,
        )
        return config
