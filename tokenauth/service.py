"""
TokenService: issue, parse, validate and refresh HS256 tokens.

The service derives its signing key once, at construction, and never
mutates it afterwards, so one instance can be shared by any number of
threads without locking. Only the lazily-built default service below is
guarded by a lock.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from . import jwt as jwt_lib
from .claims import RESERVED_CLAIMS, TokenClaims
from .config import TokenServiceConfig
from .errors import TokenError, TokenExpiredError
from .keys import SigningKey, derive_signing_key

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class TokenService:
    """
    Facade over the HS256 codec plus expiry and key-strength policy.

    Args:
        config: TokenServiceConfig or a mapping with the same fields
        clock: returns the current time in epoch milliseconds
        signing_key: use this key instead of deriving one from the config
    """

    def __init__(
        self,
        config: Union[TokenServiceConfig, Mapping[str, Any], None] = None,
        clock: Optional[Clock] = None,
        signing_key: Optional[SigningKey] = None,
    ):
        self.config = TokenServiceConfig.load(config)
        self._clock = clock or jwt_lib.now_ms
        if signing_key is None:
            signing_key = derive_signing_key(self.config.secret, self.config.short_secret_policy)
        self._key = signing_key

    @property
    def signing_key(self) -> SigningKey:
        return self._key

    @property
    def expiration_millis(self) -> int:
        return self.config.expiration_millis

    def now(self) -> int:
        return self._clock()

    # ============================
    # 签发
    # ============================

    def issue(
        self,
        subject: str,
        claims: Optional[Mapping[str, Any]] = None,
        expiration_millis: Optional[int] = None,
    ) -> str:
        """
        Sign a new token for `subject`.

        `sub`, `iat` and `exp` inside `claims` are replaced by the service's own
        values. `expiration_millis` defaults to the configured lifetime.
        """
        if not isinstance(subject, str) or not subject:
            raise ValueError("Token subject must be a non-empty string")
        if expiration_millis is None:
            expiration_millis = self.config.expiration_millis
        if isinstance(expiration_millis, bool) or not isinstance(expiration_millis, int) or expiration_millis <= 0:
            raise ValueError("expiration_millis must be a positive integer")

        return self._issue(subject, claims, expiration_millis, self.now())

    def _issue(
        self,
        subject: str,
        claims: Optional[Mapping[str, Any]],
        expiration_millis: int,
        issued_at: int,
    ) -> str:
        payload: Dict[str, Any] = {k: v for k, v in (claims or {}).items() if k not in RESERVED_CLAIMS}
        payload["sub"] = subject
        payload["iat"] = jwt_lib.to_numeric_date(issued_at)
        payload["exp"] = jwt_lib.to_numeric_date(issued_at + expiration_millis)
        return jwt_lib.encode(payload, self._key.material)

    # ============================
    # 解析与校验
    # ============================

    def parse(self, token: str) -> TokenClaims:
        """
        Verify `token` and return its claims.

        Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
        """
        payload = jwt_lib.decode(token, self._key.material, now=self.now())
        return TokenClaims(payload)

    def validate(self, token: str, expected_subject: Optional[str] = None) -> bool:
        """True only for a well-formed, correctly signed, unexpired token
        whose subject matches `expected_subject` when one is given."""
        try:
            claims = self.parse(token)
        except TokenError as e:
            logger.debug("Token validation failed: %s", e)
            return False
        if claims.is_expired(self.now()):
            return False
        if expected_subject is not None and claims.subject != expected_subject:
            logger.debug("Token subject mismatch")
            return False
        return True

    def is_expired(self, token: str) -> bool:
        """Expired when exp <= now. A token whose expiration cannot be read counts as expired."""
        try:
            claims = self.parse(token)
        except TokenExpiredError:
            return True
        except TokenError as e:
            logger.debug("Cannot read token expiration, treating as expired: %s", e)
            return True
        return claims.is_expired(self.now())

    def refresh(self, token: str) -> str:
        """
        Issue a new token with the same subject and custom claims.

        Failures of `parse` propagate unchanged, so expired tokens cannot be
        refreshed. The original lifetime is not preserved; the configured one is used.
        The new iat is always later than the old one, even within the same millisecond.
        """
        claims = self.parse(token)
        issued_at = max(self.now(), claims.issued_at + 1)
        return self._issue(claims.subject, claims.custom, self.config.expiration_millis, issued_at)

    # ============================
    # 便捷读取
    # ============================

    def get_subject(self, token: str) -> str:
        return self.parse(token).subject

    def get_expiration(self, token: str) -> datetime:
        return self.parse(token).expires_at_datetime

    def get_claim(self, token: str, name: str, default: Any = None) -> Any:
        """Return one claim, or `default` when the token does not verify."""
        try:
            return self.parse(token).get(name, default)
        except TokenError as e:
            logger.debug("Failed to get claim %r from token: %s", name, e)
            return default


_default_service: Optional[TokenService] = None
_default_lock = threading.Lock()


def get_token_service() -> TokenService:
    """
    Return the process-wide service built from the environment.

    Built once; concurrent first calls share the same instance, so a generated
    key is never replaced by another one mid-process.
    """
    global _default_service
    service = _default_service
    if service is None:
        with _default_lock:
            if _default_service is None:
                _default_service = TokenService(TokenServiceConfig.from_env())
                logger.info("Token service initialized (expiration=%d ms)", _default_service.expiration_millis)
            service = _default_service
    return service


def reset_token_service() -> None:
    """Forget the default service; the next call rebuilds it from the environment."""
    global _default_service
    with _default_lock:
        _default_service = None
