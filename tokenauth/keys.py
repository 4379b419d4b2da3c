"""
Signing key derivation.

HS256 needs at least 256 bits of key. A configured secret that is long
enough is used as-is; what happens to an absent or short one depends on the
policy:

- ``generate``: warn and use a random 256-bit key. Tokens signed with it stop
  verifying once the process restarts.
- ``pad``: warn and zero-pad the secret to 32 bytes. This only satisfies the
  length check, it adds no entropy.
- ``reject``: raise ConfigurationError.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_KEY_BYTES = 32
POLICIES = ("generate", "pad", "reject")


class SigningKey:
    """Immutable HMAC-SHA256 key material."""

    __slots__ = ("_material", "_generated")

    def __init__(self, material: bytes, generated: bool = False):
        if len(material) < MIN_KEY_BYTES:
            raise ConfigurationError(f"HS256 key must be at least {MIN_KEY_BYTES} bytes")
        object.__setattr__(self, "_material", bytes(material))
        object.__setattr__(self, "_generated", generated)

    def __setattr__(self, name, value):
        raise AttributeError("SigningKey is immutable")

    @classmethod
    def generate(cls) -> "SigningKey":
        return cls(secrets.token_bytes(MIN_KEY_BYTES), generated=True)

    @property
    def material(self) -> bytes:
        return self._material

    @property
    def generated(self) -> bool:
        """True when the key was generated at random instead of configured."""
        return self._generated

    def __len__(self) -> int:
        return len(self._material)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SigningKey):
            return NotImplemented
        return secrets.compare_digest(self._material, other._material)

    def __hash__(self) -> int:
        return hash(self._material)

    def __repr__(self) -> str:
        return f"SigningKey(bits={len(self._material) * 8}, generated={self._generated})"


def derive_signing_key(configured_secret: Optional[str], policy: str = "generate") -> SigningKey:
    """Build the signing key from the configured secret."""
    if policy not in POLICIES:
        raise ConfigurationError(f"Unknown short secret policy: {policy!r}")

    if not configured_secret:
        if policy == "reject":
            raise ConfigurationError("JWT secret is not configured")
        logger.warning("No JWT secret configured; using an auto-generated key")
        return SigningKey.generate()

    key_bytes = configured_secret.encode("utf-8")
    if len(key_bytes) >= MIN_KEY_BYTES:
        return SigningKey(key_bytes)

    if policy == "reject":
        raise ConfigurationError(
            f"JWT secret is {len(key_bytes)} bytes; at least {MIN_KEY_BYTES} are required"
        )
    if policy == "pad":
        logger.warning(
            "Configured JWT secret is %d bytes; zero-padding to %d bytes", len(key_bytes), MIN_KEY_BYTES
        )
        return SigningKey(key_bytes.ljust(MIN_KEY_BYTES, b"\x00"))

    logger.warning("Configured JWT secret is too short; using an auto-generated key")
    return SigningKey.generate()
