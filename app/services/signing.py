"""HMAC-SHA256 helpers for authenticating platform SSO requests."""

from __future__ import annotations

import hmac
from hashlib import sha256


def build_message(timestamp: str, resource_uuid: str) -> bytes:
    """Return the exact bytes the platform signs: ``"{timestamp}:{uuid}"``."""
    return f"{timestamp}:{resource_uuid}".encode("utf-8")


def sign(secret: bytes, message: bytes) -> bytes:
    """Compute the raw HMAC-SHA256 digest of ``message``."""
    return hmac.new(secret, message, sha256).digest()


def verify(secret: bytes, message: bytes, candidate: bytes) -> bool:
    """Check ``candidate`` against the expected MAC in constant time."""
    expected = sign(secret, message)
    return hmac.compare_digest(expected, candidate)


__all__ = ["build_message", "sign", "verify"]
