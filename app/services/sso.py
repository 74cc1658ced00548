"""
Validation of platform-initiated single sign-on requests.

The platform signs ``"{timestamp}:{resource_uuid}"`` with the shared app salt
and hex-encodes the digest. A request is accepted when the MAC matches and the
timestamp lies within the staleness window, which bounds replay without
server-side nonce tracking.
"""

from __future__ import annotations

import binascii
import logging
import time
from datetime import timedelta
from typing import Callable

from app.core.errors import MalformedInputError
from app.services import signing

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(minutes=2)


class SsoValidator:
    """Authenticate SSO assertions against the shared secret."""

    def __init__(
        self,
        *,
        secret: str | bytes,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("SSO secret must be provided.")
        self._secret = secret.encode("utf-8") if isinstance(secret, str) else secret
        self._max_age = max_age.total_seconds()
        self._clock = clock

    def validate(self, token: str, timestamp: str, resource_uuid: str) -> bool:
        """
        Return whether the assertion is authentic and fresh.

        Raises ``MalformedInputError`` for an unparsable timestamp or a token
        that is not hex. A stale or mismatched assertion is ``False``, not an
        error.
        """
        try:
            issued_at = int(timestamp)
        except (TypeError, ValueError) as exc:
            raise MalformedInputError("Malformed SSO timestamp.") from exc

        elapsed = self._clock() - issued_at
        # Timestamps ahead of our clock get the same window as stale ones.
        if abs(elapsed) > self._max_age:
            logger.info(
                "Rejecting SSO request for %s outside the %ss window (elapsed=%ss)",
                resource_uuid,
                int(self._max_age),
                int(elapsed),
            )
            return False

        try:
            candidate = binascii.unhexlify(token)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise MalformedInputError("Malformed SSO token.") from exc

        message = signing.build_message(timestamp, resource_uuid)
        return signing.verify(self._secret, message, candidate)


__all__ = ["DEFAULT_MAX_AGE", "SsoValidator"]
