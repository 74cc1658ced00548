"""
Short-lived session tokens handed from the SSO redirect to the front-end.

Tokens are HS256 JWTs signed with the shared app salt. They carry only the
resource UUID as subject plus issue and expiry times, and authorize nothing
beyond the front-end login hand-off.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable

import jwt

from app.core.errors import InvalidSessionTokenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(minutes=15)


@dataclass(frozen=True)
class SessionClaims:
    """Claims recovered from a verified session token."""

    subject: str
    issued_at: int
    expires_at: int


class SessionTokenIssuer:
    """Issue and verify signed, time-boxed session tokens."""

    def __init__(
        self,
        *,
        secret: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("Session token secret must be provided.")
        self._secret = secret
        self._ttl = int(ttl.total_seconds())
        self._clock = clock

    def issue(self, subject: str) -> str:
        """Mint a token for ``subject`` valid for the configured TTL."""
        now = int(self._clock())
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> SessionClaims:
        """
        Verify ``token`` and return its claims.

        Raises ``InvalidSessionTokenError`` on a bad signature, malformed
        structure, unsupported algorithm, missing claims or expiry. Expiry is
        checked against the injected clock with no leeway.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidAlgorithmError as exc:
            raise InvalidSessionTokenError("unsupported signing algorithm") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSessionTokenError("signature mismatch") from exc
        except jwt.MissingRequiredClaimError as exc:
            raise InvalidSessionTokenError(f"missing claim {exc.claim!r}") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidSessionTokenError(f"malformed token ({exc})") from exc

        subject = payload["sub"]
        issued_at = payload["iat"]
        expires_at = payload["exp"]
        if not isinstance(subject, str) or not subject:
            raise InvalidSessionTokenError("subject claim must be a non-empty string")
        if not isinstance(expires_at, int) or not isinstance(issued_at, int):
            raise InvalidSessionTokenError("time claims must be integers")

        if self._clock() > expires_at:
            raise InvalidSessionTokenError("token expired")

        return SessionClaims(
            subject=subject, issued_at=issued_at, expires_at=expires_at
        )

    def validate(self, token: str) -> bool:
        """Return whether ``token`` is authentic and unexpired."""
        try:
            self.decode(token)
        except InvalidSessionTokenError as exc:
            logger.debug("Session token rejected: %s", exc.reason)
            return False
        return True


__all__ = ["DEFAULT_TTL", "JWT_ALGORITHM", "SessionClaims", "SessionTokenIssuer"]
