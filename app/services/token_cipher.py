"""Symmetric encryption of OAuth tokens before they reach the database."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from app.core.errors import PersistenceError


class TokenCipherService:
    """Encrypt and decrypt stored access and refresh tokens with Fernet."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        # Fernet wants 32 url-safe base64 bytes; derive them from any secret.
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored token; a key mismatch surfaces as a storage fault."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise PersistenceError(
                "Stored token could not be decrypted with the configured key."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
