"""Credential decryption strategies for registry-stored secrets."""

from __future__ import annotations

from pydantic import SecretStr


class PassthroughCredentialDecryptor:
    """Returns stored credentials unchanged.

    Used when the registry stores credentials in plaintext, or when
    decryption happens upstream. Holds the configured key so that a real
    cipher can be swapped in behind the same constructor.
    """

    def __init__(self, encryption_key: SecretStr | None = None) -> None:
        self._encryption_key = encryption_key

    def decrypt(self, ciphertext: str) -> str:
        return ciphertext
