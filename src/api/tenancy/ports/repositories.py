"""Protocols (ports) for the tenancy bounded context."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from shared_kernel.tenancy.value_objects import TenantDescriptor


@runtime_checkable
class ITenantRegistry(Protocol):
    """Read access to the central tenant registry."""

    async def find_by_identifier(self, identifier: str) -> TenantDescriptor | None:
        """Look up an active tenant by id or subdomain.

        Args:
            identifier: Tenant id or subdomain

        Returns:
            The descriptor with decrypted credentials, or None if no
            active tenant matches

        Raises:
            ValueError: If identifier is empty
            TenantResolutionError: If the registry query or credential
                decryption fails
        """
        ...


@runtime_checkable
class CredentialDecryptor(Protocol):
    """Turns stored credential ciphertext into plaintext."""

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored credential.

        Raises:
            Exception: Any failure; the registry maps it to
                TenantResolutionError.
        """
        ...
