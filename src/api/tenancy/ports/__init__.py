"""Ports (interfaces) for the tenancy bounded context.

Ports define the contracts for the tenant registry and credential
decryption without specifying implementation details.
"""

from tenancy.ports.exceptions import (
    MissingDatabaseConfigError,
    TenancyError,
    TenantConnectionError,
    TenantIdentifierMissingError,
    TenantNotFoundError,
    TenantResolutionError,
)
from tenancy.ports.repositories import CredentialDecryptor, ITenantRegistry

__all__ = [
    "CredentialDecryptor",
    "ITenantRegistry",
    "MissingDatabaseConfigError",
    "TenancyError",
    "TenantConnectionError",
    "TenantIdentifierMissingError",
    "TenantNotFoundError",
    "TenantResolutionError",
]
