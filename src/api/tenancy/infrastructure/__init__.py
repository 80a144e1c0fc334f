"""Infrastructure layer for the tenancy bounded context."""

from tenancy.infrastructure.connection_manager import (
    PooledConnection,
    TenantConnectionManager,
    TenantDatabaseHandle,
)
from tenancy.infrastructure.decryption import PassthroughCredentialDecryptor
from tenancy.infrastructure.tenant_registry import TenantRegistryClient

__all__ = [
    "PassthroughCredentialDecryptor",
    "PooledConnection",
    "TenantConnectionManager",
    "TenantDatabaseHandle",
    "TenantRegistryClient",
]
