"""PostgreSQL implementation of ITenantRegistry.

Resolves a tenant identifier (id or subdomain) against the central
registry in a single query joining tenants with their optional database
configuration. Stored credentials are decrypted before a descriptor is
returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import or_, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.observability import ConnectionProbe, DefaultConnectionProbe
from infrastructure.settings import get_database_settings
from shared_kernel.tenancy.value_objects import ACTIVE_STATUS, TenantDescriptor
from tenancy.infrastructure.decryption import PassthroughCredentialDecryptor
from tenancy.infrastructure.models import TenantDatabaseConfigModel, TenantModel
from tenancy.infrastructure.observability import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)
from tenancy.ports.exceptions import TenantResolutionError
from tenancy.ports.repositories import CredentialDecryptor, ITenantRegistry

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings


class TenantRegistryClient(ITenantRegistry):
    """Read-only client for the tenant registry database.

    Each lookup opens a short-lived session from the registry session
    factory. Only ACTIVE tenants are ever returned; missing and inactive
    tenants both come back as None.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        decryptor: CredentialDecryptor | None = None,
        probe: TenantRegistryProbe | None = None,
        connection_probe: ConnectionProbe | None = None,
        database_settings: DatabaseSettings | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session_factory: Session factory bound to the registry engine
            decryptor: Credential decryption strategy (default: passthrough)
            probe: Optional domain probe for lookup observability
            connection_probe: Optional probe for registry connectivity
            database_settings: Registry settings, used to label
                connectivity events (default: environment settings)
        """
        self._session_factory = session_factory
        self._decryptor = decryptor or PassthroughCredentialDecryptor()
        self._probe = probe or DefaultTenantRegistryProbe()
        self._connection_probe = connection_probe or DefaultConnectionProbe()
        self._database_settings = database_settings

    async def find_by_identifier(self, identifier: str) -> TenantDescriptor | None:
        """Look up an active tenant by id or subdomain.

        Args:
            identifier: Tenant id or subdomain

        Returns:
            Descriptor with decrypted credentials, or None when no tenant
            matches or the match is not ACTIVE

        Raises:
            ValueError: If identifier is empty
            TenantResolutionError: If the query or decryption fails
        """
        if not identifier:
            raise ValueError("Tenant identifier must not be empty")

        stmt = (
            select(
                TenantModel.id,
                TenantModel.subdomain,
                TenantModel.db_type,
                TenantModel.status,
                TenantDatabaseConfigModel.db_schema,
                TenantDatabaseConfigModel.db_name,
                TenantDatabaseConfigModel.db_host,
                TenantDatabaseConfigModel.db_port,
                TenantDatabaseConfigModel.db_username,
                TenantDatabaseConfigModel.db_password,
                TenantDatabaseConfigModel.db_ssl_mode,
                TenantDatabaseConfigModel.connection_pool_size,
            )
            .outerjoin(
                TenantDatabaseConfigModel,
                TenantDatabaseConfigModel.tenant_id == TenantModel.id,
            )
            .where(
                or_(TenantModel.id == identifier, TenantModel.subdomain == identifier)
            )
            .limit(1)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except (SQLAlchemyError, OSError) as e:
            self._probe.lookup_failed(identifier, e)
            raise TenantResolutionError() from e

        if row is None:
            self._probe.tenant_not_found(identifier)
            return None

        if row["status"] != ACTIVE_STATUS:
            self._probe.tenant_inactive(identifier, row["id"], row["status"])
            return None

        descriptor = self._to_descriptor(identifier, row)

        self._probe.tenant_found(identifier, descriptor.id, descriptor.mode.value)
        return descriptor

    def _to_descriptor(self, identifier: str, row: Any) -> TenantDescriptor:
        tenant_id = row["id"]
        try:
            username = self._decrypt(row["db_username"])
            password = self._decrypt(row["db_password"])
        except Exception as e:
            self._probe.credential_decryption_failed(tenant_id, e)
            raise TenantResolutionError() from e

        try:
            return TenantDescriptor(
                id=tenant_id,
                subdomain=row["subdomain"],
                mode=row["db_type"],
                status=row["status"],
                schema_name=row["db_schema"],
                database_host=row["db_host"],
                database_port=row["db_port"],
                database_name=row["db_name"],
                database_username=username,
                database_password=password,
                database_ssl_mode=row["db_ssl_mode"],
                connection_pool_size=row["connection_pool_size"],
            )
        except ValueError as e:
            # Registry row with an unknown mode or invalid pool size
            self._probe.lookup_failed(identifier, e)
            raise TenantResolutionError() from e

    def _decrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self._decryptor.decrypt(value)

    async def verify_connection(self) -> None:
        """Run a round-trip query against the registry.

        Raises:
            DatabaseConnectionError: If the registry is unreachable
        """
        settings = self._database_settings or get_database_settings()
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            self._connection_probe.connection_failed(
                host=settings.host, database=settings.database, error=e
            )
            raise DatabaseConnectionError(
                f"Failed to connect to tenant registry: {e}", host=settings.host
            ) from e

        self._connection_probe.connection_verified(
            host=settings.host, database=settings.database
        )
