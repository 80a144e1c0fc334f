"""Value objects describing a resolved tenant.

These are pure, framework-agnostic types. The registry builds them from
database rows; queue consumers rebuild them from message payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

ACTIVE_STATUS = "ACTIVE"


class TenantMode(StrEnum):
    """How a tenant's data is hosted."""

    SHARED = "SHARED"
    DEDICATED = "DEDICATED"


# Message payload key -> descriptor field
_PAYLOAD_ALIASES: dict[str, str] = {
    "type": "mode",
    "dbType": "mode",
    "schemaName": "schema_name",
    "databaseHost": "database_host",
    "databasePort": "database_port",
    "databaseName": "database_name",
    "databaseUsername": "database_username",
    "databasePassword": "database_password",
    "databaseSslMode": "database_ssl_mode",
    "connectionPoolSize": "connection_pool_size",
}


@dataclass(frozen=True)
class TenantDescriptor:
    """Resolved identity and database location of a tenant.

    SHARED tenants carry a schema name inside the shared database.
    DEDICATED tenants carry the coordinates of their own database instance.
    The password is decrypted by the time a descriptor exists and is kept
    out of repr.

    Attributes:
        id: Tenant identifier (lookup key)
        subdomain: Tenant subdomain (lookup key)
        mode: SHARED or DEDICATED
        status: Registry status; only ACTIVE tenants are routable
        schema_name: Schema holding the tenant's tables (SHARED)
        database_host: Database host (DEDICATED)
        database_port: Database port (DEDICATED)
        database_name: Database name (DEDICATED)
        database_username: Database user (DEDICATED)
        database_password: Plaintext database password (DEDICATED)
        database_ssl_mode: asyncpg ssl mode (DEDICATED)
        connection_pool_size: Pool size override
    """

    id: str
    subdomain: str
    mode: TenantMode
    status: str
    schema_name: str | None = None
    database_host: str | None = None
    database_port: int | None = None
    database_name: str | None = None
    database_username: str | None = None
    database_password: str | None = field(default=None, repr=False)
    database_ssl_mode: str | None = None
    connection_pool_size: int | None = None

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Tenant id must not be empty")
        if not self.subdomain or not self.subdomain.strip():
            raise ValueError("Tenant subdomain must not be empty")
        if not isinstance(self.mode, TenantMode):
            # Accepts raw "SHARED"/"DEDICATED"; anything else raises ValueError
            object.__setattr__(self, "mode", TenantMode(self.mode))
        if self.connection_pool_size is not None and self.connection_pool_size < 1:
            raise ValueError("connection_pool_size must be >= 1")

    @property
    def is_active(self) -> bool:
        """Whether the tenant may be routed to."""
        return self.status == ACTIVE_STATUS

    @property
    def is_shared(self) -> bool:
        return self.mode is TenantMode.SHARED

    @property
    def has_dedicated_coordinates(self) -> bool:
        """Whether the fields needed to build a dedicated DSN are present."""
        return bool(
            self.database_host and self.database_name and self.database_username
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> TenantDescriptor:
        """Build a descriptor from a message payload.

        Accepts the camelCase keys the gateway publishes as well as the
        field names of this class. Unknown keys are ignored.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        values: dict[str, Any] = {}
        for key, value in payload.items():
            name = _PAYLOAD_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                values[name] = value

        missing = [name for name in ("id", "subdomain", "mode", "status") if name not in values]
        if missing:
            raise ValueError(f"Tenant payload missing fields: {', '.join(missing)}")

        try:
            return cls(**values)
        except TypeError as e:
            raise ValueError(f"Invalid tenant payload: {e}") from e
