"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Tenant registry database connection settings.

    Environment variables:
        TENANT_ROUTER_REGISTRY_DB_HOST: Database host (default: localhost)
        TENANT_ROUTER_REGISTRY_DB_PORT: Database port (default: 5432)
        TENANT_ROUTER_REGISTRY_DB_DATABASE: Database name (default: tenant_registry)
        TENANT_ROUTER_REGISTRY_DB_USERNAME: Database user (default: tenant_router)
        TENANT_ROUTER_REGISTRY_DB_PASSWORD: Database password (required in production)
        TENANT_ROUTER_REGISTRY_DB_SSL_MODE: asyncpg ssl mode (default: prefer)
        TENANT_ROUTER_REGISTRY_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        TENANT_ROUTER_REGISTRY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_ROUTER_REGISTRY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="tenant_registry", description="Database name")
    username: str = Field(default="tenant_router", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    ssl_mode: str = Field(
        default="prefer",
        description="SSL mode passed to asyncpg (disable, prefer, require, ...)",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class SharedDatabaseSettings(DatabaseSettings):
    """Base connection settings for the shared tenant database.

    SHARED-mode tenants live side by side in this database, one schema
    per tenant. Same fields as DatabaseSettings under the
    TENANT_ROUTER_SHARED_DB_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_ROUTER_SHARED_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database: str = Field(default="tenants_shared", description="Database name")


class TenancySettings(BaseSettings):
    """Tenant resolution and connection routing settings.

    Environment variables:
        TENANT_ROUTER_TENANCY_CACHE_TTL_SECONDS: Resolution cache TTL (default: 300)
        TENANT_ROUTER_TENANCY_MAX_CONNECTIONS_PER_POOL: Default pool size (default: 10)
        TENANT_ROUTER_TENANCY_IDLE_TIMEOUT_SECONDS: Idle pool threshold (default: cache TTL)
        TENANT_ROUTER_TENANCY_SWEEP_INTERVAL_SECONDS: Idle sweep interval (default: cache TTL)
        TENANT_ROUTER_TENANCY_ENCRYPTION_KEY: Key for stored credential decryption
        TENANT_ROUTER_TENANCY_PLATFORM_ADMIN_IDENTIFIER: Identifier that bypasses
            tenant resolution (default: cloud)
        TENANT_ROUTER_TENANCY_TENANT_HEADER_NAME: Request header carrying the
            tenant identifier (default: x-tenant-id)
        TENANT_ROUTER_TENANCY_PUBLIC_PATHS: Paths served without a tenant
        TENANT_ROUTER_TENANCY_LOOKUP_TIMEOUT_SECONDS: Deadline for registry lookups
            and pool construction (default: none)
    """

    model_config = SettingsConfigDict(
        env_prefix="TENANT_ROUTER_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cache_ttl_seconds: float = Field(
        default=300.0,
        description="How long a resolved tenant stays cached",
        gt=0,
    )
    max_connections_per_pool: int = Field(
        default=10,
        description="Pool size used when a tenant does not specify one",
        ge=1,
        le=100,
    )
    idle_timeout_seconds: float | None = Field(
        default=None,
        description="Idle time after which a tenant pool is evicted",
        gt=0,
    )
    sweep_interval_seconds: float | None = Field(
        default=None,
        description="Interval between idle pool sweeps",
        gt=0,
    )
    encryption_key: SecretStr | None = Field(
        default=None,
        description="Key for decrypting stored tenant database credentials",
    )
    platform_admin_identifier: str = Field(
        default="cloud",
        description="Reserved identifier for platform administration",
    )
    tenant_header_name: str = Field(
        default="x-tenant-id",
        description="Request header carrying the tenant identifier",
    )
    public_paths: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Path prefixes that may be served without a tenant",
    )
    lookup_timeout_seconds: float | None = Field(
        default=None,
        description="Deadline for registry lookups and pool construction",
        gt=0,
    )
    default_database_port: int = Field(default=5432, ge=1, le=65535)
    default_ssl_mode: str = Field(default="require")

    @property
    def effective_idle_timeout_seconds(self) -> float:
        """Idle threshold, falling back to the cache TTL."""
        return self.idle_timeout_seconds or self.cache_ttl_seconds

    @property
    def effective_sweep_interval_seconds(self) -> float:
        """Sweep interval, falling back to the cache TTL."""
        return self.sweep_interval_seconds or self.cache_ttl_seconds


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenant Router API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get registry database settings."""
        return get_database_settings()

    @property
    def shared_database(self) -> SharedDatabaseSettings:
        """Get shared tenant database settings."""
        return get_shared_database_settings()

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenancy settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached registry database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_shared_database_settings() -> SharedDatabaseSettings:
    """Get cached shared tenant database settings."""
    return SharedDatabaseSettings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings."""
    return TenancySettings()
