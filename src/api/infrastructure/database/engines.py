"""Database engine creation for async SQLAlchemy.

This module provides factory functions for the registry engine and for the
per-tenant pooled engines, plus the URL builder both of them share.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "ASYNC_DRIVER",
    "build_async_url",
    "build_settings_url",
    "create_registry_engine",
    "create_tenant_engine",
]

ASYNC_DRIVER = "postgresql+asyncpg"


def build_async_url(
    host: str,
    port: int,
    database: str,
    username: str,
    password: str | None,
    ssl_mode: str | None = None,
) -> URL:
    """Build an asyncpg database URL from discrete connection fields.

    Uses SQLAlchemy's URL builder so username and password are
    percent-encoded per RFC 3986.

    Args:
        host: Database host
        port: Database port
        database: Database name
        username: Database user
        password: Plaintext password, or None
        ssl_mode: asyncpg ssl mode, passed as the ``ssl`` query argument

    Returns:
        URL for ``postgresql+asyncpg``. Render with ``hide_password=True``
        before logging.
    """
    query = {"ssl": ssl_mode} if ssl_mode else {}
    return URL.create(
        drivername=ASYNC_DRIVER,
        username=username,
        password=password or None,
        host=host,
        port=port,
        database=database,
        query=query,
    )


def build_settings_url(settings: DatabaseSettings) -> URL:
    """Build the asyncpg URL described by a settings section."""
    return build_async_url(
        host=settings.host,
        port=settings.port,
        database=settings.database,
        username=settings.username,
        password=settings.password.get_secret_value(),
        ssl_mode=settings.ssl_mode,
    )


def create_registry_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the async engine for tenant registry lookups.

    Args:
        settings: Registry database connection settings

    Returns:
        Configured async engine for registry reads
    """
    return create_async_engine(
        build_settings_url(settings),
        pool_size=settings.pool_max_connections,
        max_overflow=0,  # No overflow - strict pool limit
        pool_pre_ping=True,
        echo=False,
    )


def create_tenant_engine(url: URL, pool_size: int) -> AsyncEngine:
    """Create a pooled async engine for one tenant database.

    Args:
        url: Tenant database URL
        pool_size: Maximum number of pooled connections

    Returns:
        Async engine owning the tenant's connection pool
    """
    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=0,
        pool_pre_ping=True,
        echo=False,
    )
