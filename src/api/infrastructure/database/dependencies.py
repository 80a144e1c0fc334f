"""Tenant registry database access.

Provides the application-wide registry engine and its session factory.
Tenant databases are not managed here; see
tenancy.infrastructure.connection_manager.
"""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_registry_engine
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

_probe = DefaultConnectionProbe()

# Module-level registry engine (created on first use)
_registry_engine: AsyncEngine | None = None
_registry_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_registry_engine() -> AsyncEngine:
    """Get the registry database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.
    Also creates and caches the sessionmaker for efficient session creation.

    Returns:
        Configured async engine for registry reads
    """
    global _registry_engine, _registry_sessionmaker
    if _registry_engine is None:
        with _engine_lock:
            if _registry_engine is None:
                settings = get_database_settings()
                _registry_engine = create_registry_engine(settings)
                _registry_sessionmaker = async_sessionmaker(
                    _registry_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.pool_initialized(
                    host=settings.host,
                    database=settings.database,
                    max_conn=settings.pool_max_connections,
                )
    return _registry_engine


def get_registry_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory bound to the registry engine.

    Returns:
        Session factory used by the tenant registry client
    """
    get_registry_engine()
    assert _registry_sessionmaker is not None
    return _registry_sessionmaker


async def close_registry_connections() -> None:
    """Dispose the registry engine.

    Should be called on application shutdown, after tenant pools are closed.
    Also resets the sessionmaker to allow reinitialization.
    """
    global _registry_engine, _registry_sessionmaker

    if _registry_engine is not None:
        await _registry_engine.dispose()
        _probe.pool_closed()
        _registry_engine = None
        _registry_sessionmaker = None
