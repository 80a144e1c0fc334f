"""Per-tenant connection pool management.

Keeps one pooled AsyncEngine per distinct set of tenant database
coordinates. Pools are created lazily on first use, verified with a
round-trip query, reused across requests, and disposed when idle for
longer than the idle timeout or when the application shuts down.

SHARED tenants living in the same database share one pool; the tenant's
schema is applied on the handle through ``schema_translate_map`` rather
than on the pool itself.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import build_async_url, create_tenant_engine
from infrastructure.settings import SharedDatabaseSettings, get_shared_database_settings
from shared_kernel.tenancy.value_objects import TenantDescriptor, TenantMode
from tenancy.domain.value_objects import PoolStats
from tenancy.infrastructure.observability import (
    ConnectionManagerProbe,
    DefaultConnectionManagerProbe,
)
from tenancy.ports.exceptions import MissingDatabaseConfigError, TenantConnectionError

EngineFactory = Callable[[URL, int], AsyncEngine]


@dataclass
class PooledConnection:
    """A live tenant pool and the bookkeeping needed to evict it."""

    cache_key: str
    engine: AsyncEngine
    descriptor: TenantDescriptor
    last_used: float


@dataclass(frozen=True)
class TenantDatabaseHandle:
    """What callers receive from the manager for one tenant.

    Attributes:
        cache_key: Key of the pool backing this handle
        engine: The pooled engine, without schema qualification
        schema_name: Schema applied to unqualified tables (SHARED only)
    """

    cache_key: str
    engine: AsyncEngine
    schema_name: str | None = None

    @property
    def bound_engine(self) -> AsyncEngine:
        """Engine view that routes unqualified tables to the tenant schema.

        Shares the connection pool of ``engine``.
        """
        if self.schema_name is None:
            return self.engine
        return self.engine.execution_options(
            schema_translate_map={None: self.schema_name}
        )

    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        """Session factory scoped to this tenant."""
        return async_sessionmaker(
            self.bound_engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )


@dataclass(frozen=True)
class _ConnectionParameters:
    cache_key: str
    url: URL
    pool_size: int
    schema_name: str | None


class TenantConnectionManager:
    """Cache of tenant connection pools with idle eviction.

    The cache is guarded by an asyncio.Lock that is never held while a
    pool is being built or disposed. When two tasks build a pool for the
    same key concurrently, the first to register wins and the other
    disposes its own pool.
    """

    def __init__(
        self,
        shared_database_settings: SharedDatabaseSettings | None = None,
        *,
        default_pool_size: int = 10,
        idle_timeout_seconds: float = 300.0,
        sweep_interval_seconds: float | None = None,
        default_port: int = 5432,
        default_ssl_mode: str = "require",
        connect_timeout_seconds: float | None = None,
        engine_factory: EngineFactory = create_tenant_engine,
        clock: Callable[[], float] = time.monotonic,
        probe: ConnectionManagerProbe | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            shared_database_settings: Base coordinates for SHARED tenants
                (default: environment settings)
            default_pool_size: Pool size when a descriptor sets none
            idle_timeout_seconds: Pools unused for longer are evicted
            sweep_interval_seconds: Interval of the background sweep
                (default: idle_timeout_seconds)
            default_port: Port for DEDICATED tenants that set none
            default_ssl_mode: ssl mode for DEDICATED tenants that set none
            connect_timeout_seconds: Deadline for verifying a new pool
            engine_factory: Builds a pooled engine from a URL and a size
            clock: Monotonic time source
            probe: Optional domain probe for observability
        """
        self._shared_settings = shared_database_settings
        self._default_pool_size = default_pool_size
        self._idle_timeout = idle_timeout_seconds
        self._sweep_interval = sweep_interval_seconds or idle_timeout_seconds
        self._default_port = default_port
        self._default_ssl_mode = default_ssl_mode
        self._connect_timeout = connect_timeout_seconds
        self._engine_factory = engine_factory
        self._clock = clock
        self._probe = probe or DefaultConnectionManagerProbe()

        self._pools: dict[str, PooledConnection] = {}
        self._lock = asyncio.Lock()
        self._sweep_task: asyncio.Task | None = None
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def get_connection(self, descriptor: TenantDescriptor) -> TenantDatabaseHandle:
        """Return a handle to the tenant's pooled database.

        Args:
            descriptor: Resolved tenant

        Returns:
            Handle backed by a cached or newly verified pool

        Raises:
            MissingDatabaseConfigError: If the descriptor lacks the fields
                its mode requires
            TenantConnectionError: If a new pool cannot be created or
                verified, or the manager has been shut down
        """
        if self._closed:
            raise TenantConnectionError()

        params = self._connection_parameters(descriptor)

        async with self._lock:
            entry = self._pools.get(params.cache_key)
            if entry is not None:
                entry.last_used = self._clock()
                self._probe.pool_reused(params.cache_key)
                return TenantDatabaseHandle(
                    params.cache_key, entry.engine, params.schema_name
                )

        engine = await self._build_pool(params)

        loser: AsyncEngine | None = None
        async with self._lock:
            if self._closed:
                loser = engine
            else:
                entry = self._pools.get(params.cache_key)
                if entry is None:
                    entry = PooledConnection(
                        cache_key=params.cache_key,
                        engine=engine,
                        descriptor=descriptor,
                        last_used=self._clock(),
                    )
                    self._pools[params.cache_key] = entry
                    self._probe.pool_created(
                        params.cache_key,
                        params.url.render_as_string(hide_password=True),
                        params.pool_size,
                    )
                else:
                    entry.last_used = self._clock()
                    loser = engine

        if loser is not None:
            await self._dispose(params.cache_key, loser)
            if self._closed:
                raise TenantConnectionError()
            self._probe.pool_race_lost(params.cache_key)

        return TenantDatabaseHandle(params.cache_key, entry.engine, params.schema_name)

    def _connection_parameters(self, descriptor: TenantDescriptor) -> _ConnectionParameters:
        pool_size = descriptor.connection_pool_size or self._default_pool_size

        if descriptor.mode is TenantMode.DEDICATED:
            if not descriptor.has_dedicated_coordinates:
                raise MissingDatabaseConfigError(
                    f"Dedicated tenant {descriptor.id} is missing database "
                    "host, name or username"
                )
            host = descriptor.database_host
            database = descriptor.database_name
            url = build_async_url(
                host=host,
                port=descriptor.database_port or self._default_port,
                database=database,
                username=descriptor.database_username,
                password=descriptor.database_password,
                ssl_mode=descriptor.database_ssl_mode or self._default_ssl_mode,
            )
            schema_name = None
        else:
            if not descriptor.schema_name:
                raise MissingDatabaseConfigError(
                    f"Shared tenant {descriptor.id} has no schema name"
                )
            base = self._shared_settings or get_shared_database_settings()
            host = descriptor.database_host or base.host
            database = descriptor.database_name or base.database
            url = build_async_url(
                host=host,
                port=descriptor.database_port or base.port,
                database=database,
                username=descriptor.database_username or base.username,
                password=(
                    descriptor.database_password
                    or base.password.get_secret_value()
                ),
                ssl_mode=descriptor.database_ssl_mode or base.ssl_mode,
            )
            schema_name = descriptor.schema_name

        return _ConnectionParameters(
            cache_key=f"{descriptor.mode.value}:{database}@{host}",
            url=url,
            pool_size=pool_size,
            schema_name=schema_name,
        )

    async def _build_pool(self, params: _ConnectionParameters) -> AsyncEngine:
        safe_url = params.url.render_as_string(hide_password=True)
        engine: AsyncEngine | None = None
        try:
            engine = self._engine_factory(params.url, params.pool_size)
            if self._connect_timeout is None:
                await self._verify(engine)
            else:
                await asyncio.wait_for(self._verify(engine), self._connect_timeout)
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            self._probe.pool_creation_failed(params.cache_key, safe_url, e)
            if engine is not None:
                await self._dispose(params.cache_key, engine)
            raise TenantConnectionError() from e
        return engine

    @staticmethod
    async def _verify(engine: AsyncEngine) -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def _dispose(self, cache_key: str, engine: AsyncEngine) -> bool:
        # Close failures are reported and otherwise ignored
        try:
            await engine.dispose()
        except Exception as e:
            self._probe.pool_close_failed(cache_key, e)
            return False
        return True

    async def evict_idle(self) -> int:
        """Dispose pools unused for longer than the idle timeout.

        Returns:
            Number of pools removed from the cache
        """
        now = self._clock()
        async with self._lock:
            idle_keys = [
                key
                for key, entry in self._pools.items()
                if now - entry.last_used > self._idle_timeout
            ]
            evicted = [self._pools.pop(key) for key in idle_keys]

        if evicted:
            self._probe.pools_evicted(idle_keys)
            await asyncio.gather(
                *(self._dispose(entry.cache_key, entry.engine) for entry in evicted)
            )
        return len(evicted)

    async def start(self) -> None:
        """Start the background idle sweep. No-op if already running."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        self._probe.sweep_started(self._sweep_interval, self._idle_timeout)

    async def stop(self) -> None:
        """Cancel the background sweep and wait for it to finish."""
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None
        self._probe.sweep_stopped()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.evict_idle()
            except Exception as e:
                self._probe.sweep_failed(e)

    async def shutdown(self) -> None:
        """Stop the sweep and dispose every pool.

        All pools are closed concurrently; failures are reported and do
        not prevent the remaining pools from closing.
        """
        await self.stop()
        async with self._lock:
            self._closed = True
            entries = list(self._pools.values())
            self._pools.clear()

        results = await asyncio.gather(
            *(self._dispose(entry.cache_key, entry.engine) for entry in entries)
        )
        closed = sum(1 for ok in results if ok)
        self._probe.shutdown_completed(closed=closed, failed=len(results) - closed)

    def get_pool_stats(self) -> PoolStats:
        """Snapshot of the live pools."""
        keys = tuple(sorted(self._pools))
        return PoolStats(active_connection_count=len(keys), tenant_keys=keys)
