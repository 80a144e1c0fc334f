"""Domain probe for tenant connection pool management.

Following Domain-Oriented Observability patterns, this probe captures
the lifecycle of per-tenant connection pools: creation, reuse, eviction
and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectionManagerProbe(Protocol):
    """Domain probe for tenant connection pool operations."""

    def pool_created(self, cache_key: str, url: str, pool_size: int) -> None:
        """Record that a new tenant pool was created and verified."""
        ...

    def pool_reused(self, cache_key: str) -> None:
        """Record that a cached tenant pool served a request."""
        ...

    def pool_creation_failed(self, cache_key: str, url: str, error: Exception) -> None:
        """Record that a tenant pool could not be created or verified."""
        ...

    def pool_race_lost(self, cache_key: str) -> None:
        """Record that a concurrently built pool was discarded."""
        ...

    def pools_evicted(self, cache_keys: list[str]) -> None:
        """Record that idle pools were removed from the cache."""
        ...

    def pool_close_failed(self, cache_key: str, error: Exception) -> None:
        """Record that disposing a pool failed."""
        ...

    def sweep_failed(self, error: Exception) -> None:
        """Record that a background eviction sweep failed."""
        ...

    def sweep_started(self, interval_seconds: float, idle_timeout_seconds: float) -> None:
        """Record that the background eviction sweep was started."""
        ...

    def sweep_stopped(self) -> None:
        """Record that the background eviction sweep was stopped."""
        ...

    def shutdown_completed(self, closed: int, failed: int) -> None:
        """Record that all pools were released at shutdown."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionManagerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionManagerProbe:
    """Default implementation of ConnectionManagerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultConnectionManagerProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionManagerProbe(logger=self._logger, context=context)

    def pool_created(self, cache_key: str, url: str, pool_size: int) -> None:
        self._logger.info(
            "tenant_pool_created",
            cache_key=cache_key,
            url=url,
            pool_size=pool_size,
            **self._get_context_kwargs(),
        )

    def pool_reused(self, cache_key: str) -> None:
        self._logger.debug(
            "tenant_pool_reused",
            cache_key=cache_key,
            **self._get_context_kwargs(),
        )

    def pool_creation_failed(self, cache_key: str, url: str, error: Exception) -> None:
        self._logger.error(
            "tenant_pool_creation_failed",
            cache_key=cache_key,
            url=url,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def pool_race_lost(self, cache_key: str) -> None:
        self._logger.debug(
            "tenant_pool_race_lost",
            cache_key=cache_key,
            **self._get_context_kwargs(),
        )

    def pools_evicted(self, cache_keys: list[str]) -> None:
        self._logger.info(
            "tenant_pools_evicted",
            count=len(cache_keys),
            cache_keys=cache_keys,
            **self._get_context_kwargs(),
        )

    def pool_close_failed(self, cache_key: str, error: Exception) -> None:
        self._logger.warning(
            "tenant_pool_close_failed",
            cache_key=cache_key,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def sweep_failed(self, error: Exception) -> None:
        self._logger.error(
            "tenant_pool_sweep_failed",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def sweep_started(self, interval_seconds: float, idle_timeout_seconds: float) -> None:
        self._logger.info(
            "tenant_pool_sweep_started",
            interval_seconds=interval_seconds,
            idle_timeout_seconds=idle_timeout_seconds,
            **self._get_context_kwargs(),
        )

    def sweep_stopped(self) -> None:
        self._logger.info("tenant_pool_sweep_stopped", **self._get_context_kwargs())

    def shutdown_completed(self, closed: int, failed: int) -> None:
        self._logger.info(
            "tenant_pools_shutdown_completed",
            closed=closed,
            failed=failed,
            **self._get_context_kwargs(),
        )
