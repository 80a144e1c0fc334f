"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def tenancy_started(
        self,
        cache_ttl_seconds: float,
        idle_timeout_seconds: float,
        sweep_interval_seconds: float,
    ) -> None:
        """Record that tenant routing is ready to serve requests."""
        ...

    def tenancy_stopped(self) -> None:
        """Record that tenant pools and the registry were shut down."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def tenancy_started(
        self,
        cache_ttl_seconds: float,
        idle_timeout_seconds: float,
        sweep_interval_seconds: float,
    ) -> None:
        """Record that tenant routing is ready to serve requests."""
        self._logger.info(
            "tenancy_started",
            cache_ttl_seconds=cache_ttl_seconds,
            idle_timeout_seconds=idle_timeout_seconds,
            sweep_interval_seconds=sweep_interval_seconds,
            **self._get_context_kwargs(),
        )

    def tenancy_stopped(self) -> None:
        """Record that tenant pools and the registry were shut down."""
        self._logger.info(
            "tenancy_stopped",
            **self._get_context_kwargs(),
        )
