"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for the tenant registry database connection."""

    def pool_initialized(self, host: str, database: str, max_conn: int) -> None:
        """Record that the registry connection pool was created."""
        ...

    def connection_verified(self, host: str, database: str) -> None:
        """Record that a registry round-trip succeeded."""
        ...

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        """Record that a registry connection attempt failed."""
        ...

    def pool_closed(self) -> None:
        """Record that the registry connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def pool_initialized(self, host: str, database: str, max_conn: int) -> None:
        self._logger.info(
            "registry_pool_initialized",
            host=host,
            database=database,
            max_connections=max_conn,
            **self._get_context_kwargs(),
        )

    def connection_verified(self, host: str, database: str) -> None:
        self._logger.info(
            "registry_connection_verified",
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        self._logger.error(
            "registry_connection_failed",
            host=host,
            database=database,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        self._logger.info(
            "registry_pool_closed",
            **self._get_context_kwargs(),
        )
