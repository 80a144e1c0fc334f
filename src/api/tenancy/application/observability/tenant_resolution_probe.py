"""Protocol for tenant resolution service observability.

Defines the interface for domain probes that capture cache behaviour of
the tenant resolution service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantResolutionProbe(Protocol):
    """Domain probe for tenant resolution operations."""

    def cache_hit(self, identifier: str, tenant_id: str) -> None:
        """Record that a resolution was served from cache."""
        ...

    def cache_expired(self, identifier: str, tenant_id: str) -> None:
        """Record that an expired entry was dropped on lookup."""
        ...

    def cache_miss(self, identifier: str) -> None:
        """Record that a resolution required a registry lookup."""
        ...

    def tenant_cached(self, tenant_id: str, subdomain: str, ttl_seconds: float) -> None:
        """Record that a resolved tenant was stored in the cache."""
        ...

    def lookup_timed_out(self, identifier: str, timeout_seconds: float) -> None:
        """Record that a registry lookup exceeded its deadline."""
        ...

    def cache_invalidated(self, identifier: str, removed_keys: int) -> None:
        """Record that a tenant's cache entries were removed."""
        ...

    def cache_cleared(self, removed_keys: int) -> None:
        """Record that the whole cache was cleared."""
        ...

    def with_context(self, context: ObservationContext) -> TenantResolutionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantResolutionProbe:
    """Default implementation of TenantResolutionProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantResolutionProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantResolutionProbe(logger=self._logger, context=context)

    def cache_hit(self, identifier: str, tenant_id: str) -> None:
        """Record that a resolution was served from cache."""
        self._logger.debug(
            "tenant_resolution_cache_hit",
            identifier=identifier,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def cache_expired(self, identifier: str, tenant_id: str) -> None:
        """Record that an expired entry was dropped on lookup."""
        self._logger.debug(
            "tenant_resolution_cache_expired",
            identifier=identifier,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def cache_miss(self, identifier: str) -> None:
        """Record that a resolution required a registry lookup."""
        self._logger.debug(
            "tenant_resolution_cache_miss",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_cached(self, tenant_id: str, subdomain: str, ttl_seconds: float) -> None:
        """Record that a resolved tenant was stored in the cache."""
        self._logger.info(
            "tenant_resolution_cached",
            tenant_id=tenant_id,
            subdomain=subdomain,
            ttl_seconds=ttl_seconds,
            **self._get_context_kwargs(),
        )

    def lookup_timed_out(self, identifier: str, timeout_seconds: float) -> None:
        """Record that a registry lookup exceeded its deadline."""
        self._logger.error(
            "tenant_resolution_lookup_timed_out",
            identifier=identifier,
            timeout_seconds=timeout_seconds,
            **self._get_context_kwargs(),
        )

    def cache_invalidated(self, identifier: str, removed_keys: int) -> None:
        """Record that a tenant's cache entries were removed."""
        self._logger.info(
            "tenant_resolution_cache_invalidated",
            identifier=identifier,
            removed_keys=removed_keys,
            **self._get_context_kwargs(),
        )

    def cache_cleared(self, removed_keys: int) -> None:
        """Record that the whole cache was cleared."""
        self._logger.info(
            "tenant_resolution_cache_cleared",
            removed_keys=removed_keys,
            **self._get_context_kwargs(),
        )
