"""Domain probe for tenant registry lookups.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to resolving tenants against the
central registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantRegistryProbe(Protocol):
    """Domain probe for tenant registry operations."""

    def tenant_found(self, identifier: str, tenant_id: str, mode: str) -> None:
        """Record that an active tenant matched the identifier."""
        ...

    def tenant_not_found(self, identifier: str) -> None:
        """Record that no tenant matched the identifier."""
        ...

    def tenant_inactive(self, identifier: str, tenant_id: str, status: str) -> None:
        """Record that the matching tenant is not active."""
        ...

    def lookup_failed(self, identifier: str, error: Exception) -> None:
        """Record that the registry query failed."""
        ...

    def credential_decryption_failed(self, tenant_id: str, error: Exception) -> None:
        """Record that stored credentials could not be decrypted."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRegistryProbe:
    """Default implementation of TenantRegistryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRegistryProbe(logger=self._logger, context=context)

    def tenant_found(self, identifier: str, tenant_id: str, mode: str) -> None:
        self._logger.debug(
            "tenant_registry_tenant_found",
            identifier=identifier,
            tenant_id=tenant_id,
            mode=mode,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, identifier: str) -> None:
        self._logger.info(
            "tenant_registry_tenant_not_found",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def tenant_inactive(self, identifier: str, tenant_id: str, status: str) -> None:
        self._logger.info(
            "tenant_registry_tenant_inactive",
            identifier=identifier,
            tenant_id=tenant_id,
            status=status,
            **self._get_context_kwargs(),
        )

    def lookup_failed(self, identifier: str, error: Exception) -> None:
        self._logger.error(
            "tenant_registry_lookup_failed",
            identifier=identifier,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def credential_decryption_failed(self, tenant_id: str, error: Exception) -> None:
        self._logger.error(
            "tenant_registry_credential_decryption_failed",
            tenant_id=tenant_id,
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
