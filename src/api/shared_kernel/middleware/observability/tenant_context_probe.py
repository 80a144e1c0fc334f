"""Domain probe for tenant context binding.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to establishing the tenant of a request
or queue message.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context binding operations."""

    def tenant_context_bound(self, tenant_id: str, subdomain: str, mode: str) -> None:
        """Record that a tenant was bound to the current unit of work."""
        ...

    def platform_access(self, identifier: str) -> None:
        """Record that the platform admin identifier bypassed resolution."""
        ...

    def anonymous_access(self, path: str) -> None:
        """Record that a public path was served without a tenant."""
        ...

    def tenant_identifier_missing(self, path: str) -> None:
        """Record that a request carried no tenant identifier."""
        ...

    def tenant_rejected(self, identifier: str) -> None:
        """Record that an identifier did not resolve to an active tenant."""
        ...

    def message_tenant_missing(self) -> None:
        """Record that a queue message carried no tenant descriptor."""
        ...

    def message_tenant_invalid(self, error: Exception) -> None:
        """Record that a queue message carried an unusable tenant descriptor."""
        ...

    def tenant_context_cleared(self, tenant_id: str | None) -> None:
        """Record that the tenant context was torn down."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_context_bound(self, tenant_id: str, subdomain: str, mode: str) -> None:
        """Record that a tenant was bound to the current unit of work."""
        self._logger.info(
            "tenant_context_bound",
            tenant_id=tenant_id,
            subdomain=subdomain,
            mode=mode,
            **self._get_context_kwargs(),
        )

    def platform_access(self, identifier: str) -> None:
        """Record that the platform admin identifier bypassed resolution."""
        self._logger.info(
            "tenant_context_platform_access",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def anonymous_access(self, path: str) -> None:
        """Record that a public path was served without a tenant."""
        self._logger.debug(
            "tenant_context_anonymous_access",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_identifier_missing(self, path: str) -> None:
        """Record that a request carried no tenant identifier."""
        self._logger.warning(
            "tenant_context_identifier_missing",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_rejected(self, identifier: str) -> None:
        """Record that an identifier did not resolve to an active tenant."""
        self._logger.warning(
            "tenant_context_tenant_rejected",
            identifier=identifier,
            **self._get_context_kwargs(),
        )

    def message_tenant_missing(self) -> None:
        """Record that a queue message carried no tenant descriptor."""
        self._logger.warning(
            "tenant_context_message_tenant_missing",
            message="Message payload missing tenant information",
            **self._get_context_kwargs(),
        )

    def message_tenant_invalid(self, error: Exception) -> None:
        """Record that a queue message carried an unusable tenant descriptor."""
        self._logger.error(
            "tenant_context_message_tenant_invalid",
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tenant_context_cleared(self, tenant_id: str | None) -> None:
        """Record that the tenant context was torn down."""
        self._logger.debug(
            "tenant_context_cleared",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
