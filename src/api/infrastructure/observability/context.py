"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Attributes:
        request_id: Unique identifier for the current request or message.
        tenant_id: Resolved tenant identifier (if known).
        subdomain: Resolved tenant subdomain (if known).
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123")
        probe = DefaultConnectionProbe().with_context(
            context.with_tenant("t1", "acme")
        )
    """

    request_id: str | None = None
    tenant_id: str | None = None
    subdomain: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.subdomain is not None:
            result["subdomain"] = self.subdomain
        result.update(self.extra)
        return result

    def with_tenant(self, tenant_id: str, subdomain: str) -> ObservationContext:
        """Create a new context with the resolved tenant set."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_id=tenant_id,
            subdomain=subdomain,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return ObservationContext(
            request_id=self.request_id,
            tenant_id=self.tenant_id,
            subdomain=self.subdomain,
            extra={**self.extra, **kwargs},
        )
