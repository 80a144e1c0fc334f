"""Value objects for the tenancy bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared_kernel.tenancy.value_objects import TenantDescriptor


@dataclass(frozen=True)
class ResolutionCacheEntry:
    """A cached registry resolution.

    The same entry is stored under the tenant's id and its subdomain.
    expires_at is a deadline on the resolution service's clock and is
    fixed at creation time.
    """

    descriptor: TenantDescriptor
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class PoolStats:
    """Point-in-time snapshot of the connection pool cache.

    Attributes:
        active_connection_count: Number of live pools
        tenant_keys: Cache keys of the live pools, sorted
    """

    active_connection_count: int
    tenant_keys: tuple[str, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "active_connection_count": self.active_connection_count,
            "tenant_keys": list(self.tenant_keys),
        }
