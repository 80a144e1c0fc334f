"""Tenant resolution service with a TTL cache in front of the registry.

Resolved tenants are cached under both their id and their subdomain so
either identifier hits the cache. Each entry expires a fixed time after
it was created; reads never extend it. Not-found results are never
cached, so a newly provisioned tenant becomes routable on the next
request.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable

from shared_kernel.tenancy.value_objects import TenantDescriptor
from tenancy.application.observability import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)
from tenancy.domain.value_objects import ResolutionCacheEntry
from tenancy.ports.exceptions import TenantResolutionError
from tenancy.ports.repositories import ITenantRegistry


class TenantResolutionService:
    """Resolves tenant identifiers, consulting the registry on cache miss.

    The cache map is guarded by a threading.Lock held only for map
    operations. The registry call runs outside the lock, so concurrent
    misses for the same identifier may each reach the registry; the
    last writer's entry wins.
    """

    def __init__(
        self,
        registry: ITenantRegistry,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
        probe: TenantResolutionProbe | None = None,
        lookup_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            registry: Tenant registry consulted on cache miss
            ttl_seconds: Lifetime of a cached resolution
            clock: Monotonic time source
            probe: Optional domain probe for observability
            lookup_timeout_seconds: Deadline for one registry lookup,
                or None for no deadline
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._registry = registry
        self._ttl = ttl_seconds
        self._clock = clock
        self._probe = probe or DefaultTenantResolutionProbe()
        self._lookup_timeout = lookup_timeout_seconds
        self._entries: dict[str, ResolutionCacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    async def resolve(self, identifier: str) -> TenantDescriptor | None:
        """Resolve a tenant id or subdomain to its descriptor.

        Args:
            identifier: Tenant id or subdomain

        Returns:
            The active tenant's descriptor, or None if no active tenant
            matches

        Raises:
            ValueError: If identifier is empty
            TenantResolutionError: If the registry lookup fails or times out
        """
        if not identifier:
            raise ValueError("Tenant identifier must not be empty")

        now = self._clock()
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is not None:
                if not entry.is_expired(now):
                    self._probe.cache_hit(identifier, entry.descriptor.id)
                    return entry.descriptor
                self._discard_locked(entry)
                self._probe.cache_expired(identifier, entry.descriptor.id)

        self._probe.cache_miss(identifier)
        descriptor = await self._lookup(identifier)
        if descriptor is None:
            return None

        entry = ResolutionCacheEntry(
            descriptor=descriptor,
            expires_at=self._clock() + self._ttl,
        )
        with self._lock:
            self._entries[descriptor.id] = entry
            self._entries[descriptor.subdomain] = entry
        self._probe.tenant_cached(descriptor.id, descriptor.subdomain, self._ttl)
        return descriptor

    async def _lookup(self, identifier: str) -> TenantDescriptor | None:
        if self._lookup_timeout is None:
            return await self._registry.find_by_identifier(identifier)
        try:
            return await asyncio.wait_for(
                self._registry.find_by_identifier(identifier),
                self._lookup_timeout,
            )
        except TimeoutError as e:
            self._probe.lookup_timed_out(identifier, self._lookup_timeout)
            raise TenantResolutionError() from e

    def invalidate(self, identifier: str) -> bool:
        """Drop the cached resolution matched by an id or subdomain.

        Both keys of the matched tenant are removed, expired or not.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return False
            removed = self._discard_locked(entry)
        self._probe.cache_invalidated(identifier, removed)
        return True

    def invalidate_all(self) -> int:
        """Clear the cache.

        Returns:
            Number of keys removed
        """
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        self._probe.cache_cleared(removed)
        return removed

    def cached_identifiers(self) -> list[str]:
        """Keys of unexpired entries. Expired entries are dropped."""
        now = self._clock()
        with self._lock:
            expired = [e for e in self._entries.values() if e.is_expired(now)]
            for entry in expired:
                self._discard_locked(entry)
            return sorted(self._entries)

    def _discard_locked(self, entry: ResolutionCacheEntry) -> int:
        # Only keys still pointing at this entry; a newer resolution may own one
        removed = 0
        for key in (entry.descriptor.id, entry.descriptor.subdomain):
            if self._entries.get(key) is entry:
                del self._entries[key]
                removed += 1
        return removed
