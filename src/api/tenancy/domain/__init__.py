"""Domain layer for the tenancy bounded context."""

from tenancy.domain.value_objects import PoolStats, ResolutionCacheEntry

__all__ = [
    "PoolStats",
    "ResolutionCacheEntry",
]
