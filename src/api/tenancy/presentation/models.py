"""Pydantic models for tenancy API responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tenancy.domain.value_objects import PoolStats


class PoolStatsResponse(BaseModel):
    """Response model for tenant pool statistics."""

    active_connection_count: int = Field(..., description="Number of live tenant pools")
    tenant_keys: list[str] = Field(
        default_factory=list, description="Cache keys of the live pools"
    )

    @classmethod
    def from_domain(cls, stats: PoolStats) -> PoolStatsResponse:
        """Convert a PoolStats snapshot to an API response."""
        return cls(
            active_connection_count=stats.active_connection_count,
            tenant_keys=list(stats.tenant_keys),
        )


class CacheClearedResponse(BaseModel):
    """Response model for clearing the resolution cache."""

    removed_keys: int = Field(..., description="Number of cache keys removed")
