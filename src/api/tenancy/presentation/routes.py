"""HTTP routes for the tenancy bounded context.

Diagnostics for tenant pools and administration of the resolution
cache. All routes require platform admin access, i.e. a request made
with the platform admin identifier as its tenant.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from tenancy.application.services import TenantResolutionService
from tenancy.dependencies import get_connection_manager, get_tenant_resolution_service
from tenancy.infrastructure.connection_manager import TenantConnectionManager
from tenancy.presentation.models import CacheClearedResponse, PoolStatsResponse


async def require_platform_access(request: Request) -> None:
    """Reject requests not made with the platform admin identifier."""
    if not getattr(request.state, "platform_access", False):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Platform access required",
        )


router = APIRouter(
    prefix="/tenancy",
    tags=["tenancy"],
    dependencies=[Depends(require_platform_access)],
)


@router.get("/pools")
async def get_pool_stats(
    manager: Annotated[TenantConnectionManager, Depends(get_connection_manager)],
) -> PoolStatsResponse:
    """Report the live tenant connection pools."""
    return PoolStatsResponse.from_domain(manager.get_pool_stats())


@router.delete("/cache/{identifier}", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_tenant(
    identifier: str,
    resolver: Annotated[
        TenantResolutionService, Depends(get_tenant_resolution_service)
    ],
) -> Response:
    """Drop a tenant's cached resolution, by id or subdomain.

    Raises:
        HTTPException: 404 if the tenant is not cached
    """
    if not resolver.invalidate(identifier):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {identifier} is not cached",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/cache")
async def clear_cache(
    resolver: Annotated[
        TenantResolutionService, Depends(get_tenant_resolution_service)
    ],
) -> CacheClearedResponse:
    """Clear the whole resolution cache."""
    return CacheClearedResponse(removed_keys=resolver.invalidate_all())
