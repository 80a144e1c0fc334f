"""FastAPI dependencies for tenant resolution and tenant databases.

The resolution service and the connection manager are application-wide
and live on ``app.state``; they are created in the application lifespan.

Usage in FastAPI routes:
    @router.get("/orders")
    async def list_orders(
        database: Annotated[TenantDatabaseHandle, Depends(get_tenant_database)],
    ):
        async with database.sessionmaker()() as session:
            ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from shared_kernel.middleware.tenant_context import (
    RequestTenantContext,
    current_tenant_context,
)
from shared_kernel.tenancy.value_objects import TenantDescriptor
from tenancy.application.services import TenantResolutionService
from tenancy.infrastructure.connection_manager import (
    TenantConnectionManager,
    TenantDatabaseHandle,
)


def get_tenant_resolution_service(request: Request) -> TenantResolutionService:
    """Get the application's tenant resolution service."""
    return request.app.state.tenant_resolution_service


def get_connection_manager(request: Request) -> TenantConnectionManager:
    """Get the application's tenant connection manager."""
    return request.app.state.tenant_connection_manager


async def get_tenant_context() -> RequestTenantContext:
    """Get the tenant context of the current request.

    Raises:
        TenantContextNotSetError: If the tenant middleware is not installed
    """
    return current_tenant_context()


async def get_current_tenant(
    context: Annotated[RequestTenantContext, Depends(get_tenant_context)],
) -> TenantDescriptor:
    """Get the tenant bound to the current request.

    Raises:
        TenantContextNotSetError: If no tenant is bound
    """
    return context.get()


async def get_tenant_database(
    tenant: Annotated[TenantDescriptor, Depends(get_current_tenant)],
    manager: Annotated[TenantConnectionManager, Depends(get_connection_manager)],
) -> TenantDatabaseHandle:
    """Get a database handle for the tenant bound to the current request."""
    return await manager.get_connection(tenant)
