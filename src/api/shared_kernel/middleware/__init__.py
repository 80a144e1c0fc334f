"""Shared middleware for cross-cutting concerns.

This module contains the request-scoped tenant context shared across
bounded contexts. The tenancy bounded context binds it; any code that
needs the current tenant reads it.
"""

from shared_kernel.middleware.tenant_context import (
    RequestTenantContext,
    TenantContextAlreadySetError,
    TenantContextError,
    TenantContextNotSetError,
    current_tenant_context,
    tenant_context_scope,
)

__all__ = [
    "RequestTenantContext",
    "TenantContextAlreadySetError",
    "TenantContextError",
    "TenantContextNotSetError",
    "current_tenant_context",
    "tenant_context_scope",
]
