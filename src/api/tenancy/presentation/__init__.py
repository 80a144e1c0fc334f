"""Presentation layer for the tenancy bounded context.

HTTP middleware and routes, plus the tenant scope used by queue
message consumers.
"""

from tenancy.presentation.messaging import message_tenant_scope, tenant_message_handler
from tenancy.presentation.middleware import TenantContextMiddleware
from tenancy.presentation.routes import router

__all__ = [
    "TenantContextMiddleware",
    "message_tenant_scope",
    "router",
    "tenant_message_handler",
]
