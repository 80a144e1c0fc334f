"""FastAPI dependencies and context binding for the tenancy bounded context."""

from tenancy.dependencies.connections import (
    get_connection_manager,
    get_current_tenant,
    get_tenant_context,
    get_tenant_database,
    get_tenant_resolution_service,
)
from tenancy.dependencies.tenant_context import (
    bind_message_tenant,
    bind_tenant_context,
)

__all__ = [
    "bind_message_tenant",
    "bind_tenant_context",
    "get_connection_manager",
    "get_current_tenant",
    "get_tenant_context",
    "get_tenant_database",
    "get_tenant_resolution_service",
]
