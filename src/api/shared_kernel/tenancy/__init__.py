"""Tenant identity primitives.

The resolved tenant descriptor is shared by every bounded context that
needs to know which tenant a unit of work belongs to.
"""

from shared_kernel.tenancy.value_objects import (
    ACTIVE_STATUS,
    TenantDescriptor,
    TenantMode,
)

__all__ = ["ACTIVE_STATUS", "TenantDescriptor", "TenantMode"]
