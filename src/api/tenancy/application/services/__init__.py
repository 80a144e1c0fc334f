"""Application services for the tenancy bounded context."""

from tenancy.application.services.tenant_resolution_service import (
    TenantResolutionService,
)

__all__ = [
    "TenantResolutionService",
]
