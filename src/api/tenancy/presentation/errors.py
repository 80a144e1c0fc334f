"""HTTP mapping of tenancy errors.

Response bodies carry fixed messages only; failure detail has already
been recorded by the probes.
"""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

from shared_kernel.middleware.tenant_context import TenantContextNotSetError
from tenancy.ports.exceptions import (
    TenantConnectionError,
    TenantIdentifierMissingError,
    TenantNotFoundError,
    TenantResolutionError,
)

_INTERNAL_ERROR = "Internal server error"


def status_and_detail(exc: Exception) -> tuple[int, str]:
    """Map a tenancy or tenant context error to a status code and message.

    Anything unrecognised, including MissingDatabaseConfigError and
    TenantContextAlreadySetError, maps to a generic 500.
    """
    if isinstance(exc, (TenantNotFoundError, TenantIdentifierMissingError)):
        return status.HTTP_401_UNAUTHORIZED, str(exc)
    if isinstance(exc, TenantContextNotSetError):
        return status.HTTP_401_UNAUTHORIZED, "Tenant context not set"
    if isinstance(exc, (TenantResolutionError, TenantConnectionError)):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, _INTERNAL_ERROR


def tenancy_error_response(exc: Exception) -> JSONResponse:
    """Build the JSON error response for a tenancy or tenant context error."""
    status_code, detail = status_and_detail(exc)
    return JSONResponse(status_code=status_code, content={"detail": detail})
