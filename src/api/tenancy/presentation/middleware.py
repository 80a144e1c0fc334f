"""HTTP middleware binding the request's tenant.

Every request runs inside its own tenant context scope. The tenant
identifier is read from a configurable header (``x-tenant-id`` by
default), resolved through the resolution cache and bound before the
route runs. The descriptor is also exposed as ``request.state.tenant``.

Errors raised here never reach the application's exception handlers,
so they are turned into responses directly.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from infrastructure.observability.context import ObservationContext
from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import (
    TenantContextError,
    tenant_context_scope,
)
from tenancy.application.services import TenantResolutionService
from tenancy.dependencies.tenant_context import bind_tenant_context
from tenancy.ports.exceptions import TenancyError
from tenancy.presentation.errors import tenancy_error_response

REQUEST_ID_HEADER = "x-request-id"


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Binds the tenant of each request to a fresh tenant context."""

    def __init__(
        self,
        app: ASGIApp,
        settings: TenancySettings | None = None,
        probe: TenantContextProbe | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings or get_tenancy_settings()
        self._probe = probe or DefaultTenantContextProbe()

    def is_public_path(self, path: str) -> bool:
        for public in self._settings.public_paths:
            prefix = public.rstrip("/")
            if path == public or path == prefix or path.startswith(prefix + "/"):
                return True
        return False

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        identifier = request.headers.get(self._settings.tenant_header_name)
        probe = self._probe.with_context(
            ObservationContext(request_id=request.headers.get(REQUEST_ID_HEADER))
        )
        resolver: TenantResolutionService = request.app.state.tenant_resolution_service

        with tenant_context_scope() as context:
            try:
                descriptor = await bind_tenant_context(
                    identifier,
                    context=context,
                    resolver=resolver,
                    probe=probe,
                    platform_admin_identifier=self._settings.platform_admin_identifier,
                    allow_anonymous=self.is_public_path(path),
                    path=path,
                )
            except (TenancyError, TenantContextError) as e:
                return tenancy_error_response(e)

            request.state.tenant = descriptor
            request.state.platform_access = (
                identifier is not None
                and identifier.strip() == self._settings.platform_admin_identifier
            )
            try:
                return await call_next(request)
            finally:
                probe.tenant_context_cleared(context.get_id_safe())
