"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from infrastructure.database.dependencies import (
    close_registry_connections,
    get_registry_sessionmaker,
)
from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import (
    get_database_settings,
    get_settings,
    get_shared_database_settings,
    get_tenancy_settings,
)
from infrastructure.version import __version__
from shared_kernel.middleware.tenant_context import TenantContextError
from tenancy.application.services import TenantResolutionService
from tenancy.infrastructure import (
    PassthroughCredentialDecryptor,
    TenantConnectionManager,
    TenantRegistryClient,
)
from tenancy.ports.exceptions import TenancyError
from tenancy.presentation import TenantContextMiddleware
from tenancy.presentation import router as tenancy_router
from tenancy.presentation.errors import tenancy_error_response


@asynccontextmanager
async def tenant_router_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Registry engine (created on startup, verified, disposed on shutdown)
    - Tenant resolution cache
    - Tenant connection pools and their idle sweep
    """
    settings = get_settings()
    tenancy = get_tenancy_settings()
    configure_logging(debug=settings.debug)
    probe = DefaultStartupProbe()

    registry = TenantRegistryClient(
        session_factory=get_registry_sessionmaker(),
        decryptor=PassthroughCredentialDecryptor(tenancy.encryption_key),
        database_settings=get_database_settings(),
    )
    await registry.verify_connection()

    app.state.tenant_registry = registry
    app.state.tenant_resolution_service = TenantResolutionService(
        registry=registry,
        ttl_seconds=tenancy.cache_ttl_seconds,
        lookup_timeout_seconds=tenancy.lookup_timeout_seconds,
    )
    manager = TenantConnectionManager(
        get_shared_database_settings(),
        default_pool_size=tenancy.max_connections_per_pool,
        idle_timeout_seconds=tenancy.effective_idle_timeout_seconds,
        sweep_interval_seconds=tenancy.effective_sweep_interval_seconds,
        default_port=tenancy.default_database_port,
        default_ssl_mode=tenancy.default_ssl_mode,
        connect_timeout_seconds=tenancy.lookup_timeout_seconds,
    )
    app.state.tenant_connection_manager = manager
    await manager.start()
    probe.tenancy_started(
        cache_ttl_seconds=tenancy.cache_ttl_seconds,
        idle_timeout_seconds=tenancy.effective_idle_timeout_seconds,
        sweep_interval_seconds=tenancy.effective_sweep_interval_seconds,
    )

    try:
        yield
    finally:
        # Tenant pools first, registry last
        await manager.shutdown()
        await close_registry_connections()
        probe.tenancy_stopped()


app = FastAPI(
    title="Tenant Router API",
    description="Multi-tenant database routing for SaaS services",
    version=__version__,
    lifespan=tenant_router_lifespan,
)

app.add_middleware(TenantContextMiddleware)

# Include Tenancy bounded context routes
app.include_router(tenancy_router)


@app.exception_handler(TenancyError)
async def handle_tenancy_error(request: Request, exc: TenancyError) -> JSONResponse:
    return tenancy_error_response(exc)


@app.exception_handler(TenantContextError)
async def handle_tenant_context_error(
    request: Request, exc: TenantContextError
) -> JSONResponse:
    return tenancy_error_response(exc)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db(request: Request) -> dict:
    """Check tenant registry connectivity.

    Returns the connection status without failure detail.
    """
    registry: TenantRegistryClient = request.app.state.tenant_registry
    try:
        await registry.verify_connection()
    except DatabaseConnectionError:
        return {"status": "unhealthy", "connected": False}
    return {"status": "ok", "connected": True}
