"""Unit test fixtures with fake collaborators.

Fakes stand in for the tenant registry, the engine factory and the
clock so the tenancy components can be tested without a database.
"""

from __future__ import annotations

import asyncio

import pytest
from pydantic import SecretStr

from shared_kernel.tenancy.value_objects import TenantDescriptor, TenantMode


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRegistry:
    """In-memory tenant registry that counts lookups."""

    def __init__(self, tenants: list[TenantDescriptor] | None = None) -> None:
        self.tenants = list(tenants or [])
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.delay: float | None = None

    async def find_by_identifier(self, identifier: str) -> TenantDescriptor | None:
        self.calls.append(identifier)
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        for tenant in self.tenants:
            if identifier in (tenant.id, tenant.subdomain) and tenant.is_active:
                return tenant
        return None


class FakeConnection:
    def __init__(self, engine: FakeEngine) -> None:
        self._engine = engine

    async def __aenter__(self) -> FakeConnection:
        if self._engine.gate is not None:
            await self._engine.gate.wait()
        if self._engine.connect_error is not None:
            raise self._engine.connect_error
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False

    async def execute(self, statement: object) -> None:
        self._engine.executed.append(str(statement))


class FakeEngine:
    """Records pool lifecycle calls in place of an AsyncEngine."""

    def __init__(
        self,
        url: object,
        pool_size: int,
        connect_error: Exception | None = None,
        dispose_error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.url = url
        self.pool_size = pool_size
        self.connect_error = connect_error
        self.dispose_error = dispose_error
        self.gate = gate
        self.executed: list[str] = []
        self.dispose_calls = 0
        self.options: dict[str, object] = {}
        self.parent: FakeEngine | None = None

    @property
    def disposed(self) -> bool:
        return self.dispose_calls > 0

    def connect(self) -> FakeConnection:
        return FakeConnection(self)

    async def dispose(self) -> None:
        self.dispose_calls += 1
        if self.dispose_error is not None:
            raise self.dispose_error

    def execution_options(self, **options: object) -> FakeEngine:
        view = FakeEngine(self.url, self.pool_size)
        view.options = options
        view.parent = self
        return view


class FakeEngineFactory:
    """Engine factory producing FakeEngines with configurable failures."""

    def __init__(self) -> None:
        self.engines: list[FakeEngine] = []
        self.connect_error: Exception | None = None
        self.dispose_error: Exception | None = None
        self.gate: asyncio.Event | None = None

    def __call__(self, url: object, pool_size: int) -> FakeEngine:
        engine = FakeEngine(
            url,
            pool_size,
            connect_error=self.connect_error,
            dispose_error=self.dispose_error,
            gate=self.gate,
        )
        self.engines.append(engine)
        return engine


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def engine_factory() -> FakeEngineFactory:
    """Provide a fake engine factory."""
    return FakeEngineFactory()


@pytest.fixture
def shared_tenant() -> TenantDescriptor:
    """An active tenant in the shared database."""
    return TenantDescriptor(
        id="t-acme",
        subdomain="acme",
        mode=TenantMode.SHARED,
        status="ACTIVE",
        schema_name="tenant_acme",
    )


@pytest.fixture
def other_shared_tenant() -> TenantDescriptor:
    """A second active tenant in the shared database."""
    return TenantDescriptor(
        id="t-initech",
        subdomain="initech",
        mode=TenantMode.SHARED,
        status="ACTIVE",
        schema_name="tenant_initech",
    )


@pytest.fixture
def dedicated_tenant() -> TenantDescriptor:
    """An active tenant with its own database instance."""
    return TenantDescriptor(
        id="t-globex",
        subdomain="globex",
        mode=TenantMode.DEDICATED,
        status="ACTIVE",
        database_host="globex.db.internal",
        database_port=5433,
        database_name="globex",
        database_username="globex_app",
        database_password="s3cret",
        connection_pool_size=5,
    )


@pytest.fixture
def suspended_tenant() -> TenantDescriptor:
    """A tenant that exists but may not be routed to."""
    return TenantDescriptor(
        id="t-hooli",
        subdomain="hooli",
        mode=TenantMode.SHARED,
        status="SUSPENDED",
        schema_name="tenant_hooli",
    )


@pytest.fixture
def fake_registry(
    shared_tenant: TenantDescriptor,
    dedicated_tenant: TenantDescriptor,
    suspended_tenant: TenantDescriptor,
) -> FakeRegistry:
    """Provide a registry knowing the standard test tenants."""
    return FakeRegistry([shared_tenant, dedicated_tenant, suspended_tenant])


@pytest.fixture
def shared_db_settings():
    """Provide shared tenant database settings."""
    from infrastructure.settings import SharedDatabaseSettings

    return SharedDatabaseSettings(
        host="shared.db.internal",
        port=5432,
        database="tenants_shared",
        username="shared_app",
        password=SecretStr("shared-pw"),
        ssl_mode="require",
    )
