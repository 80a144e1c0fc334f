"""Unit tests for TenantResolutionService.

Covers cache hits under either identifier, fixed TTL expiry, negative
results not being cached, invalidation, and lookup failures.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from shared_kernel.tenancy.value_objects import TenantDescriptor, TenantMode
from tenancy.application.observability import TenantResolutionProbe
from tenancy.application.services import TenantResolutionService
from tenancy.ports.exceptions import TenantResolutionError


@pytest.fixture
def mock_probe() -> MagicMock:
    """Create a mock resolution probe."""
    return MagicMock(spec=TenantResolutionProbe)


@pytest.fixture
def service(fake_registry, fake_clock, mock_probe) -> TenantResolutionService:
    """Resolution service with a 300 second TTL on a fake clock."""
    return TenantResolutionService(
        registry=fake_registry,
        ttl_seconds=300,
        clock=fake_clock,
        probe=mock_probe,
    )


class TestResolve:
    """Tests for resolve()."""

    @pytest.mark.asyncio
    async def test_cache_miss_queries_registry(
        self, service, fake_registry, shared_tenant
    ) -> None:
        result = await service.resolve("acme")

        assert result == shared_tenant
        assert fake_registry.calls == ["acme"]

    @pytest.mark.asyncio
    async def test_resolution_is_cached_under_both_keys(
        self, service, fake_registry, shared_tenant, fake_clock
    ) -> None:
        """Resolving by subdomain also serves later lookups by id."""
        await service.resolve("acme")
        fake_clock.advance(299)

        by_id = await service.resolve("t-acme")
        by_subdomain = await service.resolve("acme")

        assert by_id == shared_tenant
        assert by_subdomain == shared_tenant
        assert fake_registry.calls == ["acme"]

    @pytest.mark.asyncio
    async def test_entry_expires_at_ttl_regardless_of_reads(
        self, service, fake_registry, fake_clock
    ) -> None:
        """Reads do not extend an entry's lifetime."""
        await service.resolve("t-globex")
        for _ in range(5):
            fake_clock.advance(50)
            await service.resolve("globex")
        assert fake_registry.calls == ["t-globex"]

        fake_clock.advance(50)
        await service.resolve("globex")

        assert fake_registry.calls == ["t-globex", "globex"]

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(
        self, service, fake_registry, fake_clock
    ) -> None:
        """A tenant provisioned after a miss is visible on the next lookup."""
        assert await service.resolve("newco") is None

        newco = TenantDescriptor(
            id="t-newco",
            subdomain="newco",
            mode=TenantMode.SHARED,
            status="ACTIVE",
            schema_name="tenant_newco",
        )
        fake_registry.tenants.append(newco)

        assert await service.resolve("newco") == newco
        assert fake_registry.calls == ["newco", "newco"]

    @pytest.mark.asyncio
    async def test_inactive_tenant_resolves_to_none(self, service) -> None:
        assert await service.resolve("hooli") is None

    @pytest.mark.asyncio
    async def test_empty_identifier_is_rejected(self, service, fake_registry) -> None:
        with pytest.raises(ValueError):
            await service.resolve("")
        assert fake_registry.calls == []

    @pytest.mark.asyncio
    async def test_registry_failure_propagates_and_is_not_cached(
        self, service, fake_registry, shared_tenant
    ) -> None:
        fake_registry.error = TenantResolutionError()

        with pytest.raises(TenantResolutionError):
            await service.resolve("acme")

        fake_registry.error = None
        assert await service.resolve("acme") == shared_tenant
        assert fake_registry.calls == ["acme", "acme"]

    @pytest.mark.asyncio
    async def test_lookup_timeout_raises_resolution_error(
        self, fake_registry, fake_clock, mock_probe
    ) -> None:
        fake_registry.delay = 1.0
        service = TenantResolutionService(
            registry=fake_registry,
            ttl_seconds=300,
            clock=fake_clock,
            probe=mock_probe,
            lookup_timeout_seconds=0.01,
        )

        with pytest.raises(TenantResolutionError):
            await service.resolve("acme")

        mock_probe.lookup_timed_out.assert_called_once_with("acme", 0.01)

    @pytest.mark.asyncio
    async def test_concurrent_misses_may_each_query_registry(
        self, service, fake_registry, shared_tenant
    ) -> None:
        """Without single-flight, concurrent misses all reach the registry."""
        fake_registry.delay = 0.01

        results = await asyncio.gather(*(service.resolve("acme") for _ in range(3)))

        assert results == [shared_tenant] * 3
        assert len(fake_registry.calls) == 3

        await service.resolve("t-acme")
        assert len(fake_registry.calls) == 3

    @pytest.mark.asyncio
    async def test_probe_records_hits_and_misses(
        self, service, mock_probe
    ) -> None:
        await service.resolve("acme")
        await service.resolve("acme")

        mock_probe.cache_miss.assert_called_once_with("acme")
        mock_probe.cache_hit.assert_called_once_with("acme", "t-acme")
        mock_probe.tenant_cached.assert_called_once_with("t-acme", "acme", 300)

    def test_ttl_must_be_positive(self, fake_registry) -> None:
        with pytest.raises(ValueError):
            TenantResolutionService(registry=fake_registry, ttl_seconds=0)


class TestInvalidate:
    """Tests for invalidate() and invalidate_all()."""

    @pytest.mark.asyncio
    async def test_invalidate_removes_both_keys(
        self, service, fake_registry
    ) -> None:
        await service.resolve("acme")

        assert service.invalidate("t-acme") is True
        assert service.cached_identifiers() == []

        await service.resolve("acme")
        assert fake_registry.calls == ["acme", "acme"]

    @pytest.mark.asyncio
    async def test_invalidate_removes_expired_entries(
        self, service, fake_clock
    ) -> None:
        await service.resolve("acme")
        fake_clock.advance(1000)

        assert service.invalidate("acme") is True
        assert service.cached_identifiers() == []

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped_when_tenant_deactivated(
        self, service, fake_registry, fake_clock, mock_probe
    ) -> None:
        await service.resolve("acme")
        fake_clock.advance(301)
        fake_registry.tenants = [
            t for t in fake_registry.tenants if t.subdomain != "acme"
        ]

        assert await service.resolve("acme") is None

        assert service.cached_identifiers() == []
        assert service.invalidate("t-acme") is False
        mock_probe.cache_expired.assert_called_once_with("acme", "t-acme")

    @pytest.mark.asyncio
    async def test_cached_identifiers_omits_expired_entries(
        self, service, fake_clock
    ) -> None:
        await service.resolve("acme")
        fake_clock.advance(200)
        await service.resolve("globex")
        fake_clock.advance(101)

        assert service.cached_identifiers() == ["globex", "t-globex"]

    def test_invalidate_unknown_identifier_returns_false(self, service) -> None:
        assert service.invalidate("nobody") is False

    @pytest.mark.asyncio
    async def test_invalidate_leaves_other_tenants_cached(self, service) -> None:
        await service.resolve("acme")
        await service.resolve("globex")

        service.invalidate("acme")

        assert service.cached_identifiers() == ["globex", "t-globex"]

    @pytest.mark.asyncio
    async def test_invalidate_all_returns_removed_key_count(self, service) -> None:
        await service.resolve("acme")
        await service.resolve("globex")

        assert service.invalidate_all() == 4
        assert service.cached_identifiers() == []
        assert service.invalidate_all() == 0
