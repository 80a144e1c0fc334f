"""Unit tests for TenantRegistryClient.

The registry session is mocked; tests cover row mapping, status
filtering, credential decryption and error translation.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.observability import ConnectionProbe
from infrastructure.settings import DatabaseSettings
from shared_kernel.tenancy.value_objects import TenantMode
from tenancy.infrastructure.observability import TenantRegistryProbe
from tenancy.infrastructure.tenant_registry import TenantRegistryClient
from tenancy.ports.exceptions import TenantResolutionError
from tenancy.ports.repositories import ITenantRegistry


def _row(**overrides):
    row = {
        "id": "t-globex",
        "subdomain": "globex",
        "db_type": "DEDICATED",
        "status": "ACTIVE",
        "db_schema": None,
        "db_name": "globex",
        "db_host": "globex.db.internal",
        "db_port": 5433,
        "db_username": "enc:globex_app",
        "db_password": "enc:s3cret",
        "db_ssl_mode": "verify-full",
        "connection_pool_size": 5,
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create a mock registry session returning no rows."""
    session = AsyncMock()
    result = MagicMock()
    result.mappings.return_value.first.return_value = None
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def session_factory(mock_session: AsyncMock) -> MagicMock:
    """Create a session factory yielding the mock session."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_session)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture
def mock_decryptor() -> MagicMock:
    """Create a decryptor stripping an 'enc:' prefix."""
    decryptor = MagicMock()
    decryptor.decrypt.side_effect = lambda value: value.removeprefix("enc:")
    return decryptor


@pytest.fixture
def mock_probe() -> MagicMock:
    return MagicMock(spec=TenantRegistryProbe)


@pytest.fixture
def mock_connection_probe() -> MagicMock:
    return MagicMock(spec=ConnectionProbe)


@pytest.fixture
def client(
    session_factory, mock_decryptor, mock_probe, mock_connection_probe
) -> TenantRegistryClient:
    return TenantRegistryClient(
        session_factory=session_factory,
        decryptor=mock_decryptor,
        probe=mock_probe,
        connection_probe=mock_connection_probe,
        database_settings=DatabaseSettings(host="registry.internal", database="reg"),
    )


def _return_row(session: AsyncMock, row) -> None:
    session.execute.return_value.mappings.return_value.first.return_value = row


class TestFindByIdentifier:
    """Tests for find_by_identifier()."""

    def test_implements_registry_protocol(self, client) -> None:
        assert isinstance(client, ITenantRegistry)

    @pytest.mark.asyncio
    async def test_maps_dedicated_row_with_decrypted_credentials(
        self, client, mock_session
    ) -> None:
        _return_row(mock_session, _row())

        descriptor = await client.find_by_identifier("globex")

        assert descriptor is not None
        assert descriptor.id == "t-globex"
        assert descriptor.mode is TenantMode.DEDICATED
        assert descriptor.database_host == "globex.db.internal"
        assert descriptor.database_port == 5433
        assert descriptor.database_username == "globex_app"
        assert descriptor.database_password == "s3cret"
        assert descriptor.database_ssl_mode == "verify-full"
        assert descriptor.connection_pool_size == 5

    @pytest.mark.asyncio
    async def test_maps_shared_row_without_config_columns(
        self, client, mock_session, mock_decryptor
    ) -> None:
        """A tenant with no config row comes back from the outer join with NULLs."""
        _return_row(
            mock_session,
            _row(
                id="t-acme",
                subdomain="acme",
                db_type="SHARED",
                db_schema="tenant_acme",
                db_name=None,
                db_host=None,
                db_port=None,
                db_username=None,
                db_password=None,
                db_ssl_mode=None,
                connection_pool_size=None,
            ),
        )

        descriptor = await client.find_by_identifier("t-acme")

        assert descriptor.mode is TenantMode.SHARED
        assert descriptor.schema_name == "tenant_acme"
        assert descriptor.database_password is None
        mock_decryptor.decrypt.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_tenant_returns_none(
        self, client, mock_probe
    ) -> None:
        assert await client.find_by_identifier("nobody") is None
        mock_probe.tenant_not_found.assert_called_once_with("nobody")

    @pytest.mark.asyncio
    async def test_inactive_tenant_returns_none(
        self, client, mock_session, mock_probe
    ) -> None:
        _return_row(mock_session, _row(status="SUSPENDED"))

        assert await client.find_by_identifier("globex") is None
        mock_probe.tenant_inactive.assert_called_once_with(
            "globex", "t-globex", "SUSPENDED"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"connection_pool_size": 0},
            {"db_type": "HYBRID"},
            {"db_password": "garbled"},
        ],
    )
    async def test_inactive_tenant_with_broken_config_returns_none(
        self, client, mock_session, mock_decryptor, mock_probe, overrides
    ) -> None:
        """Inactive tenants are rejected before their config is read."""
        _return_row(mock_session, _row(status="SUSPENDED", **overrides))
        mock_decryptor.decrypt.side_effect = RuntimeError("bad ciphertext")

        assert await client.find_by_identifier("globex") is None

        mock_decryptor.decrypt.assert_not_called()
        mock_probe.lookup_failed.assert_not_called()
        mock_probe.tenant_inactive.assert_called_once_with(
            "globex", "t-globex", "SUSPENDED"
        )

    @pytest.mark.asyncio
    async def test_empty_identifier_raises_value_error(
        self, client, mock_session
    ) -> None:
        with pytest.raises(ValueError):
            await client.find_by_identifier("")
        mock_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_matches_id_or_subdomain_with_outer_join(
        self, client, mock_session
    ) -> None:
        await client.find_by_identifier("acme")

        stmt = mock_session.execute.call_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "LEFT OUTER JOIN tenant_database_configs" in sql
        assert "tenants.id = " in sql
        assert " OR tenants.subdomain = " in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_driver_error_raises_resolution_error(
        self, client, mock_session, mock_probe
    ) -> None:
        error = OperationalError("SELECT", {}, Exception("connection reset"))
        mock_session.execute.side_effect = error

        with pytest.raises(TenantResolutionError) as exc_info:
            await client.find_by_identifier("globex")

        assert str(exc_info.value) == "Failed to resolve tenant"
        assert exc_info.value.__cause__ is error
        mock_probe.lookup_failed.assert_called_once_with("globex", error)

    @pytest.mark.asyncio
    async def test_decryption_failure_raises_resolution_error(
        self, client, mock_session, mock_decryptor, mock_probe
    ) -> None:
        _return_row(mock_session, _row())
        mock_decryptor.decrypt.side_effect = RuntimeError("bad key")

        with pytest.raises(TenantResolutionError):
            await client.find_by_identifier("globex")

        mock_probe.credential_decryption_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_unknown_mode_raises_resolution_error(
        self, client, mock_session
    ) -> None:
        _return_row(mock_session, _row(db_type="HYBRID"))

        with pytest.raises(TenantResolutionError):
            await client.find_by_identifier("globex")


class TestVerifyConnection:
    """Tests for verify_connection()."""

    @pytest.mark.asyncio
    async def test_success_records_verification(
        self, client, mock_connection_probe
    ) -> None:
        await client.verify_connection()

        mock_connection_probe.connection_verified.assert_called_once_with(
            host="registry.internal", database="reg"
        )

    @pytest.mark.asyncio
    async def test_failure_raises_database_connection_error(
        self, client, mock_session, mock_connection_probe
    ) -> None:
        mock_session.execute.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(DatabaseConnectionError) as exc_info:
            await client.verify_connection()

        assert exc_info.value.host == "registry.internal"
        mock_connection_probe.connection_failed.assert_called_once()
