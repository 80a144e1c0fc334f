"""Architecture tests using pytest-archon.

These tests enforce DDD architectural boundaries between layers
within the Tenancy bounded context, and keep the shared kernel and
cross-cutting infrastructure independent of it.
"""

from pytest_archon import archrule


class TestTenancyDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        Value objects describe tenants and pool snapshots; they should
        not know about engines, sessions or the registry tables.
        """
        (
            archrule("domain_no_infrastructure")
            .match("tenancy.domain*")
            .should_not_import("tenancy.infrastructure*", "infrastructure*")
            .check("tenancy")
        )

    def test_domain_does_not_import_application(self):
        """Domain layer should not depend on application layer."""
        (
            archrule("domain_no_application")
            .match("tenancy.domain*")
            .should_not_import("tenancy.application*")
            .check("tenancy")
        )

    def test_domain_does_not_import_frameworks(self):
        """Domain objects should be framework-agnostic."""
        (
            archrule("domain_no_frameworks")
            .match("tenancy.domain*")
            .should_not_import("fastapi*", "starlette*", "sqlalchemy*")
            .check("tenancy")
        )


class TestTenancyPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define the registry contract, not its implementation."""
        (
            archrule("ports_no_infrastructure")
            .match("tenancy.ports*")
            .should_not_import("tenancy.infrastructure*")
            .check("tenancy")
        )

    def test_ports_does_not_import_application(self):
        """Ports are used by the application layer, not the other way around."""
        (
            archrule("ports_no_application")
            .match("tenancy.ports*")
            .should_not_import("tenancy.application*")
            .check("tenancy")
        )


class TestTenancyApplicationLayerBoundaries:
    """Tests that the application layer has appropriate dependencies."""

    def test_application_does_not_import_infrastructure(self):
        """The resolution service depends on ITenantRegistry, not on the
        SQLAlchemy-backed client.
        """
        (
            archrule("application_no_infrastructure")
            .match("tenancy.application*")
            .should_not_import("tenancy.infrastructure*", "sqlalchemy*")
            .check("tenancy")
        )

    def test_application_does_not_import_presentation(self):
        (
            archrule("application_no_presentation")
            .match("tenancy.application*")
            .should_not_import("tenancy.presentation*", "fastapi*", "starlette*")
            .check("tenancy")
        )

    def test_application_can_import_domain_and_ports(self):
        """Application layer should be able to import domain and ports."""
        (
            archrule("application_may_import_domain_ports")
            .match("tenancy.application*")
            .may_import("tenancy.domain*", "tenancy.ports*")
            .check("tenancy")
        )


class TestTenancyInfrastructureLayerBoundaries:
    """Tests that infrastructure has appropriate dependencies."""

    def test_infrastructure_does_not_import_application(self):
        """Infrastructure is used BY the application layer, not vice versa."""
        (
            archrule("infrastructure_no_application")
            .match("tenancy.infrastructure*")
            .should_not_import("tenancy.application*")
            .check("tenancy")
        )

    def test_infrastructure_does_not_import_presentation(self):
        (
            archrule("infrastructure_no_presentation")
            .match("tenancy.infrastructure*")
            .should_not_import("tenancy.presentation*", "tenancy.dependencies*")
            .check("tenancy")
        )


class TestSharedKernelBoundaries:
    """Tests that shared code does not depend on the bounded context."""

    def test_shared_kernel_does_not_import_tenancy(self):
        """The tenant context and descriptor are shared, not owned by tenancy."""
        (
            archrule("shared_kernel_no_tenancy")
            .match("shared_kernel*")
            .should_not_import("tenancy*")
            .check("shared_kernel")
        )

    def test_infrastructure_does_not_import_tenancy(self):
        """Cross-cutting infrastructure should not import bounded contexts."""
        (
            archrule("infrastructure_no_tenancy")
            .match("infrastructure*")
            .should_not_import("tenancy*")
            .check("infrastructure")
        )
