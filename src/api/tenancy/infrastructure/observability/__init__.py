"""Domain-Oriented Observability for tenancy infrastructure.

Probes for registry lookups and tenant pool management.
"""

from tenancy.infrastructure.observability.connection_manager_probe import (
    ConnectionManagerProbe,
    DefaultConnectionManagerProbe,
)
from tenancy.infrastructure.observability.registry_probe import (
    DefaultTenantRegistryProbe,
    TenantRegistryProbe,
)

__all__ = [
    "ConnectionManagerProbe",
    "DefaultConnectionManagerProbe",
    "TenantRegistryProbe",
    "DefaultTenantRegistryProbe",
]
