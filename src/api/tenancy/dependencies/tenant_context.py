"""Tenant context binding.

Turns an inbound tenant identifier into a bound RequestTenantContext.
This is the core logic behind the HTTP middleware; it is kept free of
request objects so it can be exercised directly.

Order of checks:
    1. No identifier: allowed only on public paths, otherwise rejected.
    2. Platform admin identifier: passes through, nothing resolved.
    3. Identifier resolved through the resolution cache; unknown or
       inactive tenants are rejected with the same error.
"""

from __future__ import annotations

from shared_kernel.middleware.observability.tenant_context_probe import (
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import RequestTenantContext
from shared_kernel.tenancy.value_objects import TenantDescriptor
from tenancy.application.services import TenantResolutionService
from tenancy.ports.exceptions import TenantIdentifierMissingError, TenantNotFoundError


async def bind_tenant_context(
    identifier: str | None,
    *,
    context: RequestTenantContext,
    resolver: TenantResolutionService,
    probe: TenantContextProbe,
    platform_admin_identifier: str,
    allow_anonymous: bool = False,
    path: str = "",
) -> TenantDescriptor | None:
    """Resolve an identifier and bind the tenant to the context.

    Args:
        identifier: Raw identifier from the request, or None
        context: Context of the current unit of work
        resolver: Resolution cache in front of the registry
        probe: Domain probe for observability
        platform_admin_identifier: Identifier that skips resolution
        allow_anonymous: Whether a missing identifier is acceptable
        path: Request path, for observability

    Returns:
        The bound descriptor, or None when nothing was bound (anonymous
        or platform admin access)

    Raises:
        TenantIdentifierMissingError: If no identifier was supplied and
            anonymous access is not allowed
        TenantNotFoundError: If no active tenant matches
        TenantResolutionError: If the registry lookup fails
        TenantContextAlreadySetError: If the context is already bound
    """
    identifier = (identifier or "").strip()

    if not identifier:
        if allow_anonymous:
            probe.anonymous_access(path)
            return None
        probe.tenant_identifier_missing(path)
        raise TenantIdentifierMissingError()

    if identifier == platform_admin_identifier:
        probe.platform_access(identifier)
        return None

    descriptor = await resolver.resolve(identifier)
    if descriptor is None:
        probe.tenant_rejected(identifier)
        raise TenantNotFoundError()

    context.set(descriptor)
    probe.tenant_context_bound(
        tenant_id=descriptor.id,
        subdomain=descriptor.subdomain,
        mode=descriptor.mode.value,
    )
    return descriptor


def bind_message_tenant(
    payload: object,
    *,
    context: RequestTenantContext,
    probe: TenantContextProbe,
) -> TenantDescriptor | None:
    """Bind the tenant embedded in a queue message payload.

    Messages carry the full descriptor under the ``tenant`` key, so no
    registry lookup is made. A missing or malformed descriptor is
    reported and the message is processed without a tenant.

    Returns:
        The bound descriptor, or None
    """
    raw = payload.get("tenant") if isinstance(payload, dict) else None
    if not raw:
        probe.message_tenant_missing()
        return None

    try:
        descriptor = (
            raw if isinstance(raw, TenantDescriptor) else TenantDescriptor.from_dict(raw)
        )
    except (ValueError, AttributeError) as e:
        probe.message_tenant_invalid(e)
        return None

    context.set(descriptor)
    probe.tenant_context_bound(
        tenant_id=descriptor.id,
        subdomain=descriptor.subdomain,
        mode=descriptor.mode.value,
    )
    return descriptor
