"""Request-scoped tenant context.

Holds the resolved tenant for exactly one unit of work (an HTTP request or
a queue message). A fresh RequestTenantContext is created for every unit
of work and bound to a ContextVar, so concurrent asyncio tasks never see
each other's tenant.

Usage:
    with tenant_context_scope() as context:
        context.set(descriptor)
        ...
        current_tenant_context().get()  # same descriptor, anywhere below

The resolution logic (header extraction, registry lookup, platform admin
bypass) lives in the tenancy bounded context.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from shared_kernel.tenancy.value_objects import TenantDescriptor


class TenantContextError(Exception):
    """Base class for tenant context contract violations.

    These indicate a wiring bug in the request pipeline, not a user error.
    """

    pass


class TenantContextAlreadySetError(TenantContextError):
    """Raised when a tenant is bound twice within one unit of work."""

    pass


class TenantContextNotSetError(TenantContextError):
    """Raised when the tenant is read before it was bound."""

    pass


class RequestTenantContext:
    """Set-once container for the current unit of work's tenant."""

    __slots__ = ("_tenant",)

    def __init__(self) -> None:
        self._tenant: TenantDescriptor | None = None

    def set(self, tenant: TenantDescriptor) -> None:
        """Bind the tenant for this unit of work.

        Raises:
            TenantContextAlreadySetError: If a tenant is already bound.
        """
        if self._tenant is not None:
            raise TenantContextAlreadySetError(
                "Tenant context already set for this request"
            )
        self._tenant = tenant

    def get(self) -> TenantDescriptor:
        """Return the bound tenant.

        Raises:
            TenantContextNotSetError: If no tenant is bound.
        """
        if self._tenant is None:
            raise TenantContextNotSetError("Tenant context not set")
        return self._tenant

    def has_tenant(self) -> bool:
        return self._tenant is not None

    def get_id_safe(self) -> str | None:
        """Tenant id, or None when unset. Never raises."""
        return self._tenant.id if self._tenant is not None else None

    def get_subdomain_safe(self) -> str | None:
        """Tenant subdomain, or None when unset. Never raises."""
        return self._tenant.subdomain if self._tenant is not None else None

    def clear(self) -> None:
        self._tenant = None


_current_context: ContextVar[RequestTenantContext | None] = ContextVar(
    "request_tenant_context", default=None
)


@contextmanager
def tenant_context_scope() -> Iterator[RequestTenantContext]:
    """Open a fresh tenant context for one unit of work.

    The context is cleared and unbound on exit, whether the body
    returns, raises, or is cancelled.

    Yields:
        The new, empty RequestTenantContext.
    """
    context = RequestTenantContext()
    token = _current_context.set(context)
    try:
        yield context
    finally:
        context.clear()
        _current_context.reset(token)


def current_tenant_context() -> RequestTenantContext:
    """Return the tenant context bound to the current unit of work.

    Raises:
        TenantContextNotSetError: If called outside tenant_context_scope().
    """
    context = _current_context.get()
    if context is None:
        raise TenantContextNotSetError("No tenant context scope is active")
    return context
