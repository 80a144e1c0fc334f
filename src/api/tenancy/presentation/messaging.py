"""Tenant context for queue message consumers.

In microservice mode the gateway has already resolved the tenant and
embeds the full descriptor in the message under ``tenant``. Consumers
wrap the handling of each message in ``message_tenant_scope``:

    async def on_message(payload: dict) -> None:
        async with message_tenant_scope(payload) as context:
            if context.has_tenant():
                database = await manager.get_connection(context.get())
                ...

A message without a usable descriptor is still processed, with no
tenant bound.
"""

from __future__ import annotations

import functools
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from infrastructure.observability.context import ObservationContext
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import (
    RequestTenantContext,
    tenant_context_scope,
)
from tenancy.dependencies.tenant_context import bind_message_tenant

T = TypeVar("T")

MESSAGE_ID_KEYS = ("messageId", "message_id")


def message_observation_context(payload: Any) -> ObservationContext:
    """Build the logging context of a message, keyed by its id if present."""
    message_id = None
    if isinstance(payload, Mapping):
        message_id = next(
            (str(payload[key]) for key in MESSAGE_ID_KEYS if payload.get(key)),
            None,
        )
    return ObservationContext(request_id=message_id).with_extra(source="message")


@asynccontextmanager
async def message_tenant_scope(
    payload: Any,
    probe: TenantContextProbe | None = None,
) -> AsyncIterator[RequestTenantContext]:
    """Open a tenant context scope bound to a message's tenant.

    The context is cleared when the block exits, including on error
    and cancellation.
    """
    probe = (probe or DefaultTenantContextProbe()).with_context(
        message_observation_context(payload)
    )
    with tenant_context_scope() as context:
        bind_message_tenant(payload, context=context, probe=probe)
        try:
            yield context
        finally:
            if context.has_tenant():
                probe.tenant_context_cleared(context.get_id_safe())


def tenant_message_handler(
    handler: Callable[[Any], Awaitable[T]],
) -> Callable[[Any], Awaitable[T]]:
    """Decorate a message handler so it runs inside message_tenant_scope."""

    @functools.wraps(handler)
    async def wrapper(payload: Any) -> T:
        async with message_tenant_scope(payload):
            return await handler(payload)

    return wrapper
