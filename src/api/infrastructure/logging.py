"""Structlog configuration for the tenant router.

Events are rendered as colored console lines in a terminal and as JSON
lines otherwise. Credential-bearing keys are masked before rendering.
"""

import os
import sys
from typing import Any

import structlog

SERVICE_NAME = "tenant-router"

REDACTED = "***"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "database_password",
        "db_password",
        "encryption_key",
    }
)


def redact_credentials(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask values of credential keys in an event."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def _use_colors() -> bool:
    # FORCE_COLOR=1 enables colors even in non-TTY environments (like Docker)
    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")
    return force_color or sys.stdout.isatty()


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for the service.

    Args:
        debug: Emit debug-level events (cache hits, pool reuse) when True.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
    ]

    if _use_colors():
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(
            colors=True
        )
        processors = [*shared_processors, renderer]
    else:
        processors = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    # 10 == logging.DEBUG, 20 == logging.INFO
    min_level = 10 if debug else 20

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)
