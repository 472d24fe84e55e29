from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


_CONFIGURED = False

# Loggers used by the OpenTelemetry SDK, exporters and instrumentations.
_OTEL_DIAGNOSTIC_LOGGER = "opentelemetry"


def configure_logging(level: int | str = logging.INFO, diagnostic_level: int | str = logging.DEBUG) -> None:
    """Configure structlog + stdlib logging for JSON output.

    ``diagnostic_level`` applies to the OpenTelemetry loggers only, so exporter
    and instrumentation problems can be surfaced without raising the app level.

    Safe to call multiple times (no-op after first call).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *pre_chain,
            # Let ProcessorFormatter render JSON for stdlib log records too.
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=pre_chain,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(_to_level(level))

    # Keep uvicorn's own loggers consistent with our handler.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers = [handler]
        logger.propagate = False
        logger.setLevel(_to_level(level))

    logging.getLogger(_OTEL_DIAGNOSTIC_LOGGER).setLevel(_to_level(diagnostic_level))

    _CONFIGURED = True


def _to_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO
