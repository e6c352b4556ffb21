# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for the instrumentation's own diagnostics.

ConsoleRenderer for local debugging, JSONRenderer when the host application
ships its logs. Leaf module, no pageview imports.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

_PACKAGE_PREFIX = "pageview"


def tag_instrumentation(logger: object, method_name: str, event_dict: dict) -> dict:
    """Mark records emitted by pageview loggers so they can be filtered downstream."""
    name = event_dict.get("logger", "")
    if name == _PACKAGE_PREFIX or name.startswith(_PACKAGE_PREFIX + "."):
        event_dict.setdefault("instrumentation", "pageview")
    return event_dict


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Configure structlog with stdlib bridge.

    Args:
        json_output: True for JSON lines, False for human-readable console output.
        level: Root logger level (default INFO). Unknown names fall back to INFO.
        stream: Output stream (default stderr).
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        tag_instrumentation,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    # Replace rather than append so repeated configure() never stacks handlers
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
