# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Emission sink: OTLP-shaped log provider for page-view events.

Usage:
    from pageview import telemetry
    from pageview.telemetry.setup import ExporterConfig, build_logger_provider

    telemetry.set_logger_provider(build_logger_provider(ExporterConfig(console=True)))

Instrumentations without an explicit provider resolve the one registered here.
"""

from __future__ import annotations

import atexit
import contextlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..types import LoggerProviderLike

_provider: LoggerProviderLike | None = None
_atexit_registered = False


def set_logger_provider(provider: LoggerProviderLike) -> LoggerProviderLike:
    """Register the process-global provider.

    Idempotent: subsequent calls keep and return the first provider.
    Registers an atexit handler that shuts it down.
    """
    global _provider, _atexit_registered
    if _provider is not None:
        return _provider

    _provider = provider
    if not _atexit_registered:
        atexit.register(shutdown)
        _atexit_registered = True
    return _provider


def get_logger_provider() -> LoggerProviderLike | None:
    return _provider


def shutdown() -> None:
    """Flush remaining records and shut down the global provider."""
    with contextlib.suppress(Exception):
        stop = getattr(_provider, "shutdown", None)
        if callable(stop):
            stop()


def _reset_for_testing() -> None:
    """Reset module state for test isolation."""
    global _provider
    if _provider is not None:
        shutdown()
    _provider = None
