# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page-view instrumentation: real and virtual navigations as telemetry events.

Watches a browser-like host for:
- full document loads (DOMContentLoaded) → ``event.type`` 0
- history pushState/replaceState navigations → ``event.type`` 1

and emits one normalized ``browser``/``page_view`` log record per navigation.
"""

from __future__ import annotations

from .config import InstrumentationConfig
from .errors import PageViewError, PlatformUnsupportedError, SinkUnavailableError
from .host import SimulatedHost
from .instrumentation import PageViewInstrumentation
from .types import LifecycleState, NavigationOccurrence, OccurrenceKind, PageViewEvent, PageViewType
from .version import VERSION as __version__

__all__ = [
    "InstrumentationConfig",
    "LifecycleState",
    "NavigationOccurrence",
    "OccurrenceKind",
    "PageViewError",
    "PageViewEvent",
    "PageViewInstrumentation",
    "PageViewType",
    "PlatformUnsupportedError",
    "SimulatedHost",
    "SinkUnavailableError",
    "__version__",
]
