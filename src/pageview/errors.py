# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page-view instrumentation exception hierarchy.

All package-specific errors inherit from PageViewError, allowing callers
to catch the base class for any instrumentation failure or specific
subclasses for targeted handling.
"""

from __future__ import annotations


class PageViewError(Exception):
    """Base exception for all page-view instrumentation errors."""


class PlatformUnsupportedError(PageViewError):
    """Host lacks the navigation primitives needed for interception."""

    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.missing = missing


class SinkUnavailableError(PageViewError):
    """No emission sink could be obtained (no logger provider configured)."""
