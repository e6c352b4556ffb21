# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Data model and host/sink protocols.

Leaf module, no pageview imports. The host protocols describe the minimal
browser-window shape the instrumentation reads and patches; any object with
these attributes works (see ``pageview.host.SimulatedHost``).
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

EVENT_DOMAIN = "browser"
EVENT_NAME = "page_view"

DOM_CONTENT_LOADED = "DOMContentLoaded"

Listener = Callable[[Any], None]


# ── Host surface ─────────────────────────────────────────────────


class Document(Protocol):
    document_uri: str
    referrer: str
    title: str

    def add_event_listener(self, event_type: str, listener: Listener) -> None: ...

    def remove_event_listener(self, event_type: str, listener: Listener) -> None: ...


@runtime_checkable
class LoadTracking(Protocol):
    """Optional document capability: ``load_id`` changes once per document load.

    Documents that reload in place expose it so a repeated readiness signal
    for the same load can be told apart from a new load. Without it, each
    distinct readiness event object counts as one load.
    """

    load_id: int


class Location(Protocol):
    href: str


class History(Protocol):
    def push_state(self, state: Any, title: str, url: str | None = None) -> Any: ...

    def replace_state(self, state: Any, title: str, url: str | None = None) -> Any: ...


class Host(Protocol):
    """Browser-window-like object: the only thing the core touches."""

    document: Document
    location: Location
    history: History


# ── Emission sink ────────────────────────────────────────────────


@runtime_checkable
class EmissionSink(Protocol):
    """Accepts one finished record. Buffering and transport are its business."""

    def emit(self, record: Mapping[str, Any]) -> None: ...


@runtime_checkable
class LoggerProviderLike(Protocol):
    def get_logger(self, name: str, version: str = "") -> EmissionSink: ...


# ── Occurrences and events ───────────────────────────────────────


class OccurrenceKind(enum.Enum):
    LOAD = "load"
    PUSH_STATE = "pushState"
    REPLACE_STATE = "replaceState"

    @property
    def is_virtual(self) -> bool:
        return self is not OccurrenceKind.LOAD


@dataclass(frozen=True, slots=True)
class NavigationOccurrence:
    """Raw signal that a navigation happened, before enrichment."""

    kind: OccurrenceKind
    observed_at_ns: int
    target_url: str | None = None  # literal history-call argument; None for loads
    previous_url: str | None = None  # location.href before the history primitive ran


class PageViewType(enum.IntEnum):
    LOAD = 0
    VIRTUAL = 1


class LifecycleState(enum.Enum):
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass(frozen=True, slots=True)
class PageViewEvent:
    """Enriched page-view record, ready for an emission sink."""

    type: PageViewType
    data: Mapping[str, Any]
    domain: str = EVENT_DOMAIN
    name: str = EVENT_NAME

    def to_log_record(self) -> dict[str, Any]:
        return {
            "attributes": {
                "event.domain": self.domain,
                "event.name": self.name,
                "event.type": int(self.type),
                "event.data": dict(self.data),
            }
        }
