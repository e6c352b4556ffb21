# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""In-memory browser window implementing the host surface.

Useful for tests, demos, and server-side replays of navigation traces.
A real embedding (webview bridge, headless driver) provides its own object
with the same attributes; see ``pageview.types.Host``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin

from .types import DOM_CONTENT_LOADED, Listener

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReadyEvent:
    """Event object passed to document listeners.

    ``load_id`` identifies one document lifecycle: a repeated readiness
    signal for the same document carries the same id.
    """

    type: str
    load_id: int


@dataclass(slots=True)
class HistoryEntry:
    url: str
    state: Any = None
    title: str = ""


class SimulatedDocument:
    """Document with DOM-style listener registration.

    Real DOM ``addEventListener`` ignores a listener that is already
    registered; ``allow_duplicate_listeners=True`` models registration APIs
    that don't.
    """

    def __init__(
        self,
        document_uri: str = "about:blank",
        *,
        title: str = "",
        referrer: str = "",
        allow_duplicate_listeners: bool = False,
    ) -> None:
        self.document_uri = document_uri
        self.title = title
        self.referrer = referrer
        self.load_id = 0
        self._allow_duplicates = allow_duplicate_listeners
        self._listeners: dict[str, list[Listener]] = {}

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        bucket = self._listeners.setdefault(event_type, [])
        if not self._allow_duplicates and any(existing is listener for existing in bucket):
            return
        bucket.append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        bucket = self._listeners.get(event_type, [])
        for i, existing in enumerate(bucket):
            if existing is listener:
                del bucket[i]
                return

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch_event(self, event: ReadyEvent) -> None:
        # Snapshot so listeners may unregister themselves while dispatching
        for listener in list(self._listeners.get(event.type, [])):
            listener(event)


class SimulatedLocation:
    __slots__ = ("href",)

    def __init__(self, href: str = "about:blank") -> None:
        self.href = href

    def __repr__(self) -> str:
        return f"SimulatedLocation(href={self.href!r})"


class SimulatedHistory:
    """Session history with pushState/replaceState semantics.

    Relative URLs resolve against the current location. A ``None`` URL keeps
    the current URL and only records the new state.
    """

    def __init__(self, window: SimulatedHost) -> None:
        self._window = window
        self._entries: list[HistoryEntry] = [HistoryEntry(url=window.location.href)]
        self._index = 0

    @property
    def length(self) -> int:
        return len(self._entries)

    @property
    def state(self) -> Any:
        return self._entries[self._index].state

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def push_state(self, state: Any, title: str, url: str | None = None) -> None:
        new_url = self._resolve(url)
        del self._entries[self._index + 1 :]
        self._entries.append(HistoryEntry(url=new_url, state=state, title=title))
        self._index += 1
        self._window._commit_url(new_url)

    def replace_state(self, state: Any, title: str, url: str | None = None) -> None:
        new_url = self._resolve(url)
        self._entries[self._index] = HistoryEntry(url=new_url, state=state, title=title)
        self._window._commit_url(new_url)

    def _resolve(self, url: str | None) -> str:
        current = self._window.location.href
        if url is None:
            return current
        return urljoin(current, url)

    def _record_load(self, url: str) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(HistoryEntry(url=url))
        self._index += 1


class SimulatedHost:
    """Browser-window stand-in exposing ``document``, ``location`` and ``history``."""

    def __init__(self, url: str = "about:blank", *, title: str = "", allow_duplicate_listeners: bool = False) -> None:
        self.location = SimulatedLocation(url)
        self.document = SimulatedDocument(url, title=title, allow_duplicate_listeners=allow_duplicate_listeners)
        self.history = SimulatedHistory(self)

    def load(self, url: str, *, title: str = "", referrer: str = "") -> None:
        """Full document load: new URL, title and referrer, then DOMContentLoaded."""
        self.location.href = url
        doc = self.document
        doc.document_uri = url
        doc.title = title
        doc.referrer = referrer
        doc.load_id += 1
        self.history._record_load(url)
        logger.debug("Simulated load of %s (load_id=%d)", url, doc.load_id)
        self.fire_dom_content_loaded()

    def fire_dom_content_loaded(self) -> None:
        """Dispatch the readiness signal for the current document (again)."""
        self.document.dispatch_event(ReadyEvent(type=DOM_CONTENT_LOADED, load_id=self.document.load_id))

    def _commit_url(self, url: str) -> None:
        self.location.href = url
        self.document.document_uri = url
