# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Occurrence enrichment: TypedDict payload definitions and builder functions.

Pure, read-only access to the host. Enrichment never raises for a
well-formed occurrence; an unreadable host field becomes an empty string.
"""

from __future__ import annotations

from typing import TypedDict

from .types import Host, NavigationOccurrence, OccurrenceKind, PageViewEvent, PageViewType

# ── TypedDict payload definitions (wire names) ───────────────────


class LoadData(TypedDict):
    url: str
    referrer: str
    title: str


class VirtualData(TypedDict):
    oldUrl: str
    url: str
    title: str
    startTime: int
    changeState: str


# ── Payload builder functions ────────────────────────────────────


def load_data(*, url: str, referrer: str, title: str) -> LoadData:
    return LoadData(url=url, referrer=referrer, title=title)


def virtual_data(*, old_url: str, url: str, title: str, start_time: int, change_state: str) -> VirtualData:
    return VirtualData(oldUrl=old_url, url=url, title=title, startTime=start_time, changeState=change_state)


# ── Enrichment ───────────────────────────────────────────────────


def _read(obj: object, attr: str) -> str:
    value = getattr(obj, attr, None)
    return "" if value is None else str(value)


def enrich_load(occurrence: NavigationOccurrence, host: Host) -> PageViewEvent:
    # One snapshot: no awaits or callbacks between the three reads
    document = getattr(host, "document", None)
    data = load_data(
        url=_read(document, "document_uri"),
        referrer=_read(document, "referrer"),
        title=_read(document, "title"),
    )
    return PageViewEvent(type=PageViewType.LOAD, data=data)


def enrich_virtual(occurrence: NavigationOccurrence, host: Host) -> PageViewEvent:
    # oldUrl first, before any other read
    if occurrence.previous_url is not None:
        old_url = occurrence.previous_url
    else:
        old_url = _read(getattr(host, "location", None), "href")

    data = virtual_data(
        old_url=old_url,
        url="" if occurrence.target_url is None else str(occurrence.target_url),
        title=_read(getattr(host, "document", None), "title"),
        start_time=occurrence.observed_at_ns // 1000,
        change_state=occurrence.kind.value,
    )
    return PageViewEvent(type=PageViewType.VIRTUAL, data=data)


def enrich(occurrence: NavigationOccurrence, host: Host) -> PageViewEvent:
    """Build the page-view event for *occurrence* from the host's current state."""
    if occurrence.kind is OccurrenceKind.LOAD:
        return enrich_load(occurrence, host)
    return enrich_virtual(occurrence, host)
