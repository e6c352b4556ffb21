# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for pageview.enricher: load/virtual enrichment and payload builders."""

from __future__ import annotations

from types import SimpleNamespace

from pageview.enricher import enrich, enrich_load, enrich_virtual, load_data, virtual_data
from pageview.host import SimulatedHost
from pageview.types import NavigationOccurrence, OccurrenceKind, PageViewEvent, PageViewType

_TS = 1_700_000_000_123_456_789


def _occ(kind=OccurrenceKind.PUSH_STATE, *, target_url="/b", previous_url=None):
    return NavigationOccurrence(kind=kind, observed_at_ns=_TS, target_url=target_url, previous_url=previous_url)


class TestBuilders:
    def test_load_data(self):
        assert load_data(url="u", referrer="r", title="t") == {"url": "u", "referrer": "r", "title": "t"}

    def test_virtual_data_wire_names(self):
        data = virtual_data(old_url="o", url="u", title="t", start_time=5, change_state="pushState")
        assert data == {"oldUrl": "o", "url": "u", "title": "t", "startTime": 5, "changeState": "pushState"}


class TestEnrichLoad:
    def test_reads_document_snapshot(self):
        host = SimulatedHost()
        host.load("https://a/", title="Home", referrer="https://ref/")
        event = enrich_load(_occ(OccurrenceKind.LOAD, target_url=None), host)

        assert event.type is PageViewType.LOAD
        assert event.domain == "browser"
        assert event.name == "page_view"
        assert event.data == {"url": "https://a/", "referrer": "https://ref/", "title": "Home"}

    def test_missing_fields_become_empty(self):
        host = SimpleNamespace(document=SimpleNamespace(document_uri=None), location=None)
        event = enrich_load(_occ(OccurrenceKind.LOAD, target_url=None), host)
        assert event.data == {"url": "", "referrer": "", "title": ""}

    def test_is_read_only(self):
        host = SimulatedHost("https://a/", title="Home")
        enrich_load(_occ(OccurrenceKind.LOAD, target_url=None), host)
        assert host.location.href == "https://a/"
        assert host.history.length == 1


class TestEnrichVirtual:
    def test_uses_literal_target_url(self):
        host = SimulatedHost("https://a/b", title="B")
        event = enrich_virtual(_occ(target_url="/b", previous_url="https://a/"), host)

        assert event.type is PageViewType.VIRTUAL
        assert event.data["url"] == "/b"
        assert event.data["oldUrl"] == "https://a/"
        assert event.data["title"] == "B"
        assert event.data["changeState"] == "pushState"

    def test_start_time_microseconds(self):
        event = enrich_virtual(_occ(), SimulatedHost())
        assert event.data["startTime"] == _TS // 1000
        assert isinstance(event.data["startTime"], int)

    def test_absent_url_is_empty_string(self):
        event = enrich_virtual(_occ(target_url=None), SimulatedHost())
        assert event.data["url"] == ""

    def test_old_url_falls_back_to_location(self):
        host = SimulatedHost("https://a/current")
        event = enrich_virtual(_occ(previous_url=None), host)
        assert event.data["oldUrl"] == "https://a/current"

    def test_replace_state(self):
        event = enrich_virtual(_occ(OccurrenceKind.REPLACE_STATE), SimulatedHost())
        assert event.data["changeState"] == "replaceState"

    def test_hostless_enrichment_never_raises(self):
        event = enrich_virtual(_occ(), object())
        assert event.data["oldUrl"] == ""
        assert event.data["title"] == ""


class TestEnrichDispatch:
    def test_dispatch(self):
        host = SimulatedHost()
        assert enrich(_occ(OccurrenceKind.LOAD, target_url=None), host).type is PageViewType.LOAD
        assert enrich(_occ(OccurrenceKind.PUSH_STATE), host).type is PageViewType.VIRTUAL
        assert enrich(_occ(OccurrenceKind.REPLACE_STATE), host).type is PageViewType.VIRTUAL


class TestPageViewEvent:
    def test_to_log_record(self):
        event = PageViewEvent(type=PageViewType.LOAD, data={"url": "u", "referrer": "", "title": "t"})
        record = event.to_log_record()
        assert record == {
            "attributes": {
                "event.domain": "browser",
                "event.name": "page_view",
                "event.type": 0,
                "event.data": {"url": "u", "referrer": "", "title": "t"},
            }
        }
        assert type(record["attributes"]["event.type"]) is int

    def test_record_data_is_a_copy(self):
        data = {"url": "u"}
        record = PageViewEvent(type=PageViewType.VIRTUAL, data=data).to_log_record()
        record["attributes"]["event.data"]["url"] = "changed"
        assert data["url"] == "u"
