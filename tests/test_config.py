# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for pageview.config and pageview.telemetry.setup.ExporterConfig."""

from __future__ import annotations

import dataclasses

import pytest

from pageview.config import DEFAULT_LOGGER_NAME, InstrumentationConfig
from pageview.telemetry.setup import ExporterConfig, _parse_headers


class TestInstrumentationConfig:
    def test_defaults(self):
        config = InstrumentationConfig()
        assert config.eager is False
        assert config.restore_history_on_disable is True
        assert config.logger_name == DEFAULT_LOGGER_NAME == "page_view_event"
        assert config.logger_provider is None

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            InstrumentationConfig().eager = True  # type: ignore[misc]

    def test_from_empty_env(self):
        assert InstrumentationConfig.from_env({}) == InstrumentationConfig()

    def test_from_env_flags(self):
        config = InstrumentationConfig.from_env(
            {"PAGEVIEW_EAGER": "yes", "PAGEVIEW_RESTORE_HISTORY": "0", "PAGEVIEW_LOGGER_NAME": " spa "}
        )
        assert config.eager is True
        assert config.restore_history_on_disable is False
        assert config.logger_name == "spa"

    def test_unrecognized_flag_keeps_default(self):
        config = InstrumentationConfig.from_env({"PAGEVIEW_EAGER": "maybe", "PAGEVIEW_RESTORE_HISTORY": ""})
        assert config.eager is False
        assert config.restore_history_on_disable is True

    def test_overrides_win(self):
        provider = object()
        config = InstrumentationConfig.from_env({"PAGEVIEW_EAGER": "1"}, eager=False, logger_provider=provider)
        assert config.eager is False
        assert config.logger_provider is provider

    def test_reads_process_env(self, monkeypatch):
        monkeypatch.setenv("PAGEVIEW_EAGER", "true")
        assert InstrumentationConfig.from_env().eager is True


class TestExporterConfig:
    def test_defaults(self):
        config = ExporterConfig()
        assert config.service_name == "pageview"
        assert config.console is False
        assert config.otlp_endpoint == ""
        assert config.batch is False
        assert config.batch_delay_s == 5.0

    def test_from_env(self):
        config = ExporterConfig.from_env(
            {
                "PAGEVIEW_SERVICE_NAME": "shop",
                "PAGEVIEW_SERVICE_NAMESPACE": "web",
                "PAGEVIEW_CONSOLE_EXPORT": "1",
                "PAGEVIEW_OTLP_ENDPOINT": "http://collector:4318/v1/logs",
                "PAGEVIEW_OTLP_HEADERS": "Authorization=Bearer x,X-Team=web",
                "PAGEVIEW_BATCH": "yes",
                "PAGEVIEW_BATCH_DELAY": "0.5",
                "PAGEVIEW_OTLP_TIMEOUT": "2.5",
            }
        )
        assert config.service_name == "shop"
        assert config.service_namespace == "web"
        assert config.console is True
        assert config.otlp_endpoint == "http://collector:4318/v1/logs"
        assert config.otlp_headers == {"Authorization": "Bearer x", "X-Team": "web"}
        assert config.batch is True
        assert config.batch_delay_s == 0.5
        assert config.timeout_s == 2.5

    def test_bad_timeout_ignored(self):
        assert ExporterConfig.from_env({"PAGEVIEW_OTLP_TIMEOUT": "soon"}).timeout_s == 10.0

    def test_bad_batch_delay_ignored(self):
        assert ExporterConfig.from_env({"PAGEVIEW_BATCH_DELAY": "later"}).batch_delay_s == 5.0


class TestParseHeaders:
    def test_skips_malformed_pairs(self):
        assert _parse_headers("a=1,broken,=x, b = 2 ") == {"a": "1", "b": "2"}

    def test_empty(self):
        assert _parse_headers("") == {}
