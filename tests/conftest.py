# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import pageview  # noqa: F401
except ImportError:
    raise ImportError("pageview is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from pageview import telemetry
from pageview.host import SimulatedHost


class RecordingSink:
    """Emission sink capturing every record it is given."""

    def __init__(self) -> None:
        self.records: list[dict] = []

    def emit(self, record):
        self.records.append(record)

    def of_type(self, event_type: int) -> list[dict]:
        return [r for r in self.records if r["attributes"]["event.type"] == event_type]


class RecordingProvider:
    """Logger provider handing out a single RecordingSink."""

    def __init__(self) -> None:
        self.sink = RecordingSink()
        self.requested: list[tuple[str, str]] = []

    def get_logger(self, name: str, version: str = "") -> RecordingSink:
        self.requested.append((name, version))
        return self.sink


@pytest.fixture
def host() -> SimulatedHost:
    return SimulatedHost("https://a/", title="Home")


@pytest.fixture
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def sink(provider) -> RecordingSink:
    return provider.sink


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Isolate the process-global logger provider between tests."""
    telemetry._reset_for_testing()
    yield
    telemetry._reset_for_testing()
