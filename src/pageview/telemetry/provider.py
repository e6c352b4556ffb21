# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""LoggerProvider / Logger producing OTLP LogsData envelopes."""

from __future__ import annotations

import logging
import platform
import time
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# ── Version, read once at import ────────────────────────────────
try:
    from importlib.metadata import version as _pkg_version

    _PAGEVIEW_VERSION = _pkg_version("pageview-instrumentation")
except Exception:
    _PAGEVIEW_VERSION = "unknown"


class LogRecordProcessor(Protocol):
    def on_emit(self, envelope: dict) -> None: ...

    def force_flush(self) -> None: ...

    def shutdown(self) -> None: ...


# ── OTLP helpers ─────────────────────────────────────────────────


def default_resource(**overrides: str) -> dict[str, str]:
    """Resource attributes describing the emitting service."""
    resource = {
        "service.name": "pageview",
        "telemetry.sdk.name": "pageview-instrumentation",
        "telemetry.sdk.version": _PAGEVIEW_VERSION,
        "os.type": platform.system().lower(),
    }
    resource.update(overrides)
    return resource


def _to_otlp_attr_value(v: object) -> dict:
    """Convert a Python value to an OTLP AnyValue."""
    if isinstance(v, bool):
        return {"boolValue": v}
    if isinstance(v, int):
        return {"intValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if v is None:
        return {"stringValue": ""}
    if isinstance(v, Mapping):
        return {"kvlistValue": {"values": _payload_to_otlp_attributes(v)}}
    if isinstance(v, Sequence) and not isinstance(v, (str, bytes)):
        return {"arrayValue": {"values": [_to_otlp_attr_value(item) for item in v]}}
    return {"stringValue": str(v)}


def _payload_to_otlp_attributes(payload: Mapping[str, Any]) -> list[dict]:
    """Convert a mapping to an OTLP KeyValue list (nested mappings become kvlists)."""
    return [{"key": str(k), "value": _to_otlp_attr_value(v)} for k, v in payload.items()]


def wrap_otlp(
    record: Mapping[str, Any],
    *,
    resource: Mapping[str, str] | None = None,
    scope_name: str = "pageview",
    scope_version: str = "",
    timestamp_ns: int | None = None,
) -> dict:
    """Wrap a log record (``{"attributes": ..., "body": ...}``) into OTLP LogsData JSON.

    Each call produces one complete resourceLogs envelope with a single logRecord.
    """
    if timestamp_ns is None:
        timestamp_ns = record.get("timestamp_ns") or time.time_ns()

    log_record: dict = {
        "timeUnixNano": str(timestamp_ns),
        "observedTimeUnixNano": str(time.time_ns()),
        "severityNumber": int(record.get("severity_number", 9)),  # INFO
        "severityText": str(record.get("severity_text", "INFO")),
        "attributes": _payload_to_otlp_attributes(record.get("attributes") or {}),
    }
    if "body" in record:
        log_record["body"] = _to_otlp_attr_value(record["body"])

    scope: dict = {"name": scope_name}
    if scope_version:
        scope["version"] = scope_version

    return {
        "resourceLogs": [
            {
                "resource": {"attributes": _payload_to_otlp_attributes(resource or {})},
                "scopeLogs": [{"scope": scope, "logRecords": [log_record]}],
            }
        ]
    }


# ── Provider ─────────────────────────────────────────────────────


class Logger:
    """Named emitter bound to a provider. ``emit`` never raises."""

    def __init__(self, provider: LoggerProvider, name: str, version: str = "") -> None:
        self._provider = provider
        self.name = name
        self.version = version

    def emit(self, record: Mapping[str, Any]) -> None:
        try:
            if self._provider.is_shutdown:
                return
            envelope = wrap_otlp(
                record,
                resource=self._provider.resource,
                scope_name=self.name,
                scope_version=self.version,
            )
            self._provider._dispatch(envelope)
        except Exception:
            logger.debug("Dropping log record for %s", self.name, exc_info=True)


class LoggerProvider:
    """Holds the resource and the processor chain; hands out Loggers."""

    def __init__(self, resource: Mapping[str, str] | None = None) -> None:
        self.resource: dict[str, str] = dict(resource) if resource is not None else default_resource()
        self._processors: list[LogRecordProcessor] = []
        self._loggers: dict[tuple[str, str], Logger] = {}
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def processors(self) -> tuple[LogRecordProcessor, ...]:
        return tuple(self._processors)

    def add_log_record_processor(self, processor: LogRecordProcessor) -> None:
        self._processors.append(processor)

    def get_logger(self, name: str, version: str = "") -> Logger:
        key = (name, version)
        existing = self._loggers.get(key)
        if existing is None:
            existing = self._loggers[key] = Logger(self, name, version)
        return existing

    def _dispatch(self, envelope: dict) -> None:
        for processor in self._processors:
            try:
                processor.on_emit(envelope)
            except Exception:
                logger.warning("Log record processor %r failed", processor, exc_info=True)

    def force_flush(self) -> None:
        for processor in self._processors:
            try:
                processor.force_flush()
            except Exception:
                logger.warning("Flush failed for %r", processor, exc_info=True)

    def shutdown(self) -> None:
        """Final flush of every processor. Idempotent."""
        if self._shutdown:
            return
        self._shutdown = True
        for processor in self._processors:
            try:
                processor.shutdown()
            except Exception:
                logger.warning("Shutdown failed for %r", processor, exc_info=True)
