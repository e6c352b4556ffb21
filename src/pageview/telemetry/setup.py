# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Build a LoggerProvider with console and/or OTLP/HTTP export from config."""

from __future__ import annotations

import atexit
import os
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import dataclass, field

from .processors import BatchLogRecordProcessor, SimpleLogRecordProcessor
from .provider import LoggerProvider, default_resource
from .writers import ConsoleWriter, OtlpHttpWriter, Writer

_TRUTHY = ("1", "true", "yes")


def _parse_headers(raw: str) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` (OTEL_EXPORTER_OTLP_HEADERS format)."""
    headers: dict[str, str] = {}
    for pair in raw.split(","):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if raw:
        with suppress(ValueError):
            return float(raw)
    return default


@dataclass(frozen=True)
class ExporterConfig:
    """Immutable export configuration for the default emission sink.

    OTLP export is immediate unless ``batch`` is on; batched records are
    written at the first emit ``batch_delay_s`` after the oldest pending one,
    and at shutdown.
    """

    service_name: str = "pageview"
    service_namespace: str = ""
    console: bool = False
    otlp_endpoint: str = ""
    otlp_headers: dict[str, str] = field(default_factory=dict)
    batch: bool = False
    batch_delay_s: float = 5.0
    timeout_s: float = 10.0

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ExporterConfig:
        env = os.environ if env is None else env
        return cls(
            service_name=env.get("PAGEVIEW_SERVICE_NAME", "").strip() or cls.service_name,
            service_namespace=env.get("PAGEVIEW_SERVICE_NAMESPACE", "").strip(),
            console=env.get("PAGEVIEW_CONSOLE_EXPORT", "").strip().lower() in _TRUTHY,
            otlp_endpoint=env.get("PAGEVIEW_OTLP_ENDPOINT", "").strip(),
            otlp_headers=_parse_headers(env.get("PAGEVIEW_OTLP_HEADERS", "")),
            batch=env.get("PAGEVIEW_BATCH", "").strip().lower() in _TRUTHY,
            batch_delay_s=_parse_float(env, "PAGEVIEW_BATCH_DELAY", cls.batch_delay_s),
            timeout_s=_parse_float(env, "PAGEVIEW_OTLP_TIMEOUT", cls.timeout_s),
        )


def build_logger_provider(
    config: ExporterConfig,
    *,
    otlp_writer: Writer | None = None,
    shutdown_at_exit: bool = True,
) -> LoggerProvider:
    """Provider with one processor per configured exporter.

    Console output is always exported immediately; OTLP goes through the
    batch processor only when ``config.batch`` is on. ``otlp_writer``
    replaces the default OtlpHttpWriter (tests, custom transports).

    The provider is shut down at interpreter exit unless
    ``shutdown_at_exit`` is False, so batched records are flushed even when
    it was handed straight to an instrumentation rather than registered
    with ``pageview.telemetry.set_logger_provider``.
    """
    resource_overrides = {"service.name": config.service_name}
    if config.service_namespace:
        resource_overrides["service.namespace"] = config.service_namespace
    provider = LoggerProvider(resource=default_resource(**resource_overrides))

    if config.console:
        provider.add_log_record_processor(SimpleLogRecordProcessor(ConsoleWriter()))

    if config.otlp_endpoint or otlp_writer is not None:
        writer = otlp_writer or OtlpHttpWriter(
            config.otlp_endpoint,
            headers=config.otlp_headers,
            timeout_s=config.timeout_s,
        )
        if config.batch:
            processor = BatchLogRecordProcessor(writer, schedule_delay_s=config.batch_delay_s)
        else:
            processor = SimpleLogRecordProcessor(writer)
        provider.add_log_record_processor(processor)

    if shutdown_at_exit:
        atexit.register(provider.shutdown)
    return provider
