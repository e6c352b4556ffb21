# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""PageViewInstrumentation: enable/disable lifecycle and event wiring.

Sole authority for installing and removing the navigation hooks:

    host action → source (occurrence) → enricher (event) → sink.emit(record)

Everything runs synchronously on the calling thread, so records reach the
sink in the order the navigations happened.
"""

from __future__ import annotations

import logging

from . import telemetry
from .config import InstrumentationConfig
from .enricher import enrich
from .errors import SinkUnavailableError
from .source import HistoryInterceptor, LoadListener, check_platform
from .types import DOM_CONTENT_LOADED, EmissionSink, Host, LifecycleState, NavigationOccurrence
from .version import VERSION

logger = logging.getLogger(__name__)


class PageViewInstrumentation:
    """Emits a ``page_view`` record for every full load and history navigation.

    Raises PlatformUnsupportedError at construction if *host* lacks the
    navigation primitives. A missing emission sink is logged once; page
    views are then detected and enriched but not emitted.
    """

    name = "pageview-instrumentation"
    version = VERSION

    def __init__(
        self,
        host: Host,
        config: InstrumentationConfig | None = None,
        *,
        logger_provider: object | None = None,
    ) -> None:
        check_platform(host)
        self._host = host
        self.config = config if config is not None else InstrumentationConfig()
        self._logger_provider = logger_provider
        self._state = LifecycleState.DISABLED
        self._sink: EmissionSink | None = None
        self._sink_reported = False

        # Created once so add/remove always see the same listener object
        self._load_listener = LoadListener(self._on_occurrence, host=host)
        self._history = HistoryInterceptor(host, self._on_occurrence)

        if self.config.eager:
            self._history.wrap()
            self._resolve_sink()

    # ── Public lifecycle ─────────────────────────────────────────

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._state is LifecycleState.ENABLED

    @property
    def sink_available(self) -> bool:
        return self._sink is not None

    def enable(self) -> None:
        document = self._host.document
        if self._state is LifecycleState.ENABLED:
            logger.debug("%s already enabled; re-registering load listener", self.name)
        else:
            self._load_listener.reset()

        # Wrap first: if the host refuses the patch, no hook is left behind
        self._history.wrap()

        # Some registration APIs accept duplicates: always remove before adding
        document.remove_event_listener(DOM_CONTENT_LOADED, self._load_listener)
        document.add_event_listener(DOM_CONTENT_LOADED, self._load_listener)

        if self._sink is None:
            self._resolve_sink()

        self._state = LifecycleState.ENABLED
        logger.debug("%s enabled", self.name)

    def disable(self) -> None:
        """Remove the load listener and, by default, restore history.

        A no-op while DISABLED. An ``eager`` instance that was never enabled
        therefore keeps its history wrappers installed until an
        enable/disable cycle runs.
        """
        if self._state is LifecycleState.DISABLED:
            return

        self._host.document.remove_event_listener(DOM_CONTENT_LOADED, self._load_listener)
        if self.config.restore_history_on_disable:
            self._history.unwrap()

        self._state = LifecycleState.DISABLED
        logger.debug("%s disabled", self.name)

    # ── Internals ────────────────────────────────────────────────

    def _obtain_sink(self) -> EmissionSink:
        provider = self._logger_provider
        if provider is None:
            provider = self.config.logger_provider
        if provider is None:
            provider = telemetry.get_logger_provider()
        if provider is None:
            raise SinkUnavailableError("no logger provider configured")
        try:
            return provider.get_logger(self.config.logger_name, self.version)  # type: ignore[attr-defined]
        except Exception as exc:
            raise SinkUnavailableError(f"logger provider {provider!r} could not supply a logger") from exc

    def _resolve_sink(self) -> None:
        try:
            self._sink = self._obtain_sink()
        except SinkUnavailableError as exc:
            self._sink = None
            if not self._sink_reported:
                self._sink_reported = True
                logger.warning("%s: %s; page views will not be emitted", self.name, exc)

    def _on_occurrence(self, occurrence: NavigationOccurrence) -> None:
        if self._state is not LifecycleState.ENABLED:
            logger.debug("Dropping %s occurrence while disabled", occurrence.kind.value)
            return

        event = enrich(occurrence, self._host)
        if self._sink is None:
            return

        # Fire-and-forget: a failing sink must not break the host's navigation
        try:
            self._sink.emit(event.to_log_record())
        except Exception:
            logger.warning("Emission sink raised; %s page view dropped", occurrence.kind.value, exc_info=True)
