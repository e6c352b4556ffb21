# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Navigation event source: load listener and history-primitive interception.

Produces raw ``NavigationOccurrence`` signals and nothing else. Installing
and removing these hooks is the lifecycle controller's job; this module only
guarantees that each hook is a single, faithful layer.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any

from .errors import PlatformUnsupportedError
from .types import Host, LoadTracking, NavigationOccurrence, OccurrenceKind

logger = logging.getLogger(__name__)

OccurrenceCallback = Callable[[NavigationOccurrence], None]
Clock = Callable[[], int]

_HISTORY_PRIMITIVES: tuple[tuple[str, OccurrenceKind], ...] = (
    ("push_state", OccurrenceKind.PUSH_STATE),
    ("replace_state", OccurrenceKind.REPLACE_STATE),
)
_DOCUMENT_PRIMITIVES = ("add_event_listener", "remove_event_listener")


def check_platform(host: object) -> None:
    """Raise PlatformUnsupportedError if *host* lacks a required primitive."""
    missing: list[str] = []

    history = getattr(host, "history", None)
    if history is None:
        missing.append("history")
    else:
        missing.extend(f"history.{name}" for name, _ in _HISTORY_PRIMITIVES if not callable(getattr(history, name, None)))

    document = getattr(host, "document", None)
    if document is None:
        missing.append("document")
    else:
        missing.extend(f"document.{name}" for name in _DOCUMENT_PRIMITIVES if not callable(getattr(document, name, None)))

    if getattr(host, "location", None) is None:
        missing.append("location")

    if missing:
        raise PlatformUnsupportedError(
            f"Host does not expose navigation primitives: {', '.join(missing)}",
            missing=tuple(missing),
        )


def _extract_url(args: tuple, kwargs: dict) -> str | None:
    """URL argument of a push/replace call: third positional or ``url=``."""
    if "url" in kwargs:
        return kwargs["url"]
    if len(args) >= 3:
        return args[2]
    return None


class LoadListener:
    """DOMContentLoaded listener raising one LOAD occurrence per document load.

    A load is identified by the host document's ``load_id`` when the document
    implements ``LoadTracking``; otherwise by the identity of the readiness
    event object. The same load seen twice is ignored until ``reset()``.
    A listener called without an event fires once per ``reset()``.
    """

    __slots__ = ("_callback", "_clock", "_fired", "_host", "_last_anchor", "_last_tag")

    def __init__(self, callback: OccurrenceCallback, *, host: Host | None = None, clock: Clock = time.time_ns) -> None:
        self._callback = callback
        self._host = host
        self._clock = clock
        self._fired = False
        self._last_anchor: object = None
        self._last_tag: Any = None

    def reset(self) -> None:
        self._fired = False
        self._last_anchor = None
        self._last_tag = None

    def _load_key(self, event: object) -> tuple[object, Any]:
        document = getattr(self._host, "document", None) if self._host is not None else None
        if isinstance(document, LoadTracking):
            return document, document.load_id
        return event, None

    def __call__(self, event: object = None) -> None:
        anchor, tag = self._load_key(event)
        # References are held, so identity cannot be recycled between loads
        if self._fired and anchor is self._last_anchor and tag == self._last_tag:
            logger.debug("Ignoring repeated readiness signal for the same document load")
            return
        self._fired = True
        self._last_anchor = anchor
        self._last_tag = tag
        self._callback(NavigationOccurrence(kind=OccurrenceKind.LOAD, observed_at_ns=self._clock()))


class HistoryInterceptor:
    """Wraps ``history.push_state`` / ``history.replace_state`` exactly once.

    The wrappers call the saved original with identical arguments, then
    raise the occurrence, then return the original's result. While
    inactive they are pure pass-throughs.
    """

    def __init__(self, host: Host, callback: OccurrenceCallback, *, clock: Clock = time.time_ns) -> None:
        self._host = host
        self._callback = callback
        self._clock = clock
        self._originals: dict[str, tuple[Callable[..., Any], bool]] = {}
        self._wrappers: dict[str, Callable[..., Any]] = {}
        self._wrapped = False
        self._active = False

    @property
    def wrapped(self) -> bool:
        """True while our wrappers are installed on the host's history."""
        return self._wrapped

    @property
    def active(self) -> bool:
        """True while the wrappers raise occurrences."""
        return self._active

    def wrap(self) -> None:
        if self._wrapped:
            if not self._active:
                logger.debug("Reactivating installed history wrappers")
            self._active = True
            return

        history = self._host.history
        own_attrs = getattr(history, "__dict__", {})
        try:
            for name, kind in _HISTORY_PRIMITIVES:
                original = getattr(history, name)
                wrapper = self._make_wrapper(original, kind)
                setattr(history, name, wrapper)
                self._originals[name] = (original, name in own_attrs)
                self._wrappers[name] = wrapper
        except Exception:
            # All or nothing: never leave one primitive wrapped while ``wrapped`` is False
            self._restore_originals()
            raise

        self._wrapped = True
        self._active = True
        logger.debug("History primitives wrapped")

    def unwrap(self) -> None:
        if not self._wrapped:
            return

        history = self._host.history
        if any(getattr(history, name, None) is not wrapper for name, wrapper in self._wrappers.items()):
            # Something wrapped on top of us; removing our layer would drop theirs.
            logger.warning("History primitives were re-wrapped by other code; leaving pass-through wrappers installed")
            self._active = False
            return

        self._restore_originals()
        self._wrapped = False
        self._active = False
        logger.debug("History primitives restored")

    def _restore_originals(self) -> None:
        history = self._host.history
        for name, (original, was_own_attr) in self._originals.items():
            if was_own_attr:
                setattr(history, name, original)
            else:
                delattr(history, name)
        self._originals.clear()
        self._wrappers.clear()

    def _make_wrapper(self, original: Callable[..., Any], kind: OccurrenceKind) -> Callable[..., Any]:
        @functools.wraps(original)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            previous_url = getattr(self._host.location, "href", None)
            result = original(*args, **kwargs)
            if self._active:
                self._callback(
                    NavigationOccurrence(
                        kind=kind,
                        observed_at_ns=self._clock(),
                        target_url=_extract_url(args, kwargs),
                        previous_url=previous_url,
                    )
                )
            return result

        return wrapper
