# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Instrumentation configuration with environment overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

DEFAULT_LOGGER_NAME = "page_view_event"

_TRUTHY = ("1", "true", "yes")
_FALSY = ("0", "false", "no")


def _env_flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


@dataclass(frozen=True)
class InstrumentationConfig:
    """Immutable page-view instrumentation configuration.

    ``eager`` wraps the history primitives and resolves the emission sink
    when the instrumentation is constructed instead of on first ``enable()``.
    ``logger_provider`` is any object with ``get_logger(name, version)``;
    when unset, the process-global provider from ``pageview.telemetry`` is used.
    """

    eager: bool = False
    restore_history_on_disable: bool = True
    logger_name: str = DEFAULT_LOGGER_NAME
    logger_provider: object | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: object) -> InstrumentationConfig:
        """Build a config from ``PAGEVIEW_*`` variables; keyword overrides win."""
        env = os.environ if env is None else env
        config = cls(
            eager=_env_flag(env, "PAGEVIEW_EAGER", cls.eager),
            restore_history_on_disable=_env_flag(env, "PAGEVIEW_RESTORE_HISTORY", cls.restore_history_on_disable),
            logger_name=env.get("PAGEVIEW_LOGGER_NAME", "").strip() or cls.logger_name,
        )
        return replace(config, **overrides) if overrides else config
