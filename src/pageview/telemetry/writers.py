# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Telemetry writers: ConsoleWriter (JSON lines), OtlpHttpWriter, ListWriter."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from typing import Protocol, TextIO

import httpx

logger = logging.getLogger(__name__)

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318/v1/logs"


class Writer(Protocol):
    """Writer protocol for telemetry output."""

    def write_sync(self, batch: list[dict]) -> None: ...


class ConsoleWriter:
    """Write each OTLP envelope as one compact JSON line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def write_sync(self, batch: list[dict]) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        for envelope in batch:
            stream.write(json.dumps(envelope, ensure_ascii=False, separators=(",", ":")))
            stream.write("\n")
        stream.flush()


def merge_envelopes(batch: list[dict]) -> dict:
    """Concatenate the ``resourceLogs`` of several envelopes into one LogsData payload."""
    resource_logs: list[dict] = []
    for envelope in batch:
        resource_logs.extend(envelope.get("resourceLogs", []))
    return {"resourceLogs": resource_logs}


class OtlpHttpWriter:
    """POST batches as OTLP/JSON to a collector's ``/v1/logs`` endpoint.

    One attempt per batch: failures are logged and the batch is dropped.
    Pass ``client`` to reuse a connection pool or to inject a mock transport.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_OTLP_ENDPOINT,
        *,
        headers: Mapping[str, str] | None = None,
        timeout_s: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout_s)

    def write_sync(self, batch: list[dict]) -> None:
        if not batch:
            return
        payload = json.dumps(merge_envelopes(batch), ensure_ascii=False, separators=(",", ":"))
        try:
            response = self._client.post(self.endpoint, content=payload.encode("utf-8"), headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "OTLP export rejected by %s: HTTP %d (%d records dropped)",
                self.endpoint,
                exc.response.status_code,
                len(batch),
            )
        except httpx.HTTPError as exc:
            logger.warning("OTLP export to %s failed: %s (%d records dropped)", self.endpoint, exc, len(batch))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class ListWriter:
    """In-memory writer for testing. Captures all written envelopes."""

    def __init__(self) -> None:
        self.events: list[dict] = []

    def write_sync(self, batch: list[dict]) -> None:
        self.events.extend(batch)
