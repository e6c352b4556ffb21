# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log record processors: immediate export and queued batch export."""

from __future__ import annotations

import logging
import queue
import time
from collections.abc import Callable

from .writers import Writer

logger = logging.getLogger(__name__)


def _close_writer(writer: Writer) -> None:
    close = getattr(writer, "close", None)
    if callable(close):
        close()


class ProcessorMeta:
    """Approximate export counters.

    Plain int increments; best-effort diagnostics, not accounting-grade.
    """

    __slots__ = ("emitted", "dropped", "exported")

    def __init__(self) -> None:
        self.emitted: int = 0
        self.dropped: int = 0
        self.exported: int = 0

    def snapshot(self) -> dict:
        return {"emitted": self.emitted, "dropped": self.dropped, "exported": self.exported}


class SimpleLogRecordProcessor:
    """Hands each envelope to the writer as soon as it is emitted."""

    def __init__(self, writer: Writer) -> None:
        self._writer = writer
        self._shutdown = False
        self.meta = ProcessorMeta()

    def on_emit(self, envelope: dict) -> None:
        if self._shutdown:
            return
        self.meta.emitted += 1
        try:
            self._writer.write_sync([envelope])
            self.meta.exported += 1
        except Exception:
            self.meta.dropped += 1
            logger.warning("Export failed; record dropped", exc_info=True)

    def force_flush(self) -> None:
        pass

    def shutdown(self) -> None:
        if self._shutdown:
            return
        self._shutdown = True
        _close_writer(self._writer)


class BatchLogRecordProcessor:
    """Queues envelopes and writes them in batches.

    Flushes when ``max_export_batch_size`` envelopes are pending, when the
    oldest pending envelope is ``schedule_delay_s`` old at the next emit, and
    on ``force_flush()`` / ``shutdown()``. Envelopes beyond ``max_queue_size``
    are dropped and counted. No background thread: flushing happens on the
    emitting call.
    """

    def __init__(
        self,
        writer: Writer,
        *,
        max_queue_size: int = 2048,
        max_export_batch_size: int = 512,
        schedule_delay_s: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_export_batch_size > max_queue_size:
            raise ValueError("max_export_batch_size must not exceed max_queue_size")
        if schedule_delay_s < 0:
            raise ValueError("schedule_delay_s must not be negative")
        self._writer = writer
        self._max_queue_size = max_queue_size
        self._max_export_batch_size = max_export_batch_size
        self._schedule_delay_s = schedule_delay_s
        self._clock = clock
        self._queue: queue.SimpleQueue[dict] = queue.SimpleQueue()
        self._oldest_pending_at: float | None = None
        self._shutdown = False
        self.meta = ProcessorMeta()

    def on_emit(self, envelope: dict) -> None:
        if self._shutdown:
            return

        if self._queue.qsize() >= self._max_queue_size:
            self.meta.dropped += 1
            return

        now = self._clock()
        if self._oldest_pending_at is None:
            self._oldest_pending_at = now
        self._queue.put(envelope)
        self.meta.emitted += 1

        if (
            self._queue.qsize() >= self._max_export_batch_size
            or now - self._oldest_pending_at >= self._schedule_delay_s
        ):
            self.force_flush()

    def force_flush(self) -> None:
        """Drain the queue and write everything pending, one batch at a time."""
        self._oldest_pending_at = None
        while True:
            batch: list[dict] = []
            while len(batch) < self._max_export_batch_size:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break
            if not batch:
                return
            try:
                self._writer.write_sync(batch)
                self.meta.exported += len(batch)
            except Exception:
                self.meta.dropped += len(batch)
                logger.warning("Batch export of %d records failed", len(batch), exc_info=True)

    def shutdown(self) -> None:
        """Final flush, then stop accepting records."""
        if self._shutdown:
            return
        self.force_flush()
        self._shutdown = True
        _close_writer(self._writer)
