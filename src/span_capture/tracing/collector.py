"""Ordered store of finalized span records."""

from __future__ import annotations

import threading

from span_capture.tracing.record import SpanRecord


class SpanCollector:
    """Collects :class:`SpanRecord` objects in the order spans were ended.

    Grows on every span end; shrinks only through :meth:`clear`, which the
    exporter calls after a successful write.
    """

    def __init__(self) -> None:
        self._spans: list[SpanRecord] = []
        self._lock = threading.Lock()

    def collect(self, record: SpanRecord) -> None:
        with self._lock:
            self._spans.append(record)

    def get_spans(self) -> list[SpanRecord]:
        """Return a copy of the collected records (oldest first)."""
        with self._lock:
            return list(self._spans)

    def clear(self, count: int | None = None) -> None:
        """Discard collected records.

        Args:
            count: Drop only the *count* oldest records.  Records collected
                after an export snapshot was taken survive the export.
        """
        with self._lock:
            if count is None:
                self._spans.clear()
            else:
                del self._spans[:count]

    def __len__(self) -> int:
        with self._lock:
            return len(self._spans)
