"""Collecting span -- the handle instrumented code mutates until it ends."""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry.sdk.trace.id_generator import RandomIdGenerator
from opentelemetry.trace import (
    Span,
    SpanContext,
    Status,
    StatusCode,
    TraceFlags,
    format_span_id,
    format_trace_id,
)

from span_capture.core.constants import EXCEPTION_EVENT_NAME, NANOS_PER_MILLI
from span_capture.tracing.record import SpanEvent, SpanRecord, SpanStatus

if TYPE_CHECKING:
    from span_capture.tracing.collector import SpanCollector

logger = structlog.get_logger(__name__)

_ID_GENERATOR = RandomIdGenerator()


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // NANOS_PER_MILLI


def to_millis(timestamp: Any) -> int | None:
    """Convert an OTel-style timestamp (int nanoseconds) or datetime to ms.

    Returns ``None`` for anything that is not a usable timestamp.
    """
    if isinstance(timestamp, bool):
        return None
    if isinstance(timestamp, int):
        return timestamp // NANOS_PER_MILLI
    if isinstance(timestamp, datetime):
        return int(timestamp.timestamp() * 1000)
    return None


def _millis_or_now(timestamp: Any) -> int:
    millis = to_millis(timestamp)
    return now_ms() if millis is None else millis


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _string_keys(attributes: Mapping[Any, Any]) -> dict[str, Any]:
    return {str(key): value for key, value in attributes.items()}


def _coerce_status(status: Any, description: str | None) -> SpanStatus | None:
    if isinstance(status, Status):
        return SpanStatus(
            code=status.status_code.value,
            message=_text(status.description or description),
        )
    if isinstance(status, StatusCode):
        return SpanStatus(code=status.value, message=_text(description))
    if isinstance(status, Mapping):
        code = status.get("code", StatusCode.UNSET)
        if isinstance(code, StatusCode):
            code = code.value
        message = status.get("message", description)
        try:
            return SpanStatus(
                code=int(code),
                message=_text(message),
            )
        except (TypeError, ValueError):
            return None
    return None


class CollectingSpan(Span):
    """An :class:`opentelemetry.trace.Span` that records into a collector.

    The handle accumulates name, attributes, events and status until
    :meth:`end` is called; ending materializes a :class:`SpanRecord`, hands
    it to the collector and makes the handle non-recording.  Every later
    mutation is ignored.  No method raises for caller misuse.

    Args:
        name: Initial span name (renamable until the span ends).
        collector: Destination for the finished record.
        parent: Optional parent span.  A valid parent lends its trace id
            and becomes the record's ``parent_span_id``.
        attributes: Initial attributes.
        start_time: Start timestamp in nanoseconds; defaults to now.
    """

    def __init__(
        self,
        name: str,
        collector: SpanCollector,
        parent: Span | None = None,
        attributes: Mapping[str, Any] | None = None,
        start_time: int | None = None,
    ) -> None:
        self._name = str(name)
        self._collector = collector
        self._parent_span_id: int | None = None

        parent_context = parent.get_span_context() if parent is not None else None
        if parent_context is not None and parent_context.is_valid:
            self._trace_id = parent_context.trace_id
            self._parent_span_id = parent_context.span_id
        else:
            self._trace_id = _ID_GENERATOR.generate_trace_id()
        self._span_id = _ID_GENERATOR.generate_span_id()

        self._start_time = _millis_or_now(start_time)
        self._end_time: int | None = None
        self._attributes: dict[str, Any] = {}
        self._events: list[SpanEvent] = []
        self._status: SpanStatus | None = None

        if attributes:
            self.set_attributes(attributes)

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> str:
        return self._name

    @property
    def trace_id(self) -> str:
        return format_trace_id(self._trace_id)

    @property
    def span_id(self) -> str:
        return format_span_id(self._span_id)

    @property
    def parent_span_id(self) -> str | None:
        if self._parent_span_id is None:
            return None
        return format_span_id(self._parent_span_id)

    @property
    def end_time(self) -> int | None:
        return self._end_time

    def get_span_context(self) -> SpanContext:
        return SpanContext(
            trace_id=self._trace_id,
            span_id=self._span_id,
            is_remote=False,
            trace_flags=TraceFlags(TraceFlags.SAMPLED),
        )

    # ------------------------------------------------------------------ #
    # Mutators
    # ------------------------------------------------------------------ #

    def _accepts_mutation(self, operation: str) -> bool:
        if self._end_time is None:
            return True
        logger.debug(
            "span_mutation_ignored",
            span=self._name,
            span_id=self.span_id,
            operation=operation,
        )
        return False

    def set_attribute(self, key: str, value: Any) -> None:
        if self._accepts_mutation("set_attribute"):
            self._attributes[str(key)] = value

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        if not isinstance(attributes, Mapping):
            return
        if self._accepts_mutation("set_attributes"):
            self._attributes.update(_string_keys(attributes))

    def add_event(
        self,
        name: str,
        attributes: Any = None,
        timestamp: Any = None,
    ) -> None:
        """Append an event.

        A non-mapping *attributes* argument is recorded as an empty attribute
        set; an integer in that position is taken as the event timestamp.
        """
        if not self._accepts_mutation("add_event"):
            return
        if isinstance(attributes, Mapping):
            event_attributes = _string_keys(attributes)
        else:
            event_attributes = {}
            if timestamp is None:
                timestamp = attributes
        self._events.append(
            SpanEvent(
                name=str(name),
                time=_millis_or_now(timestamp),
                attributes=event_attributes,
            )
        )

    def add_link(self, context: SpanContext, attributes: Any = None) -> None:
        """Links are not part of the captured shape; accepted and dropped."""

    def set_status(
        self,
        status: Status | StatusCode | Mapping[str, Any],
        description: str | None = None,
    ) -> None:
        if not self._accepts_mutation("set_status"):
            return
        coerced = _coerce_status(status, description)
        if coerced is not None:
            self._status = coerced

    def update_name(self, name: str) -> None:
        if self._accepts_mutation("update_name"):
            self._name = str(name)

    def record_exception(
        self,
        exception: BaseException | str,
        attributes: Any = None,
        timestamp: int | None = None,
        escaped: bool = False,
    ) -> None:
        """Add an ``exception`` event carrying the message and type name."""
        if isinstance(exception, BaseException):
            type_name = type(exception).__name__
        else:
            type_name = "Error"
        event_attributes: dict[str, Any] = {
            "exception.message": str(exception),
            "exception.type": type_name,
        }
        if isinstance(attributes, Mapping):
            event_attributes.update(attributes)
        self.add_event(EXCEPTION_EVENT_NAME, event_attributes, timestamp)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def is_recording(self) -> bool:
        return self._end_time is None

    def end(self, end_time: int | None = None) -> None:
        """Finish the span and hand its record to the collector.

        Idempotent: only the first call takes effect.
        """
        if self._end_time is not None:
            return
        record = self.to_record().model_copy(update={"end_time": _millis_or_now(end_time)})
        self._end_time = record.end_time
        self._collector.collect(record)

    def to_record(self) -> SpanRecord:
        """Snapshot the current state (usable before the span has ended)."""
        return SpanRecord(
            name=self._name,
            trace_id=self.trace_id,
            span_id=self.span_id,
            parent_span_id=self.parent_span_id,
            start_time=self._start_time,
            end_time=self._end_time,
            attributes=dict(self._attributes),
            events=list(self._events),
            status=self._status,
        )

    def __repr__(self) -> str:
        state = "recording" if self.is_recording() else "ended"
        return f"CollectingSpan(name={self._name!r}, span_id={self.span_id!r}, {state})"
