"""Span records -- the finalized, serializable shape of a captured span."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SpanStatus(BaseModel):
    """Completion status: OTel status code (0 unset, 1 ok, 2 error) and message."""

    model_config = ConfigDict(frozen=True)

    code: int
    message: str | None = None


class SpanEvent(BaseModel):
    """A timestamped sub-event recorded on a span."""

    model_config = ConfigDict(frozen=True)

    name: str
    time: int
    """Wall-clock milliseconds since the epoch."""
    attributes: dict[str, Any] = Field(default_factory=dict)


class SpanRecord(BaseModel):
    """Immutable snapshot produced when a span handle is ended.

    Attribute values are kept as given (strings, numbers, booleans, or
    anything else a caller passed); typing for the wire happens in the
    serializer.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    trace_id: str
    span_id: str
    parent_span_id: str | None = None
    start_time: int
    end_time: int | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    events: list[SpanEvent] = Field(default_factory=list)
    status: SpanStatus | None = None

    @property
    def duration_ms(self) -> int | None:
        """Return elapsed milliseconds, or ``None`` if the record has no end."""
        if self.end_time is None:
            return None
        return self.end_time - self.start_time
