"""Process-wide capture session and test helpers.

Instrumentation that looks up "the current span" ambiently uses the single
default :class:`SpanCapture` held here.  Tests that prefer explicit wiring
create their own session instead.

Usage::

    from span_capture import harness

    span = harness.start_test_span("draft.promote")
    harness.add_event(span, "draft.promote.started", {"draftId": "DRAFT-1"})
    harness.complete_span(span, {"draftId": "DRAFT-1"})
    harness.export_test_spans("traces", "promote-success", "draft-management")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from opentelemetry.context import Context
from opentelemetry.trace import Span, StatusCode

from span_capture.capture import SpanCapture
from span_capture.tracing.tracer import CollectingTracer

T = TypeVar("T")

_capture = SpanCapture()


def get_capture() -> SpanCapture:
    """Return the process-wide capture session."""
    return _capture


def get_tracer() -> CollectingTracer:
    return _capture.tracer


def get_active_span() -> Span | None:
    return _capture.get_active_span()


def set_span(context: Context | None, span: Span) -> Context:
    return _capture.propagation.set_span(context, span)


def with_context(context: Context, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    return _capture.propagation.with_context(context, fn, *args, **kwargs)


def start_test_span(name: str) -> Span:
    """Start a span and make it the current span until it is completed."""
    span = _capture.tracer.start_span(name)
    _capture.stack.push(span)
    return span


def add_event(span: Span, event_name: str, attributes: Mapping[str, Any]) -> None:
    span.add_event(event_name, attributes)


def complete_span(span: Span, attributes: Mapping[str, Any] | None = None) -> None:
    """Mark *span* OK, end it and drop it from the active stack."""
    if attributes:
        span.set_attributes(attributes)
    span.set_status(StatusCode.OK)
    span.end()
    _capture.stack.remove(span)


def complete_span_with_error(
    span: Span,
    error: BaseException,
    attributes: Mapping[str, Any] | None = None,
) -> None:
    """Mark *span* ERROR with *error*'s message, record it, end and drop it."""
    if attributes:
        span.set_attributes(attributes)
    span.set_status(StatusCode.ERROR, str(error))
    span.record_exception(error)
    span.end()
    _capture.stack.remove(span)


def export_test_spans(workflow_dir: str | Path, scenario_name: str, scope_name: str) -> Path | None:
    """Export the spans collected so far and clear the collector.

    Args:
        workflow_dir: Directory for the document (e.g. ``"traces/draft-workflow"``).
        scenario_name: Scenario name, used as the file stem.
        scope_name: Instrumentation scope name (e.g. ``"draft-management"``).
    """
    return _capture.export(workflow_dir, scenario_name, scope_name)
