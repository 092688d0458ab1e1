"""Tests for harness.py -- the process-wide capture and its helpers."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from opentelemetry import trace

from span_capture import harness


@pytest.fixture(autouse=True)
def _reset_default_capture() -> Iterator[None]:
    harness.get_capture().reset()
    yield
    harness.get_capture().reset()


def test_get_tracer_is_shared() -> None:
    assert harness.get_tracer() is harness.get_capture().tracer


def test_start_test_span_becomes_active() -> None:
    span = harness.start_test_span("draft.promote")
    assert harness.get_active_span() is span
    child = harness.get_tracer().start_span("draft.load")
    assert child.parent_span_id == span.span_id


def test_complete_span_sets_ok_and_deactivates() -> None:
    span = harness.start_test_span("draft.promote")
    harness.add_event(span, "draft.promote.started", {"draftId": "DRAFT-1"})
    harness.complete_span(span, {"success": True})

    assert harness.get_active_span() is None
    record = harness.get_capture().spans[0]
    assert record.status is not None
    assert record.status.code == 1
    assert record.attributes == {"success": True}
    assert record.events[0].attributes == {"draftId": "DRAFT-1"}


def test_complete_span_with_error() -> None:
    span = harness.start_test_span("draft.promote")
    harness.complete_span_with_error(
        span, LookupError("Draft DRAFT-999 not found"), {"draftId": "DRAFT-999"}
    )

    assert harness.get_active_span() is None
    record = harness.get_capture().spans[0]
    assert record.status is not None
    assert record.status.code == 2
    assert record.status.message == "Draft DRAFT-999 not found"
    assert record.attributes == {"draftId": "DRAFT-999"}
    assert record.events[0].name == "exception"
    assert record.events[0].attributes["exception.type"] == "LookupError"


def test_completing_outer_span_leaves_inner_active() -> None:
    outer = harness.start_test_span("outer")
    inner = harness.start_test_span("inner")
    harness.complete_span(outer)
    assert harness.get_active_span() is inner


def test_set_span_and_with_context() -> None:
    span = harness.get_tracer().start_span("draft.promote")
    ctx = harness.set_span(None, span)

    def body() -> bool:
        return harness.get_active_span() is span and trace.get_current_span() is span

    assert harness.with_context(ctx, body) is True
    assert harness.get_active_span() is None


def test_export_test_spans(tmp_path: Path) -> None:
    span = harness.start_test_span("draft.promote")
    harness.complete_span(span)

    path = harness.export_test_spans(tmp_path / "draft-workflow", "promote-success", "draft-management")

    assert path == tmp_path / "draft-workflow" / "promote-success.json"
    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["resourceSpans"][0]["scopeSpans"][0]["scope"]["name"] == "draft-management"
    assert harness.get_capture().spans == []


def test_export_test_spans_with_nothing_collected(tmp_path: Path) -> None:
    assert harness.export_test_spans(tmp_path, "nothing", "scope") is None
    assert list(tmp_path.iterdir()) == []
