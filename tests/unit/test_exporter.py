"""Tests for export/exporter.py -- ScenarioExporter and SpanCapture.export."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from span_capture.capture import SpanCapture
from span_capture.core.config import CaptureSettings
from span_capture.core.exceptions import ExportError
from span_capture.export.exporter import ScenarioExporter
from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.span import CollectingSpan


def _load(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _spans(document: dict) -> list[dict]:
    return document["resourceSpans"][0]["scopeSpans"][0]["spans"]


# ---------------------------------------------------------------------------
# Empty collector
# ---------------------------------------------------------------------------


def test_export_without_spans_writes_nothing(capture: SpanCapture, tmp_path: Path) -> None:
    target = tmp_path / "traces"
    assert capture.export(target, "empty", "scope") is None
    assert not target.exists()


def test_second_export_in_a_row_is_a_no_op(capture: SpanCapture, tmp_path: Path) -> None:
    capture.tracer.start_span("only").end()

    first = capture.export(tmp_path, "first", "scope")
    second = capture.export(tmp_path, "second", "scope")

    assert first == tmp_path / "first.json"
    assert second is None
    assert sorted(p.name for p in tmp_path.iterdir()) == ["first.json"]


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def test_promote_success_scenario(capture: SpanCapture, tmp_path: Path) -> None:
    span = capture.tracer.start_span("draft.promote")
    span.set_attribute("draftId", "DRAFT-1")
    span.add_event("draft.promote.started")
    span.end()

    path = capture.export(tmp_path, "promote-success", "draft-management")

    assert path is not None
    spans = _spans(_load(path))
    assert len(spans) == 1
    assert spans[0]["name"] == "draft.promote"
    assert [e["name"] for e in spans[0]["events"]] == ["draft.promote.started"]
    assert spans[0]["attributes"] == [{"key": "draftId", "value": {"stringValue": "DRAFT-1"}}]
    assert len(capture.collector) == 0


def test_creates_nested_directories(capture: SpanCapture, tmp_path: Path) -> None:
    capture.tracer.start_span("s").end()
    target = tmp_path / "workflows" / "draft-management" / "draft-workflow"
    path = capture.export(target, "scenario", "scope")
    assert path == target / "scenario.json"
    assert path.is_file()


def test_overwrites_existing_file(capture: SpanCapture, tmp_path: Path) -> None:
    (tmp_path / "scenario.json").write_text("stale", encoding="utf-8")
    capture.tracer.start_span("fresh").end()
    capture.export(tmp_path, "scenario", "scope")
    assert _spans(_load(tmp_path / "scenario.json"))[0]["name"] == "fresh"


def test_exports_are_not_cumulative(capture: SpanCapture, tmp_path: Path) -> None:
    capture.tracer.start_span("one").end()
    capture.export(tmp_path, "first", "scope")
    capture.tracer.start_span("two").end()
    capture.export(tmp_path, "second", "scope")

    assert [s["name"] for s in _spans(_load(tmp_path / "second.json"))] == ["two"]


def test_document_uses_settings(tmp_path: Path) -> None:
    collector = SpanCollector()
    settings = CaptureSettings(service_name="backlog", test_framework="bun", scope_version="9.9.9")
    exporter = ScenarioExporter(collector, settings)
    CollectingSpan("s", collector).end()

    document = _load(exporter.export(tmp_path, "s", "draft-management"))
    resource = document["resourceSpans"][0]
    assert resource["resource"]["attributes"] == [
        {"key": "service.name", "value": {"stringValue": "backlog"}},
        {"key": "test.framework", "value": {"stringValue": "bun"}},
    ]
    assert resource["scopeSpans"][0]["scope"] == {"name": "draft-management", "version": "9.9.9"}


def test_file_is_tab_indented_with_trailing_newline(capture: SpanCapture, tmp_path: Path) -> None:
    capture.tracer.start_span("s").end()
    text = capture.export(tmp_path, "s", "scope").read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert "\n\t\"resourceSpans\"" in text


def test_relative_directory_resolves_against_cwd(
    capture: SpanCapture, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    capture.tracer.start_span("s").end()
    path = capture.export("traces", "relative", "scope")
    assert (tmp_path / "traces" / "relative.json").is_file()
    assert path == Path("traces") / "relative.json"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def test_write_failure_raises_and_keeps_spans(capture: SpanCapture, tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")
    capture.tracer.start_span("kept").end()

    with pytest.raises(ExportError) as exc_info:
        capture.export(blocker / "nested", "scenario", "scope")

    assert exc_info.value.code == "EXPORT_WRITE"
    assert exc_info.value.details["path"] == str(blocker / "nested" / "scenario.json")
    assert isinstance(exc_info.value.__cause__, OSError)
    assert [r.name for r in capture.spans] == ["kept"]


# ---------------------------------------------------------------------------
# Async
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_aexport_writes_in_worker_thread(capture: SpanCapture, tmp_path: Path) -> None:
    capture.tracer.start_span("async").end()
    path = await capture.aexport(tmp_path, "async-scenario", "scope")
    assert path is not None
    assert _spans(_load(path))[0]["name"] == "async"
    assert await capture.aexport(tmp_path, "again", "scope") is None
