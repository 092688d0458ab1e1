"""Tests for cli.py -- the span-capture command group."""
from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner
from opentelemetry.trace import StatusCode

from span_capture.capture import SpanCapture
from span_capture.cli import main


@pytest.fixture(autouse=True)
def _restore_package_logger():
    logger = logging.getLogger("span_capture")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _legacy_canvas(path: Path) -> None:
    node = {"id": "n", "pv": {"event": "draft.saved", "dataSchema": {"id": {"required": True}}}}
    path.write_text(json.dumps({"nodes": [node]}), encoding="utf-8")


# ---------------------------------------------------------------------------
# convert-canvas
# ---------------------------------------------------------------------------


def test_convert_canvas_reports_progress(runner: CliRunner, tmp_path: Path) -> None:
    _legacy_canvas(tmp_path / "a.otel.canvas")
    (tmp_path / "b.otel.canvas").write_text(json.dumps({"nodes": []}), encoding="utf-8")

    result = runner.invoke(main, ["convert-canvas", str(tmp_path)])

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert lines[0] == "Found 2 canvas files"
    assert f"Converting: {tmp_path / 'a.otel.canvas'}" in lines
    assert "  Converted" in lines
    assert "  No changes needed" in lines
    assert lines[-1] == "Conversion complete: 1 of 2 files changed"


def test_convert_canvas_with_pattern(runner: CliRunner, tmp_path: Path) -> None:
    _legacy_canvas(tmp_path / "flow.canvas")
    result = runner.invoke(main, ["convert-canvas", str(tmp_path), "--pattern", "*.canvas"])
    assert result.exit_code == 0
    assert "Conversion complete: 1 of 1 files changed" in result.stdout


def test_convert_canvas_bad_file_fails(runner: CliRunner, tmp_path: Path) -> None:
    (tmp_path / "bad.otel.canvas").write_text("{", encoding="utf-8")
    result = runner.invoke(main, ["convert-canvas", str(tmp_path)])
    assert result.exit_code == 1
    assert "Invalid canvas JSON" in result.output


def test_convert_canvas_missing_directory(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(main, ["convert-canvas", str(tmp_path / "missing")])
    assert result.exit_code == 2


# ---------------------------------------------------------------------------
# summarize
# ---------------------------------------------------------------------------


def test_summarize_exported_document(runner: CliRunner, tmp_path: Path) -> None:
    capture = SpanCapture()
    span = capture.tracer.start_span("draft.promote", start_time=1_000_000_000)
    span.add_event("draft.promote.started")
    span.add_event("draft.promote.complete")
    span.set_status(StatusCode.OK)
    span.end(end_time=1_250_000_000)
    path = capture.export(tmp_path, "promote-success", "draft-management")

    result = runner.invoke(main, ["summarize", str(path)])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "[draft-management 1.0.0]",
        "draft.promote  250ms  events=2  status=1",
        "  - draft.promote.started",
        "  - draft.promote.complete",
    ]


def test_summarize_invalid_json(runner: CliRunner, tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("nope", encoding="utf-8")
    result = runner.invoke(main, ["summarize", str(path)])
    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_log_options_accepted(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(
        main, ["--log-level", "ERROR", "--json-logs", "convert-canvas", str(tmp_path)]
    )
    assert result.exit_code == 0
    assert "Found 0 canvas files" in result.stdout
