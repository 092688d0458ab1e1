"""Pytest plugin for span-capture.

Enable it from a ``conftest.py``::

    pytest_plugins = ["span_capture.pytest_plugin"]

Then capture and export spans per test::

    def test_promote(span_capture, export_scenario):
        promote_draft(tracer=span_capture.tracer, draft_id="DRAFT-1")
        path = export_scenario("promote-success", "draft-management")
        assert path is not None

Documents land in the ``span_capture_dir`` ini directory (default
``__executions__``, relative to the rootdir) unless a directory is given.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from span_capture.capture import SpanCapture
from span_capture.core.config import CaptureSettings
from span_capture.harness import get_capture
from span_capture.tracing.tracer import CollectingTracer

ExportScenario = Callable[..., Path | None]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addini(
        "span_capture_dir",
        help="Directory for exported span documents (relative to rootdir).",
        default=CaptureSettings.from_env().output_dir,
    )


@pytest.fixture
def span_capture() -> Iterator[SpanCapture]:
    """The process-wide capture session, reset before and after the test."""
    capture = get_capture()
    capture.reset()
    yield capture
    capture.reset()


@pytest.fixture
def capture_tracer(span_capture: SpanCapture) -> CollectingTracer:
    return span_capture.tracer


@pytest.fixture
def export_scenario(
    span_capture: SpanCapture, request: pytest.FixtureRequest
) -> ExportScenario:
    """Callable ``(scenario, scope_name, directory=None) -> Path | None``."""
    default_dir = Path(request.config.rootpath) / request.config.getini("span_capture_dir")

    def _export(
        scenario: str, scope_name: str, directory: str | Path | None = None
    ) -> Path | None:
        return span_capture.export(directory or default_dir, scenario, scope_name)

    return _export
