"""SpanCapture -- one collector, stack, tracer and exporter wired together."""

from __future__ import annotations

from pathlib import Path

from opentelemetry.trace import Span

from span_capture.core.config import CaptureSettings
from span_capture.export.exporter import ScenarioExporter
from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.context import ActiveSpanStack, ContextPropagation
from span_capture.tracing.record import SpanRecord
from span_capture.tracing.tracer import CollectingTracer, CollectingTracerProvider


class SpanCapture:
    """A self-contained capture session.

    Pass a session (or its :attr:`tracer`) to the code under test when
    isolation from the process-wide default is wanted::

        capture = SpanCapture()
        promote_draft(tracer=capture.tracer, draft_id="DRAFT-1")
        capture.export("traces", "promote-success", "draft-management")
    """

    def __init__(self, settings: CaptureSettings | None = None) -> None:
        self.collector = SpanCollector()
        self.stack = ActiveSpanStack()
        self.tracer = CollectingTracer(self.collector, self.stack)
        self.propagation = ContextPropagation(self.stack)
        self.exporter = ScenarioExporter(self.collector, settings)

    def tracer_provider(self) -> CollectingTracerProvider:
        return CollectingTracerProvider(self.collector, self.stack)

    def get_active_span(self) -> Span | None:
        """Return the current span, or ``None`` outside any active scope."""
        return self.stack.current()

    @property
    def spans(self) -> list[SpanRecord]:
        return self.collector.get_spans()

    def export(self, directory: str | Path, scenario: str, scope_name: str) -> Path | None:
        return self.exporter.export(directory, scenario, scope_name)

    async def aexport(
        self, directory: str | Path, scenario: str, scope_name: str
    ) -> Path | None:
        return await self.exporter.aexport(directory, scenario, scope_name)

    def reset(self) -> None:
        """Forget collected spans and any span left active."""
        self.collector.clear()
        self.stack.clear()
