"""span-capture -- in-process OpenTelemetry span capture and OTLP-JSON export."""

from span_capture.__version__ import __version__
from span_capture.capture import SpanCapture
from span_capture.core.config import CaptureSettings, TelemetryConfig, TelemetrySettings
from span_capture.core.exceptions import (
    CanvasFormatError,
    ExportError,
    SpanCaptureError,
    TelemetryError,
)
from span_capture.export.exporter import ScenarioExporter
from span_capture.export.otlp_json import spans_to_otlp_json
from span_capture.harness import (
    add_event,
    complete_span,
    complete_span_with_error,
    export_test_spans,
    get_active_span,
    get_capture,
    get_tracer,
    set_span,
    start_test_span,
    with_context,
)
from span_capture.telemetry.bootstrap import (
    initialize_telemetry,
    is_telemetry_initialized,
    shutdown_telemetry,
)
from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.context import ActiveSpanStack, ContextPropagation
from span_capture.tracing.record import SpanEvent, SpanRecord, SpanStatus
from span_capture.tracing.span import CollectingSpan
from span_capture.tracing.tracer import CollectingTracer, CollectingTracerProvider

__all__ = [
    "ActiveSpanStack",
    "CanvasFormatError",
    "CaptureSettings",
    "CollectingSpan",
    "CollectingTracer",
    "CollectingTracerProvider",
    "ContextPropagation",
    "ExportError",
    "ScenarioExporter",
    "SpanCapture",
    "SpanCaptureError",
    "SpanCollector",
    "SpanEvent",
    "SpanRecord",
    "SpanStatus",
    "TelemetryConfig",
    "TelemetryError",
    "TelemetrySettings",
    "__version__",
    "add_event",
    "complete_span",
    "complete_span_with_error",
    "export_test_spans",
    "get_active_span",
    "get_capture",
    "get_tracer",
    "initialize_telemetry",
    "is_telemetry_initialized",
    "set_span",
    "shutdown_telemetry",
    "spans_to_otlp_json",
    "start_test_span",
    "with_context",
]
