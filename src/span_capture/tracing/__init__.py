from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.context import ActiveSpanStack, ContextPropagation
from span_capture.tracing.record import SpanEvent, SpanRecord, SpanStatus
from span_capture.tracing.span import CollectingSpan
from span_capture.tracing.tracer import CollectingTracer, CollectingTracerProvider

__all__ = [
    "ActiveSpanStack",
    "CollectingSpan",
    "CollectingTracer",
    "CollectingTracerProvider",
    "ContextPropagation",
    "SpanCollector",
    "SpanEvent",
    "SpanRecord",
    "SpanStatus",
]
