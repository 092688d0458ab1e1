"""CollectingTracer -- span creation entry points backed by a collector."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry.context import Context
from opentelemetry.trace import (
    Span,
    SpanKind,
    Status,
    StatusCode,
    Tracer,
    TracerProvider,
)

from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.context import ActiveSpanStack, ContextPropagation
from span_capture.tracing.span import CollectingSpan

T = TypeVar("T")


class CollectingTracer(Tracer):
    """An :class:`opentelemetry.trace.Tracer` that produces collecting spans.

    Usage::

        collector = SpanCollector()
        stack = ActiveSpanStack()
        tracer = CollectingTracer(collector, stack)

        span = tracer.start_span("draft.promote")
        span.set_attribute("draftId", "DRAFT-1")
        span.end()

        tracer.start_active_span("draft.load", lambda span: load(span))

    Parents are resolved from an explicit ``context`` argument first and
    from the top of the active-span stack otherwise.
    """

    def __init__(
        self,
        collector: SpanCollector,
        stack: ActiveSpanStack,
        instrumentation_scope: str | None = None,
    ) -> None:
        self._collector = collector
        self._stack = stack
        self._propagation = ContextPropagation(stack)
        self.instrumentation_scope = instrumentation_scope

    def _resolve_parent(self, context: Context | None) -> Span | None:
        if context is not None:
            parent = self._propagation.get_span(context)
            if parent is not None:
                return parent
        return self._stack.current()

    def start_span(
        self,
        name: str,
        context: Context | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: Mapping[str, Any] | None = None,
        links: Any = None,
        start_time: int | None = None,
        record_exception: bool = True,
        set_status_on_exception: bool = True,
    ) -> CollectingSpan:
        """Create a span without activating it."""
        return CollectingSpan(
            name,
            self._collector,
            parent=self._resolve_parent(context),
            attributes=attributes,
            start_time=start_time,
        )

    @contextmanager
    def start_as_current_span(
        self,
        name: str,
        context: Context | None = None,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: Mapping[str, Any] | None = None,
        links: Any = None,
        start_time: int | None = None,
        record_exception: bool = True,
        set_status_on_exception: bool = True,
        end_on_exit: bool = True,
    ) -> Iterator[CollectingSpan]:
        """Context manager form: the span is current inside the block.

        Mirrors :func:`opentelemetry.trace.use_span`: an ``Exception``
        escaping the block is recorded and sets an ERROR status (when
        enabled) before being re-raised.
        """
        span = self.start_span(
            name,
            context=context,
            kind=kind,
            attributes=attributes,
            start_time=start_time,
        )
        try:
            with self._stack.activate(span, context):
                yield span
        except Exception as exc:
            if record_exception:
                span.record_exception(exc)
            if set_status_on_exception:
                span.set_status(
                    Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}")
                )
            raise
        finally:
            if end_on_exit:
                span.end()

    def start_active_span(self, name: str, *args: Any) -> Any:
        """Run a callback inside a new active span.

        The last positional argument is the callback; anything between
        *name* and the callback (options, a context) is accepted the way the
        OpenTelemetry JS API lays it out, and a :class:`Context` among them is
        used for parent resolution.  The span is popped and ended on every
        exit path, so its lifetime equals the callback's dynamic extent.
        """
        if not args or not callable(args[-1]):
            raise TypeError("start_active_span() requires a callback as its last argument")
        callback: Callable[[CollectingSpan], Any] = args[-1]
        span = self.start_span(name, context=_context_from(args[:-1]))
        try:
            with self._stack.activate(span):
                return callback(span)
        finally:
            span.end()

    async def astart_active_span(
        self,
        name: str,
        callback: Callable[[CollectingSpan], Awaitable[T]],
        context: Context | None = None,
    ) -> T:
        """Await ``callback(span)`` inside a new active span.

        Other tasks running while the callback is suspended see the shared
        stack, including this span.
        """
        span = self.start_span(name, context=context)
        try:
            with self._stack.activate(span):
                return await callback(span)
        finally:
            span.end()


def _context_from(options: tuple[Any, ...]) -> Context | None:
    for option in options:
        if isinstance(option, Context):
            return option
    return None


class CollectingTracerProvider(TracerProvider):
    """Hands out :class:`CollectingTracer` instances sharing one collector.

    Pass it wherever a library accepts a ``tracer_provider`` to route that
    library's spans into the capture without touching the global provider.
    """

    def __init__(self, collector: SpanCollector, stack: ActiveSpanStack) -> None:
        self._collector = collector
        self._stack = stack

    def get_tracer(
        self,
        instrumenting_module_name: str,
        instrumenting_library_version: str | None = None,
        schema_url: str | None = None,
        attributes: Any = None,
    ) -> CollectingTracer:
        return CollectingTracer(
            self._collector,
            self._stack,
            instrumentation_scope=instrumenting_module_name,
        )
