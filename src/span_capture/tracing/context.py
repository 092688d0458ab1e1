"""Active-span stack and the context propagation shim.

The stack answers "which span is current" from the lexical nesting of
activation scopes alone, so instrumented code written against the
OpenTelemetry context API resolves parents correctly without a real
context being threaded through the test harness.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import context as context_api
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.trace import INVALID_SPAN, Span

T = TypeVar("T")


class ActiveSpanStack:
    """Process-wide stack of active spans (top = current span).

    Pushes and pops are strictly nested per scope: :meth:`pop` removes the
    most recent occurrence of the exiting span and nothing else, so a scope
    that exits while another interleaved scope is still open cannot take
    the other scope's entry with it.
    """

    def __init__(self) -> None:
        self._spans: list[Span] = []
        self._lock = threading.Lock()

    def push(self, span: Span) -> None:
        with self._lock:
            self._spans.append(span)

    def pop(self, span: Span) -> bool:
        """Remove the most recent occurrence of *span*.

        Returns ``False`` when *span* is not on the stack.
        """
        with self._lock:
            for index in range(len(self._spans) - 1, -1, -1):
                if self._spans[index] is span:
                    del self._spans[index]
                    return True
        return False

    def remove(self, span: Span) -> None:
        """Drop every occurrence of *span*."""
        with self._lock:
            self._spans = [s for s in self._spans if s is not span]

    def current(self) -> Span | None:
        with self._lock:
            return self._spans[-1] if self._spans else None

    def clear(self) -> None:
        with self._lock:
            self._spans.clear()

    @property
    def depth(self) -> int:
        with self._lock:
            return len(self._spans)

    @contextmanager
    def activate(self, span: Span, context: Context | None = None) -> Iterator[Span]:
        """Make *span* current for the duration of the ``with`` block.

        Also attaches an OpenTelemetry context carrying the span so that
        :func:`opentelemetry.trace.get_current_span` agrees with
        :meth:`current`.  Both are released on every exit path.
        """
        otel_context = trace.set_span_in_context(span, context)
        self.push(span)
        token = context_api.attach(otel_context)
        try:
            yield span
        finally:
            context_api.detach(token)
            self.pop(span)


class ContextPropagation:
    """Context association and execution primitives backed by a stack.

    ``set_span`` tags an opaque context with a span; ``with_context`` runs a
    callable with that span active.  Together they replace the real
    context-carrier plumbing for code under test.
    """

    def __init__(self, stack: ActiveSpanStack) -> None:
        self._stack = stack

    def set_span(self, context: Context | None, span: Span) -> Context:
        """Return a copy of *context* carrying *span*.

        ``None`` means the current OpenTelemetry context.  Other entries of
        the context pass through unchanged.
        """
        return trace.set_span_in_context(span, context)

    def get_span(self, context: Context | None) -> Span | None:
        """Return the span tagged on *context*, or ``None``."""
        span = trace.get_current_span(context)
        if span is INVALID_SPAN:
            return None
        return span

    def with_context(
        self,
        context: Context,
        fn: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Call ``fn(*args, **kwargs)`` with *context* active.

        The tagged span, if any, is the current span during the call and is
        popped again before the result is returned or the error propagates.
        """
        span = self.get_span(context)
        if span is None:
            token = context_api.attach(context)
            try:
                return fn(*args, **kwargs)
            finally:
                context_api.detach(token)
        with self._stack.activate(span, context):
            return fn(*args, **kwargs)
