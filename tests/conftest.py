"""Shared test fixtures."""
from __future__ import annotations

import pytest

from span_capture.capture import SpanCapture
from span_capture.core.config import CaptureSettings
from span_capture.tracing.collector import SpanCollector
from span_capture.tracing.context import ActiveSpanStack
from span_capture.tracing.tracer import CollectingTracer


@pytest.fixture
def settings() -> CaptureSettings:
    return CaptureSettings(service_name="span-capture-tests", test_framework="pytest")


@pytest.fixture
def capture(settings: CaptureSettings) -> SpanCapture:
    return SpanCapture(settings)


@pytest.fixture
def collector() -> SpanCollector:
    return SpanCollector()


@pytest.fixture
def stack() -> ActiveSpanStack:
    return ActiveSpanStack()


@pytest.fixture
def tracer(collector: SpanCollector, stack: ActiveSpanStack) -> CollectingTracer:
    return CollectingTracer(collector, stack)
