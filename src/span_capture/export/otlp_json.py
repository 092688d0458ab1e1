"""Serialize span records into an OTLP-JSON trace document.

The mapping is total: every :class:`SpanRecord` serializes, whatever its
attribute values are and whether or not it was ended.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from span_capture.core.constants import (
    DEFAULT_SCOPE_VERSION,
    DEFAULT_SERVICE_NAME,
    DEFAULT_TEST_FRAMEWORK,
    NANOS_PER_MILLI,
)
from span_capture.tracing.record import SpanEvent, SpanRecord
from span_capture.tracing.span import now_ms


def _to_unix_nano(millis: int) -> str:
    return str(millis * NANOS_PER_MILLI)


def encode_value(value: Any) -> dict[str, Any]:
    """Type an attribute value for the wire.

    ``bool`` is checked before numbers since it is an ``int`` subclass.
    Numbers are written as ``intValue`` unchanged; anything else falls back
    to its string form.
    """
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bool):
        return {"boolValue": value}
    if isinstance(value, (int, float)):
        return {"intValue": value}
    return {"stringValue": str(value)}


def _encode_event_value(value: Any) -> dict[str, Any]:
    if value is None:
        return {"stringValue": ""}
    return encode_value(value)


def encode_attributes(attributes: Mapping[str, Any]) -> list[dict[str, Any]]:
    return [{"key": key, "value": encode_value(value)} for key, value in attributes.items()]


def encode_event(event: SpanEvent) -> dict[str, Any]:
    return {
        "timeUnixNano": _to_unix_nano(event.time),
        "name": event.name,
        "attributes": [
            {"key": key, "value": _encode_event_value(value)}
            for key, value in event.attributes.items()
        ],
    }


def encode_span(record: SpanRecord) -> dict[str, Any]:
    """Encode one record; a missing end time is replaced by "now"."""
    end_time = record.end_time if record.end_time is not None else now_ms()
    encoded: dict[str, Any] = {
        "traceId": record.trace_id,
        "spanId": record.span_id,
    }
    if record.parent_span_id is not None:
        encoded["parentSpanId"] = record.parent_span_id
    encoded.update(
        {
            "name": record.name,
            "startTimeUnixNano": _to_unix_nano(record.start_time),
            "endTimeUnixNano": _to_unix_nano(end_time),
            "attributes": encode_attributes(record.attributes),
            "events": [encode_event(event) for event in record.events],
        }
    )
    if record.status is not None:
        encoded["status"] = record.status.model_dump(exclude_none=True)
    return encoded


def spans_to_otlp_json(
    spans: Iterable[SpanRecord],
    scope_name: str,
    *,
    service_name: str = DEFAULT_SERVICE_NAME,
    test_framework: str = DEFAULT_TEST_FRAMEWORK,
    scope_version: str = DEFAULT_SCOPE_VERSION,
) -> dict[str, Any]:
    """Build the trace document for *spans* under one instrumentation scope.

    Args:
        spans: Records to encode, in output order.
        scope_name: Name of the single scope wrapping the spans.
        service_name: Value of the ``service.name`` resource attribute.
        test_framework: Value of the ``test.framework`` resource attribute.
        scope_version: Version string of the scope.

    Returns:
        A ``{"resourceSpans": [...]}`` mapping ready for :func:`json.dumps`.
    """
    return {
        "resourceSpans": [
            {
                "resource": {
                    "attributes": encode_attributes(
                        {
                            "service.name": service_name,
                            "test.framework": test_framework,
                        }
                    ),
                },
                "scopeSpans": [
                    {
                        "scope": {"name": scope_name, "version": scope_version},
                        "spans": [encode_span(record) for record in spans],
                    }
                ],
            }
        ]
    }
