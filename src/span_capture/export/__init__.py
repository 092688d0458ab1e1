from span_capture.export.exporter import ScenarioExporter
from span_capture.export.otlp_json import encode_span, encode_value, spans_to_otlp_json

__all__ = ["ScenarioExporter", "encode_span", "encode_value", "spans_to_otlp_json"]
