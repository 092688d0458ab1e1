from __future__ import annotations

# Fixed resource attributes written into every exported document.
DEFAULT_SERVICE_NAME = "span-capture"
DEFAULT_TEST_FRAMEWORK = "pytest"
DEFAULT_SCOPE_VERSION = "1.0.0"

DEFAULT_OUTPUT_DIR = "__executions__"
EXPORT_SUFFIX = ".json"

DEFAULT_OTLP_ENDPOINT = "http://localhost:4319/v1/traces"

ENV_OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"
ENV_OTEL_ENABLED = "OTEL_ENABLED"
ENV_OTEL_SERVICE_NAME = "OTEL_SERVICE_NAME"

EXCEPTION_EVENT_NAME = "exception"

NANOS_PER_MILLI = 1_000_000
