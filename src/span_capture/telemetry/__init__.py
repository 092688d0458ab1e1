from span_capture.telemetry.bootstrap import (
    TelemetryBootstrap,
    get_bootstrap,
    get_tracer_provider,
    initialize_telemetry,
    is_telemetry_initialized,
    shutdown_telemetry,
)

__all__ = [
    "TelemetryBootstrap",
    "get_bootstrap",
    "get_tracer_provider",
    "initialize_telemetry",
    "is_telemetry_initialized",
    "shutdown_telemetry",
]
