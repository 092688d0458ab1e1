from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from span_capture.core.constants import (
    DEFAULT_OTLP_ENDPOINT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SCOPE_VERSION,
    DEFAULT_SERVICE_NAME,
    DEFAULT_TEST_FRAMEWORK,
    ENV_OTEL_ENABLED,
    ENV_OTEL_SERVICE_NAME,
    ENV_OTLP_ENDPOINT,
)


class TelemetryConfig(BaseModel):
    """Call-time options for :func:`initialize_telemetry`.

    Every field is optional; ``None`` means "not given here" and lets the
    environment or the built-in default decide.
    """

    endpoint: str | None = None
    enabled: bool | None = None
    service_name: str | None = None


class TelemetrySettings(BaseModel):
    """Fully resolved telemetry options."""

    endpoint: str = DEFAULT_OTLP_ENDPOINT
    enabled: bool = True
    service_name: str = DEFAULT_SERVICE_NAME

    @classmethod
    def resolve(
        cls,
        config: TelemetryConfig | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> TelemetrySettings:
        """Merge call-time config, environment and defaults.

        Precedence per field, highest first: the explicit *config* value,
        the environment variable, the default.

        * ``OTEL_EXPORTER_OTLP_ENDPOINT`` → ``endpoint``
        * ``OTEL_ENABLED`` → ``enabled`` (``"false"`` disables, anything else enables)
        * ``OTEL_SERVICE_NAME`` → ``service_name``

        Empty environment values are treated as unset.

        Args:
            config: Explicit options; ``None`` is the same as an empty config.
            environ: Environment mapping, defaults to :data:`os.environ`.

        Returns:
            The resolved :class:`TelemetrySettings`.
        """
        config = config or TelemetryConfig()
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        endpoint = config.endpoint or env.get(ENV_OTLP_ENDPOINT)
        if endpoint:
            kwargs["endpoint"] = endpoint

        if config.enabled is not None:
            kwargs["enabled"] = config.enabled
        else:
            enabled_str = env.get(ENV_OTEL_ENABLED)
            if enabled_str:
                kwargs["enabled"] = enabled_str.strip().lower() != "false"

        service_name = config.service_name or env.get(ENV_OTEL_SERVICE_NAME)
        if service_name:
            kwargs["service_name"] = service_name

        return cls(**kwargs)


class CaptureSettings(BaseModel):
    service_name: str = DEFAULT_SERVICE_NAME
    test_framework: str = DEFAULT_TEST_FRAMEWORK
    scope_version: str = DEFAULT_SCOPE_VERSION
    output_dir: str = Field(default=DEFAULT_OUTPUT_DIR, min_length=1)

    @classmethod
    def from_env(cls) -> CaptureSettings:
        """Create a :class:`CaptureSettings` from ``SPAN_CAPTURE_*`` variables.

        * ``SPAN_CAPTURE_SERVICE_NAME`` → ``service_name``
        * ``SPAN_CAPTURE_TEST_FRAMEWORK`` → ``test_framework``
        * ``SPAN_CAPTURE_OUTPUT_DIR`` → ``output_dir``

        Any variable that is not set or is empty is left at its default value.
        """
        kwargs: dict[str, Any] = {}

        service_name = os.environ.get("SPAN_CAPTURE_SERVICE_NAME")
        if service_name:
            kwargs["service_name"] = service_name

        framework = os.environ.get("SPAN_CAPTURE_TEST_FRAMEWORK")
        if framework:
            kwargs["test_framework"] = framework

        output_dir = os.environ.get("SPAN_CAPTURE_OUTPUT_DIR")
        if output_dir:
            kwargs["output_dir"] = output_dir

        return cls(**kwargs)
