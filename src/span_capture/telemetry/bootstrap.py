"""Process-wide OpenTelemetry bootstrap for real OTLP export.

Telemetry is best effort: failures while building or shutting down the
provider are logged and swallowed so they never block the code being
observed.

Environment variables (overridden by explicit :class:`TelemetryConfig`
values):

* ``OTEL_EXPORTER_OTLP_ENDPOINT`` -- collector URL
  (default ``http://localhost:4319/v1/traces``)
* ``OTEL_ENABLED`` -- ``false`` disables telemetry
* ``OTEL_SERVICE_NAME`` -- service name (default ``span-capture``)
"""

from __future__ import annotations

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExporter

from span_capture.core.config import TelemetryConfig, TelemetrySettings
from span_capture.core.exceptions import TelemetryError

logger = structlog.get_logger(__name__)


class TelemetryBootstrap:
    """Owns at most one SDK :class:`TracerProvider`.

    :meth:`initialize` is idempotent and :meth:`shutdown` is safe to call
    whether or not initialization happened.
    """

    def __init__(self) -> None:
        self._provider: TracerProvider | None = None
        self._initialized = False
        self._settings: TelemetrySettings | None = None

    @property
    def provider(self) -> TracerProvider | None:
        return self._provider

    @property
    def settings(self) -> TelemetrySettings | None:
        return self._settings

    def is_initialized(self) -> bool:
        return self._initialized

    def _create_exporter(self, settings: TelemetrySettings) -> SpanExporter:
        return OTLPSpanExporter(endpoint=settings.endpoint)

    def _build_provider(self, settings: TelemetrySettings) -> TracerProvider:
        try:
            exporter = self._create_exporter(settings)
            provider = TracerProvider(
                resource=Resource.create({SERVICE_NAME: settings.service_name})
            )
            # Simple (unbatched) processor: spans leave as soon as they end.
            provider.add_span_processor(SimpleSpanProcessor(exporter))
        except Exception as exc:
            raise TelemetryError(
                f"Could not build tracer provider: {exc}",
                details={"endpoint": settings.endpoint},
            ) from exc
        return provider

    def initialize(self, config: TelemetryConfig | None = None) -> None:
        """Build and globally register the provider unless already done.

        Does nothing when telemetry resolves to disabled.  Never raises.
        """
        if self._initialized:
            return

        settings = TelemetrySettings.resolve(config)
        self._settings = settings
        if not settings.enabled:
            logger.debug("telemetry_disabled")
            return

        try:
            provider = self._build_provider(settings)
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("telemetry_init_failed", endpoint=settings.endpoint)
            return

        self._provider = provider
        self._initialized = True
        logger.debug(
            "telemetry_initialized",
            endpoint=settings.endpoint,
            service_name=settings.service_name,
        )

    def shutdown(self) -> None:
        """Flush pending spans, then stop the provider."""
        if self._provider is None:
            logger.debug("telemetry_shutdown_skipped", reason="not_initialized")
            return
        try:
            self._provider.force_flush()
            self._provider.shutdown()
        except Exception:
            logger.exception("telemetry_shutdown_failed")
        else:
            logger.debug("telemetry_shutdown_complete")
        finally:
            self._provider = None
            self._initialized = False

    def get_tracer(self, name: str) -> trace.Tracer:
        """Tracer of the bootstrap's provider, or a no-op tracer if none."""
        if self._provider is None:
            return trace.NoOpTracer()
        return self._provider.get_tracer(name)


_bootstrap = TelemetryBootstrap()


def get_bootstrap() -> TelemetryBootstrap:
    return _bootstrap


def initialize_telemetry(config: TelemetryConfig | None = None) -> None:
    _bootstrap.initialize(config)


def shutdown_telemetry() -> None:
    _bootstrap.shutdown()


def is_telemetry_initialized() -> bool:
    return _bootstrap.is_initialized()


def get_tracer_provider() -> TracerProvider | None:
    return _bootstrap.provider
