from __future__ import annotations

from typing import Any


class SpanCaptureError(Exception):
    """Base exception for all span-capture errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"EXPORT_WRITE"``).
        details: Arbitrary key/value context about the error.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class ExportError(SpanCaptureError):
    """Writing an exported trace document failed.

    Raised for directory creation and file write failures so that a test
    depending on the artifact learns about it.  ``details["path"]`` holds the
    target path.
    """


class TelemetryError(SpanCaptureError):
    """The telemetry bootstrap could not build its provider.

    Never escapes :meth:`TelemetryBootstrap.initialize`; it is logged there.
    """


class CanvasFormatError(SpanCaptureError): ...
