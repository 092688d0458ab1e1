"""Write collected spans to scenario-named trace documents."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import structlog

from span_capture.core.config import CaptureSettings
from span_capture.core.constants import EXPORT_SUFFIX
from span_capture.core.exceptions import ExportError
from span_capture.export.otlp_json import spans_to_otlp_json
from span_capture.tracing.collector import SpanCollector
from span_capture.utils.logging import capture_context

logger = structlog.get_logger(__name__)


class ScenarioExporter:
    """Drains a :class:`SpanCollector` into ``<directory>/<scenario>.json``.

    Each export writes exactly the spans collected since the previous
    export and then removes them from the collector; exports are never
    cumulative.  An empty collector writes nothing.

    Args:
        collector: Source of finished span records.
        settings: Resource attributes and scope version for the document.
            Defaults to :meth:`CaptureSettings.from_env`.
    """

    def __init__(
        self,
        collector: SpanCollector,
        settings: CaptureSettings | None = None,
    ) -> None:
        self._collector = collector
        self._settings = settings or CaptureSettings.from_env()

    @property
    def settings(self) -> CaptureSettings:
        return self._settings

    def path_for(self, directory: str | Path, scenario: str) -> Path:
        return Path(directory) / f"{scenario}{EXPORT_SUFFIX}"

    def _serialize(self, document: dict[str, object]) -> str:
        return json.dumps(document, indent="\t", ensure_ascii=False) + "\n"

    def export(self, directory: str | Path, scenario: str, scope_name: str) -> Path | None:
        """Export the collected spans for *scenario*.

        Args:
            directory: Base directory, created with parents when missing.
            scenario: File stem of the document; an existing file is replaced.
            scope_name: Instrumentation scope name written into the document.

        Returns:
            The written path, or ``None`` when no spans were collected.

        Raises:
            ExportError: The directory could not be created or the file
                could not be written.  The collector is left untouched.
        """
        with capture_context(scenario=scenario, scope=scope_name):
            return self._export(directory, scenario, scope_name)

    def _export(self, directory: str | Path, scenario: str, scope_name: str) -> Path | None:
        spans = self._collector.get_spans()
        if not spans:
            logger.debug("export_skipped_empty")
            return None

        path = self.path_for(directory, scenario)
        document = spans_to_otlp_json(
            spans,
            scope_name,
            service_name=self._settings.service_name,
            test_framework=self._settings.test_framework,
            scope_version=self._settings.scope_version,
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self._serialize(document), encoding="utf-8")
        except OSError as exc:
            raise ExportError(
                f"Failed to write trace document for scenario {scenario!r}: {exc}",
                code="EXPORT_WRITE",
                details={"path": str(path), "scenario": scenario},
            ) from exc

        self._collector.clear(len(spans))
        logger.info(
            "spans_exported",
            path=str(path),
            span_count=len(spans),
        )
        return path

    async def aexport(
        self, directory: str | Path, scenario: str, scope_name: str
    ) -> Path | None:
        """Async variant of :meth:`export`; file I/O runs in a worker thread."""
        return await asyncio.to_thread(self.export, directory, scenario, scope_name)
