"""Migrate canvas files from the legacy event schema to the OTel event schema.

Legacy node payload::

    {"event": "draft.promote.started",
     "dataSchema": {"draftId": {"type": "string", "required": true},
                    "autoCommit": {"type": "boolean"}}}

becomes::

    {"otelEvent": {"name": "draft.promote.started",
                   "attributes": {"required": ["draftId"],
                                  "optional": ["autoCommit"]}}}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from span_capture.core.exceptions import CanvasFormatError

logger = structlog.get_logger(__name__)

DEFAULT_CANVAS_PATTERN = "*.otel.canvas"

_PRESENTATION_KEYS = ("sources", "otel", "shape", "fill", "stroke")
_LEGACY_KEYS = ("event", "dataSchema")


def convert_pv(old: dict[str, Any]) -> dict[str, Any]:
    """Return the new-schema form of one node's ``pv`` payload."""
    new: dict[str, Any] = {}

    event = old.get("event")
    if event:
        otel_event: dict[str, Any] = {"name": event}
        schema = old.get("dataSchema")
        if schema:
            required = [
                key
                for key, spec in schema.items()
                if isinstance(spec, dict) and spec.get("required") is True
            ]
            optional = [key for key in schema if key not in required]
            attributes: dict[str, list[str]] = {}
            if required:
                attributes["required"] = required
            if optional:
                attributes["optional"] = optional
            otel_event["attributes"] = attributes
        new["otelEvent"] = otel_event

    for key in _PRESENTATION_KEYS:
        if old.get(key):
            new[key] = old[key]

    for key, value in old.items():
        if key not in _LEGACY_KEYS and key not in _PRESENTATION_KEYS:
            new[key] = value

    return new


def convert_canvas(document: dict[str, Any]) -> bool:
    """Convert legacy nodes of *document* in place; return whether any changed."""
    changed = False
    for node in document.get("nodes") or []:
        pv = node.get("pv") if isinstance(node, dict) else None
        if isinstance(pv, dict) and "event" in pv:
            node["pv"] = convert_pv(pv)
            changed = True
    return changed


def convert_canvas_file(path: str | Path) -> bool:
    """Rewrite *path* in the new schema; untouched when nothing changes.

    Raises:
        CanvasFormatError: The file is not a JSON object.
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CanvasFormatError(
            f"Invalid canvas JSON in {path}: {exc}",
            details={"path": str(path)},
        ) from exc
    if not isinstance(document, dict):
        raise CanvasFormatError(
            f"Canvas {path} is not a JSON object",
            details={"path": str(path)},
        )

    if not convert_canvas(document):
        logger.debug("canvas_unchanged", path=str(path))
        return False

    path.write_text(json.dumps(document, indent="\t", ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("canvas_converted", path=str(path))
    return True


def convert_directory(
    directory: str | Path, pattern: str = DEFAULT_CANVAS_PATTERN
) -> list[Path]:
    """Convert every file in *directory* matching *pattern*.

    Returns:
        The files that were rewritten, in name order.
    """
    converted: list[Path] = []
    for path in sorted(Path(directory).glob(pattern)):
        if convert_canvas_file(path):
            converted.append(path)
    return converted
