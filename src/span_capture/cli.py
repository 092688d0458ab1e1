"""``span-capture`` command line: canvas migration and trace summaries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from span_capture.canvas.convert import DEFAULT_CANVAS_PATTERN, convert_canvas_file
from span_capture.core.constants import NANOS_PER_MILLI
from span_capture.core.exceptions import CanvasFormatError
from span_capture.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
@click.option("--json-logs", is_flag=True, help="Emit log lines as JSON.")
def main(log_level: str | None, json_logs: bool) -> None:
    """Capture-side tooling for exported trace documents."""
    configure_logging(log_level, json=json_logs)


@main.command("convert-canvas")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--pattern", default=DEFAULT_CANVAS_PATTERN, show_default=True)
def convert_canvas_command(directory: Path, pattern: str) -> None:
    """Rewrite legacy canvas files in DIRECTORY to the OTel event schema."""
    files = sorted(directory.glob(pattern))
    click.echo(f"Found {len(files)} canvas files")

    converted = 0
    for path in files:
        click.echo(f"Converting: {path}")
        try:
            changed = convert_canvas_file(path)
        except CanvasFormatError as exc:
            raise click.ClickException(str(exc)) from exc
        if changed:
            converted += 1
            click.echo("  Converted")
        else:
            click.echo("  No changes needed")

    click.echo(f"Conversion complete: {converted} of {len(files)} files changed")


def _span_lines(span: dict[str, Any]) -> list[str]:
    start = int(span.get("startTimeUnixNano", 0))
    end = int(span.get("endTimeUnixNano", start))
    duration_ms = (end - start) // NANOS_PER_MILLI
    events = span.get("events", [])
    status = span.get("status", {}).get("code", "-")
    lines = [
        f"{span.get('name')}  {duration_ms}ms  events={len(events)}  status={status}"
    ]
    lines.extend(f"  - {event.get('name')}" for event in events)
    return lines


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def summarize(file: Path) -> None:
    """Print the spans and events of an exported trace document."""
    try:
        document = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{file} is not valid JSON: {exc}") from exc

    for resource_spans in document.get("resourceSpans", []):
        for scope_spans in resource_spans.get("scopeSpans", []):
            scope = scope_spans.get("scope", {})
            label = " ".join(filter(None, [scope.get("name"), scope.get("version")]))
            click.echo(f"[{label}]")
            for span in scope_spans.get("spans", []):
                for line in _span_lines(span):
                    click.echo(line)
    logger.debug("trace_summarized", path=str(file))


if __name__ == "__main__":
    main()
