"""structlog setup for span-capture.

Output goes to the ``span_capture`` stdlib logger only, so configuring it
inside a test session leaves the host's root logger and pytest's own log
capture alone.  Unless asked otherwise it stays quiet: warnings and errors.
"""
from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast

import structlog

LOG_LEVEL_ENV = "SPAN_CAPTURE_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
PACKAGE_LOGGER = "span_capture"


class _CaptureHandler(logging.StreamHandler):
    """Marker type so a reconfigure replaces only our own handler."""


def _resolve_level(level: str | None) -> int:
    name = level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL
    resolved = logging.getLevelName(name.strip().upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: str | None = None, json: bool = False) -> None:
    """Route span-capture log events to stderr.

    Args:
        level: Level name such as "DEBUG" or "INFO".  Falls back to
            ``$SPAN_CAPTURE_LOG_LEVEL``, then "WARNING".  Unknown names
            mean "WARNING".
        json: One JSON object per line instead of console text.
    """
    log_level = _resolve_level(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    if json:
        render: list[structlog.types.Processor] = [
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        render = [structlog.dev.ConsoleRenderer(colors=False)]

    handler = _CaptureHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for old in [h for h in package_logger.handlers if isinstance(h, _CaptureHandler)]:
        package_logger.removeHandler(old)
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False


@contextmanager
def capture_context(**values: Any) -> Iterator[None]:
    """Attach *values* (e.g. ``scenario``, ``scope``) to every event logged inside."""
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
