"""Logging configuration for script-exporter.

Two output shapes are supported:

  _ContainerFormatter: human-readable, one line per record, for a
    terminal or `docker logs`.

  _JsonFormatter: one JSON object per line, for log shippers.

Both render the request context attached by the RequestContextMiddleware
(request id, probe script, status, timing): as trailing ``key=value``
pairs in text (request id and script only), as top-level keys in JSON.

Set LOG_JSON=true to switch to JSON output.
"""

from __future__ import annotations

import json
import logging
import sys

_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

_CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "script",
    "status_code",
    "duration_ms",
)
# The text message already carries method, path, status and timing.
_TEXT_CONTEXT_FIELDS = ("request_id", "script")


def _context_fields(
    record: logging.LogRecord, keys: tuple[str, ...] = _CONTEXT_FIELDS
) -> dict[str, object]:
    fields: dict[str, object] = {}
    for key in keys:
        value = getattr(record, key, None)
        # The filter stamps "-" on records logged outside a request.
        if value is not None and value != "-":
            fields[key] = value
    return fields


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    ``2026-01-02T03:04:05.678+0000 INFO     name  message  request_id=.. script=..``

    WARNING and above end with [filename:lineno]; a stack trace follows
    on the next lines when exc_info is present.
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
            datefmt=_DATEFMT,
        )

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        # .NNN goes before the +0000 offset
        return f"{base[:-5]}.{int(record.msecs):03d}{base[-5:]}"

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = _context_fields(record, _TEXT_CONTEXT_FIELDS)
        context = " ".join(f"{k}={v}" for k, v in fields.items())
        if context:
            line = f"{line}  {context}"
        if record.levelno >= logging.WARNING:
            line = f"{line}  [{record.filename}:{record.lineno}]"
        return line


class _JsonFormatter(logging.Formatter):
    """JSON Lines formatter."""

    def __init__(self) -> None:
        super().__init__(datefmt=_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context_fields(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Send every record to stdout at *level_name* (unknown names mean INFO)."""
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn's access log duplicates the request log line
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
