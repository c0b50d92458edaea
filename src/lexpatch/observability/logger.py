"""JSON-lines logging for lexpatch.

Each record becomes one JSON object::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "INFO",
     "logger": "lexpatch.repository", "message": "Document updated",
     "op": "set_markdown", "file_id": "f-1", "version": 7, "blocks": 12}

Callers attach structured fields with ``extra={"extra_fields": {...}}``.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import IO, Any

RESERVED_KEYS = ("ts", "level", "logger", "message")


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    ``ts`` is the record's creation time in UTC.  Structured fields are
    merged into the object but cannot replace any of :data:`RESERVED_KEYS`.
    Tracebacks are written under ``exception``, stack dumps under
    ``stack_info``.

    Parameters
    ----------
    static_fields:
        Fields added to every record (e.g. ``{"service": "editor"}``).
    """

    def __init__(self, static_fields: Mapping[str, Any] | None = None) -> None:
        super().__init__()
        self._static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = dict(self._static_fields)
        entry.update(getattr(record, "extra_fields", None) or {})
        entry.update(
            ts=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _has_structured_handler(logger: logging.Logger) -> bool:
    return any(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers)


def get_logger(
    name: str = "lexpatch",
    *,
    level: int | str = logging.DEBUG,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the logger *name*, attaching a JSON handler on first use.

    Later calls for the same name return the logger untouched, so the
    handler is never duplicated and *level* / *stream* only apply the
    first time.  The logger does not propagate to the root logger.
    """
    logger = logging.getLogger(name)
    if _has_structured_handler(logger):
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger
