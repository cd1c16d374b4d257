"""Logging setup with an optional single-line JSON formatter.

Activate JSON output by setting ``DELTA_STRUCTURED_LOGGING=true``.  When
enabled, :func:`configure_logging` replaces the root handlers with a
``StreamHandler`` using :class:`JSONFormatter`.

Output schema per line::

    {
        "timestamp": "2025-05-15T12:34:56.789012+00:00",
        "level": "WARNING",
        "logger": "delta_engine.diff.engine",
        "message": "max depth 3 reached at Config.inner; comparing rendered values",
        "path": "Config.inner",        // present when passed via extra={"path": ...}
        "exc_info": "Traceback ..."    // present only on exceptions
    }
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from delta_engine.config import Settings

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Comparison path attached by the engine via ``extra={"path": ...}``.
        path = getattr(record, "path", None)
        if path:
            payload["path"] = path

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(settings: Settings) -> None:
    """Install a single root handler according to *settings*."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    if settings.structured_logging:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    root_logger.addHandler(handler)
    root_logger.setLevel("DEBUG" if settings.debug else settings.log_level)
