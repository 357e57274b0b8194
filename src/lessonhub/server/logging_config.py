"""Log output for the lessonhub server.

Two renderings, picked by ``LOG_FORMAT``:

- ``pretty``: application records as ``time LEVEL [logger] message``; access
  records (those carrying the request fields set by
  ``RequestContextMiddleware``) as one HTTP-server style line::

      127.0.0.1 - [17/Oct/2026:10:02:11 +0000] "GET /search" 404 3.1ms rid=5f0c...

- ``json``: one object per line, request fields grouped under ``"http"``.

uvicorn's own access logger is muted; the middleware writes the access log.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes RequestContextMiddleware attaches through ``extra=``
ACCESS_FIELDS = ("request_id", "client", "method", "path", "route", "status", "latency_ms")

_HANDLER_MARK = "_lessonhub_handler"


def access_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Request fields present on ``record`` (empty for application records)."""
    return {
        key: getattr(record, key)
        for key in ACCESS_FIELDS
        if getattr(record, key, None) is not None
    }


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class AccessLogFormatter(logging.Formatter):
    """Human-readable lines; access records render like an HTTP server log."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        http = access_fields(record)
        if "status" not in http:
            return super().format(record)
        stamp = _record_time(record).strftime("%d/%b/%Y:%H:%M:%S %z")
        return (
            f'{http.get("client", "-")} - [{stamp}] '
            f'"{http.get("method", "-")} {http.get("path", "-")}" '
            f'{http["status"]} {http.get("latency_ms", 0)}ms '
            f'rid={http.get("request_id", "-")}'
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": _record_time(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        http = access_fields(record)
        if http:
            entry["http"] = http
        if record.exc_info and record.exc_info[1]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def build_formatter(log_format: str) -> logging.Formatter:
    return JsonFormatter() if log_format == "json" else AccessLogFormatter()


def setup_logging(log_format: Optional[str] = None, log_level: Optional[str] = None) -> None:
    """Install the lessonhub handler on the root logger.

    Defaults come from settings. Calling again replaces the handler, so a
    CLI or test can switch format without stacking handlers.
    """
    from lessonhub.server.config import settings

    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(build_formatter(log_format or settings.log_format))
    setattr(handler, _HANDLER_MARK, True)

    root = logging.getLogger()
    for old in [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]:
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").disabled = True
