"""Structured JSON logs for the API, CLI and services."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from flask import g, has_request_context

HANDLER_NAME = "gestion_eolica.json"

# Atributos propios de LogRecord; lo demás llega por ``extra=``
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}


def _current_request_id() -> str:
    if has_request_context():
        return getattr(g, "request_id", None) or "-"
    return "-"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _current_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: ``ts``, ``level``, ``logger``, ``msg``, ``request_id`` and every
    non-null field the caller passed through ``extra`` (``event``,
    ``user_id``, ``equipment_id``...).
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line = {
            "ts": stamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", None) or _current_request_id(),
        }
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and value is not None
        )
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        # Decimal y fechas se serializan como texto
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(app) -> None:
    """Route root and ``app.logger`` records to a single JSON stream handler.

    Only the handler installed here is replaced on a second call, so
    handlers added by test runners or hosting platforms stay attached.
    """

    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for old in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(old)

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestContextFilter())
    root.addHandler(handler)

    app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(level)
