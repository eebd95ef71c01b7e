# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging for the reviewer assignment service.

Every module logs through a child of the ``reviewer_assignment`` logger and
one stdout handler on that parent writes each record as a JSON line. The
request id is taken from the contextvar bound by RequestIDMiddleware, and
team / user / pull request ids passed via ``extra=`` become top-level keys.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from reviewer_assignment.core.config import settings

ROOT_LOGGER = "reviewer_assignment"
CONTEXT_FIELDS: tuple[str, ...] = ("team_name", "user_id", "pull_request_id")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None) or request_id_var.get()
        if request_id:
            entry["request_id"] = request_id
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            entry["error"] = str(exc)
            entry["error_type"] = type(exc).__name__
            # business failures carry a machine-readable code
            code = getattr(exc, "code", None)
            if isinstance(code, str):
                entry["error_code"] = code
        return json.dumps(entry, default=str)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the service root; module names outside the package are nested."""
    root = _root_logger()
    if not name or name == ROOT_LOGGER:
        return root
    if name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return root.getChild(name)
