# === NAVMAP v1 ===
# {
#   "module": "RestKit.logging_utils",
#   "purpose": "Structured logging helpers: secret masking, JSON formatter, handler setup.",
#   "sections": [
#     {"id": "mask-sensitive-data", "name": "mask_sensitive_data", "anchor": "function-mask-sensitive-data", "kind": "function"},
#     {"id": "jsonformatter", "name": "JSONFormatter", "anchor": "class-jsonformatter", "kind": "class"},
#     {"id": "setup-logging", "name": "setup_logging", "anchor": "function-setup-logging", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Structured logging helpers shared across client components."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional, Union

__all__ = ["JSONFormatter", "mask_sensitive_data", "setup_logging"]

SENSITIVE_KEYS = {"authorization", "proxy-authorization", "api_key", "apikey", "token", "secret", "password"}

_BASIC_OR_BEARER = re.compile(r"^(basic|bearer)\s+\S+$", re.IGNORECASE)

# LogRecord attributes that are not user-supplied ``extra`` fields.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def mask_sensitive_data(payload: Dict[str, object]) -> Dict[str, object]:
    """Return a copy of ``payload`` with common secret fields masked."""

    def _mask_value(value: object, key_hint: Optional[str] = None) -> object:
        if isinstance(value, dict):
            return {
                sub_key: _mask_value(sub_value, str(sub_key).lower())
                for sub_key, sub_value in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [_mask_value(item, key_hint) for item in value]
        if key_hint in SENSITIVE_KEYS and value is not None:
            return "***masked***"
        if isinstance(value, str) and _BASIC_OR_BEARER.match(value):
            return "***masked***"
        return value

    return {key: _mask_value(value, key.lower()) for key, value in payload.items()}


class JSONFormatter(logging.Formatter):
    """Formatter emitting masked JSON log entries, one object per line.

    Fields passed through ``extra={...}`` are merged into the entry.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a JSON string."""

        now = datetime.now(timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(mask_sensitive_data(payload), default=str)


def setup_logging(
    *,
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_log_size_mb: int = 100,
    backup_count: int = 5,
    propagate: bool = False,
) -> logging.Logger:
    """Configure the ``RestKit`` logger with a console handler and optional JSON file.

    ``level`` defaults to ``ClientSettings.log_level`` (``RESTKIT_LOG_LEVEL``).
    Calling it again replaces the handlers a previous call installed.
    """

    if level is None:
        from RestKit.settings import get_settings

        level = get_settings().log_level

    logger = logging.getLogger("RestKit")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_restkit_managed", False):
            logger.removeHandler(handler)
            if isinstance(handler, logging.StreamHandler):
                stream = getattr(handler, "stream", None)
                if stream in (sys.stdout, sys.stderr):
                    continue
            handler.close()

    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(console_formatter)
    stream_handler._restkit_managed = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(max_log_size_mb * 1024 * 1024),
            backupCount=backup_count,
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler._restkit_managed = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    logger.propagate = propagate
    return logger
