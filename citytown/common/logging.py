"""JSON logging with stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from citytown.common.constants import JSON_LOG_FIELDS
from citytown.common.fs import ensure_dir
from citytown.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": utc_timestamp_iso(),
            "session_id": getattr(record, "session_id", None),
            "command": getattr(record, "command", None),
            "event": getattr(record, "event", None),
            "status": getattr(record, "status", None),
            "city_id": getattr(record, "city_id", None),
            "township_id": getattr(record, "township_id", None),
            "record_id": getattr(record, "record_id", None),
            "error_code": getattr(record, "error_code", None),
            "message": record.getMessage(),
        }
        for field in JSON_LOG_FIELDS:
            payload.setdefault(field, None)
        return json.dumps(payload, ensure_ascii=False)


class SessionFieldsFilter(logging.Filter):
    """Stamps session fields on records that do not set them."""

    def __init__(self, **fields: Any) -> None:
        super().__init__()
        self.fields = fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.fields.items():
            if getattr(record, key, None) is None:
                setattr(record, key, value)
        return True


def build_logger(
    session_id: str,
    data_dir: Path,
    level: str = "INFO",
    command: str | None = None,
) -> logging.Logger:
    logger = logging.getLogger(f"citytown.{session_id}")
    logger.setLevel(level.upper())
    logger.handlers.clear()
    logger.filters.clear()
    logger.propagate = False
    logger.addFilter(SessionFieldsFilter(session_id=session_id, command=command))

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    log_path = data_dir / "logs" / f"{session_id}.log.jsonl"
    ensure_dir(log_path.parent)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(file_handler)

    return logger


def close_logger(logger: logging.Logger) -> None:
    logger.filters.clear()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"citytown.{name}")


def log_event(logger: logging.Logger, message: str, **event_fields: Any) -> None:
    logger.info(message, extra=event_fields)


def log_warning(logger: logging.Logger, message: str, **event_fields: Any) -> None:
    logger.warning(message, extra=event_fields)
