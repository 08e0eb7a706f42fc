"""Structured JSON logging to a stream."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, TextIO

from .utils import (
    APP_JSON_KEY,
    APP_VERSION_JSON_KEY,
    ENV_JSON_KEY,
    HOSTNAME_JSON_KEY,
    STACK_JSON_KEY,
    get_hostname,
)

DEFAULT_CALLER_SKIP = 3
LOGGER_NAME = "apiservice"

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


@dataclass(frozen=True)
class LoggerConfig:
    """Identity of the service as stamped on every log line."""

    env: str = ""
    app_name: str = ""
    app_version: str = ""
    debug_enabled: bool = False
    caller_skip_no: int = 0


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def __init__(
        self, static_fields: Mapping[str, Any] | None = None, add_source: bool = True
    ) -> None:
        super().__init__()
        self.static_fields = dict(static_fields or {})
        self.add_source = add_source

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created)
            .astimezone()
            .isoformat(timespec="milliseconds"),
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname),
        }
        if self.add_source:
            entry["source"] = {
                "function": record.funcName,
                "file": record.pathname,
                "line": record.lineno,
            }
        entry["msg"] = record.getMessage()
        entry.update(self.static_fields)
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry[STACK_JSON_KEY] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def new_logger(config: LoggerConfig, stream: TextIO | None = None) -> logging.Logger:
    """Build an INFO-level logger writing JSON lines tagged with the service identity."""
    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(
        JsonFormatter(
            {
                HOSTNAME_JSON_KEY: get_hostname(),
                ENV_JSON_KEY: config.env,
                APP_JSON_KEY: config.app_name,
                APP_VERSION_JSON_KEY: config.app_version,
            }
        )
    )
    logger = logging.Logger(LOGGER_NAME, logging.INFO)
    logger.addHandler(handler)
    logger.propagate = False
    return logger