"""Environment, host and file helpers shared across the service."""

from __future__ import annotations

import os
import socket
from pathlib import Path
from typing import Any

import yaml

ENV_KEY = "ENV"
ENV_DEFAULT = "dev"

APP_JSON_KEY = "app"
APP_VERSION_JSON_KEY = "appVersion"
HOSTNAME_JSON_KEY = "hostname"
ENV_JSON_KEY = "env"
STACK_JSON_KEY = "stack"
ERROR_JSON_KEY = "error"


def get_env(key: str) -> str:
    """Return the value of an environment variable, or "" when it is unset."""
    return os.environ.get(key, "")


def get_hostname() -> str:
    """Return the host name, or "" when it cannot be determined."""
    try:
        return socket.gethostname()
    except OSError:
        return ""


def is_empty(text: str) -> bool:
    """Tell whether a string holds nothing but whitespace."""
    return not text.strip()


def read_file(path: str | os.PathLike[str]) -> bytes:
    """Read a whole file as bytes."""
    return Path(path).read_bytes()


def yaml_unmarshal(data: bytes | str) -> Any:
    """Parse a YAML document into plain Python values."""
    return yaml.safe_load(data)