"""Service configuration read from per-environment YAML files."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .utils import read_file, yaml_unmarshal

CONFIG_PATH_TEMPLATE = "config/env/{env}/config.yaml"


class ConfigError(ValueError):
    """Raised when a configuration document cannot be bound."""


def _value(key: str, default: Any) -> Any:
    return field(default=default, metadata={"yaml": key})


def _section(key: str, factory: Any) -> Any:
    return field(default_factory=factory, metadata={"yaml": key})


@dataclass(frozen=True)
class AppConfig:
    name: str = _value("name", "")
    version: str = _value("version", "")
    description: str = _value("description", "")
    author: str = _value("author", "")
    url: str = _value("url", "")


@dataclass(frozen=True)
class HttpServerConfig:
    public_addr: str = _value("publicAddr", "")
    internal_addr: str = _value("internalAddr", "")
    read_timeout_in_seconds: int = _value("readTimeoutInSeconds", 0)
    write_timeout_in_seconds: int = _value("WriteTimeoutInSeconds", 0)
    shutdown_timeout_in_seconds: int = _value("shutdownTimeoutInSeconds", 0)


@dataclass(frozen=True)
class ServerConfig:
    http: HttpServerConfig = _section("http", HttpServerConfig)


@dataclass(frozen=True)
class LoggerSettings:
    debug: bool = _value("debug", False)
    caller_skip_no: int = _value("callerSkipNo", 0)


@dataclass(frozen=True)
class AppCacheConfig:
    enabled: bool = _value("enabled", False)
    default_expiration_in_seconds: int = _value("defaultExpirationInSeconds", 0)
    cleanup_interval_in_minutes: int = _value("cleanupIntervalInMinutes", 0)


@dataclass(frozen=True)
class RedisCacheConfig:
    enabled: bool = _value("enabled", False)


@dataclass(frozen=True)
class CacheConfig:
    app_cache: AppCacheConfig = _section("appCache", AppCacheConfig)
    redis: RedisCacheConfig = _section("redis", RedisCacheConfig)


@dataclass(frozen=True)
class DalConfig:
    cache: CacheConfig = _section("cache", CacheConfig)


@dataclass(frozen=True)
class Config:
    app: AppConfig = _section("app", AppConfig)
    server: ServerConfig = _section("server", ServerConfig)
    logger: LoggerSettings = _section("logger", LoggerSettings)
    dal: DalConfig = _section("dal", DalConfig)


def _convert(kind: Any, value: Any, path: str) -> Any:
    if is_dataclass(kind):
        return _decode(kind, value, path)
    if value is None:
        return kind()
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif kind is str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
    raise ConfigError(f"{path}: cannot use {value!r} as {kind.__name__}")


def _decode(cls: Any, node: Any, where: str) -> Any:
    if node is None:
        return cls()
    if not isinstance(node, Mapping):
        raise ConfigError(
            f"{where or 'config'}: expected a mapping, got {type(node).__name__}"
        )
    values = {}
    for item in fields(cls):
        key = item.metadata["yaml"]
        if key in node:
            path = f"{where}.{key}" if where else key
            values[item.name] = _convert(item.type, node[key], path)
    return cls(**values)


def parse_config(data: Union[bytes, str]) -> Config:
    """Bind a YAML document to a Config; unknown keys are ignored."""
    try:
        document = yaml_unmarshal(data)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}") from exc
    if document is None:
        raise ConfigError("configuration document is empty")
    return _decode(Config, document, "")


def load_config(
    env: str, base_dir: Optional[Union[str, "os.PathLike[str]"]] = None
) -> Config:
    """Read and bind the configuration file for an environment."""
    root = Path(base_dir) if base_dir is not None else Path.cwd()
    return parse_config(read_file(root / CONFIG_PATH_TEMPLATE.format(env=env)))