"""Cache backends used by the data access layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from .appcache import AppCache, AppCacheSettings, new_app_cache
from .config import Config


class CacheType(str, Enum):
    APP_CACHE = "appCache"
    REDIS_CACHE = "redisCache"


ENABLED_CACHE = CacheType.APP_CACHE


class Cache(ABC):
    """A cache that the data access layer reads through."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""


class AppCacheStore(Cache):
    """Cache kept in process memory."""

    def __init__(self, config: Config) -> None:
        settings = config.dal.cache.app_cache
        self.connection: AppCache = new_app_cache(
            AppCacheSettings(
                default_expiration_in_seconds=settings.default_expiration_in_seconds,
                cleanup_interval_in_minutes=settings.cleanup_interval_in_minutes,
            )
        )

    def get(self, key: str) -> Any | None:
        try:
            return self.connection.get(key)
        except KeyError:
            return None


class RedisCacheStore(Cache):
    """Redis-backed cache; no client is configured, so every lookup misses."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def get(self, key: str) -> Any | None:
        return None


def new_cache(config: Config) -> Cache:
    """Create the cache backend that is enabled for this service."""
    if ENABLED_CACHE is CacheType.REDIS_CACHE:
        return RedisCacheStore(config)
    return AppCacheStore(config)