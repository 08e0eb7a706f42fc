"""In-process key/value cache with per-item expiry and a background sweeper."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_EXPIRATION_IN_SECONDS = 300
CLEANUP_INTERVAL_IN_MINUTES = 10

DEFAULT_EXPIRATION = 0.0
NO_EXPIRATION = -1.0


@dataclass(frozen=True)
class AppCacheSettings:
    """Overrides for the cache; zero keeps the built-in default."""

    default_expiration_in_seconds: int = 0
    cleanup_interval_in_minutes: int = 0


class AppCache:
    """Thread-safe cache whose items expire after a time-to-live."""

    def __init__(
        self,
        default_expiration: float,
        cleanup_interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_expiration = (
            default_expiration if default_expiration != 0 else NO_EXPIRATION
        )
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._items: dict[str, tuple[Any, float | None]] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._janitor: threading.Thread | None = None
        if cleanup_interval > 0:
            self._janitor = threading.Thread(
                target=self._sweep, name="appcache-janitor", daemon=True
            )
            self._janitor.start()

    def _sweep(self) -> None:
        while not self._stop.wait(self.cleanup_interval):
            self.delete_expired()

    def _expired(self, deadline: float | None, now: float) -> bool:
        return deadline is not None and now > deadline

    def set(self, key: str, value: Any, ttl: float = DEFAULT_EXPIRATION) -> None:
        """Store a value; ttl 0 uses the default, a negative ttl never expires."""
        if ttl == DEFAULT_EXPIRATION:
            ttl = self.default_expiration
        deadline = self._clock() + ttl if ttl > 0 else None
        with self._lock:
            self._items[key] = (value, deadline)

    def get(self, key: str) -> Any:
        """Return a live value; raise KeyError when it is absent or expired."""
        with self._lock:
            entry = self._items.get(key)
        if entry is None or self._expired(entry[1], self._clock()):
            raise KeyError(key)
        return entry[0]

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        with self._lock:
            self._items.pop(key, None)

    def delete_expired(self) -> int:
        """Drop every expired item and return how many were dropped."""
        now = self._clock()
        with self._lock:
            stale = [k for k, (_, d) in self._items.items() if self._expired(d, now)]
            for key in stale:
                del self._items[key]
        return len(stale)

    def close(self) -> None:
        """Stop the background sweeper."""
        self._stop.set()
        if self._janitor is not None:
            self._janitor.join()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._items.get(key)  # type: ignore[call-overload]
        return entry is not None and not self._expired(entry[1], self._clock())

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(not self._expired(d, now) for _, d in self._items.values())

    def __enter__(self) -> "AppCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def new_app_cache(config: AppCacheSettings | None = None) -> AppCache:
    """Create a cache, taking non-zero values from the settings over the defaults."""
    expiration = DEFAULT_EXPIRATION_IN_SECONDS
    interval = CLEANUP_INTERVAL_IN_MINUTES
    if config is not None and config.default_expiration_in_seconds != 0:
        expiration = config.default_expiration_in_seconds
    if config is not None and config.cleanup_interval_in_minutes != 0:
        interval = config.cleanup_interval_in_minutes
    return AppCache(float(expiration), float(interval * 60))