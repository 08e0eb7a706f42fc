"""Database backends used by the data access layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from .config import Config


class DbType(str, Enum):
    MONGO_DB = "mongoDB"
    MY_SQL = "mySQL"


ENABLED_DB = DbType.MONGO_DB


class Database(ABC):
    """A database that the data access layer queries."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def close(self) -> None:
        """Release the connection; later lookups raise ConnectionError."""
        self._connected = False

    def _require_connection(self) -> None:
        if not self._connected:
            raise ConnectionError(f"{type(self).__name__} connection is closed")

    @abstractmethod
    def find(self) -> None:
        """Run a lookup against the database."""


class MongoDatabase(Database):
    """MongoDB backend; no collections are defined, so lookups yield nothing."""

    def find(self) -> None:
        self._require_connection()


class MySqlDatabase(Database):
    """MySQL backend; no tables are defined, so lookups yield nothing."""

    def find(self) -> None:
        self._require_connection()


def new_db(config: Config) -> Database:
    """Create the database backend that is enabled for this service."""
    if ENABLED_DB is DbType.MY_SQL:
        return MySqlDatabase(config)
    return MongoDatabase(config)