"""Data access layer: per-entity accessors over the cache and database."""

from __future__ import annotations

from dataclasses import dataclass

from .cache import Cache, new_cache
from .config import Config
from .db import Database, new_db


@dataclass(frozen=True)
class UserDocument:
    """Database model for a user."""


@dataclass(frozen=True)
class AddressDocument:
    """Database model for an address."""


class UserDAL:
    """Access to user records."""

    def __init__(self, cache: Cache, db: Database) -> None:
        self.cache = cache
        self.db = db

    def get_user_by_id(self, user_id: str) -> UserDocument | None:
        """Return the user with this id from the cache, else look it up in the database."""
        cached = self.cache.get(f"user:{user_id}")
        if isinstance(cached, UserDocument):
            return cached
        self.db.find()
        return None


class AddressDAL:
    """Access to address records."""

    def __init__(self, cache: Cache, db: Database) -> None:
        self.cache = cache
        self.db = db

    def get_address_by_user_id(self, user_id: str) -> AddressDocument | None:
        """Return a user's address from the cache, else look it up in the database."""
        cached = self.cache.get(f"address:{user_id}")
        if isinstance(cached, AddressDocument):
            return cached
        self.db.find()
        return None


@dataclass(frozen=True)
class DataAccessLayer:
    user: UserDAL
    address: AddressDAL


def initialize_dal(config: Config) -> DataAccessLayer:
    """Connect the cache and database and build the entity accessors."""
    cache = new_cache(config)
    db = new_db(config)
    return DataAccessLayer(user=UserDAL(cache, db), address=AddressDAL(cache, db))