"""Storage adapters."""

from dm_relay.adapters.storage.fallback import FallbackStorage
from dm_relay.adapters.storage.memory_store import InMemoryStorage
from dm_relay.adapters.storage.sql_store import SqlStorage
from dm_relay.config import DatabaseConfig


def create_storage(database: DatabaseConfig) -> FallbackStorage:
    """SQL storage with the in-memory fallback; call ``initialize()`` before use."""
    return FallbackStorage(SqlStorage(database.url, echo=database.echo))


__all__ = ["FallbackStorage", "InMemoryStorage", "SqlStorage", "create_storage"]
