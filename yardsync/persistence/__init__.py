"""Persistence: EntityStore implementations and the schema migration runner."""

from yardsync.persistence.memory_store import InMemoryEntityStore
from yardsync.persistence.migrations import run_migrations
from yardsync.persistence.sqlite_store import SQLiteEntityStore

__all__ = ["InMemoryEntityStore", "SQLiteEntityStore", "run_migrations"]
