"""Persistence for settings and session history."""

from .history import SessionRecordStore, SessionStats
from .kv_store import JsonFileStore, KeyValueStore, MemoryStore, default_data_dir

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SessionRecordStore",
    "SessionStats",
    "default_data_dir",
]
