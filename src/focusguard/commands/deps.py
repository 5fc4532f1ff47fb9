"""Shared service construction for commands.

Each service is built once per process and handed to the commands that need
it; tests patch these functions.
"""

from functools import lru_cache

from focusguard.config import SettingsManager
from focusguard.storage.history import SessionRecordStore
from focusguard.storage.kv_store import JsonFileStore, KeyValueStore


@lru_cache(maxsize=1)
def get_store() -> KeyValueStore:
    return JsonFileStore()


@lru_cache(maxsize=1)
def get_settings_manager() -> SettingsManager:
    return SettingsManager(get_store())


@lru_cache(maxsize=1)
def get_history() -> SessionRecordStore:
    return SessionRecordStore(get_store())
