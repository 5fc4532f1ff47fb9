"""Best-effort key-value preference store.

Values are JSON-encoded strings keyed by name (``userSettings``,
``sessionHistory``). The file-backed store keeps every key in one JSON
document and replaces it atomically on write.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from platformdirs import user_data_dir

from focusguard.errors import PersistenceError


def default_data_dir() -> Path:
    """Data directory, overridable with FOCUSGUARD_DATA_DIR."""
    override = os.environ.get("FOCUSGUARD_DATA_DIR")
    if override:
        return Path(override)
    return Path(user_data_dir("focusguard"))


class KeyValueStore(ABC):
    """Abstract key-value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; missing keys are ignored."""


class MemoryStore(KeyValueStore):
    """In-memory store for tests and throwaway runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Key-value store persisted as a single JSON file."""

    def __init__(self, path: Path | None = None):
        if path is None:
            path = default_data_dir() / "preferences.json"
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected content in {self.path}")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=".preferences-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.chmod(tmp_name, 0o600)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
