"""Live-state publishing.

The timer core pushes :class:`LiveSnapshot` values to a publisher on every
tick and phase change. Publishers are display sinks: nothing flows back into
the core, and the core ignores (but logs) their failures.
"""

from __future__ import annotations

import json
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from focusguard.models.runtime import LiveSnapshot
from focusguard.storage.kv_store import default_data_dir
from focusguard.utils.logger import get_logger

logger = get_logger(__name__)


class LiveStatePublisher(ABC):
    """Receives state snapshots for rendering elsewhere."""

    @abstractmethod
    def publish(self, snapshot: LiveSnapshot) -> None:
        """Push a snapshot."""

    def end(self) -> None:
        """The session is over; clear whatever is being shown."""


class NullPublisher(LiveStatePublisher):
    def publish(self, snapshot: LiveSnapshot) -> None:
        pass


class FanOutPublisher(LiveStatePublisher):
    """Forwards every call to several sinks; one failing sink does not stop the rest."""

    def __init__(self, *sinks: LiveStatePublisher):
        self.sinks = list(sinks)

    def publish(self, snapshot: LiveSnapshot) -> None:
        for sink in self.sinks:
            try:
                sink.publish(snapshot)
            except Exception:
                logger.exception("Publisher %s failed", type(sink).__name__)

    def end(self) -> None:
        for sink in self.sinks:
            try:
                sink.end()
            except Exception:
                logger.exception("Publisher %s failed to end", type(sink).__name__)


class ThrottledPublisher(LiveStatePublisher):
    """Forwards at most one snapshot per *interval* seconds.

    A snapshot whose kind or total differs from the last forwarded one (a new
    session) always goes through, as does ``end()``.
    """

    def __init__(
        self,
        inner: LiveStatePublisher,
        interval: float = 3.0,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.inner = inner
        self.interval = interval
        self._monotonic = monotonic
        self._last_sent_at: float | None = None
        self._last: LiveSnapshot | None = None

    def publish(self, snapshot: LiveSnapshot) -> None:
        now = self._monotonic()
        new_session = self._last is None or (
            snapshot.session_kind != self._last.session_kind
            or snapshot.total_time != self._last.total_time
            or snapshot.session_end_time != self._last.session_end_time
        )
        due = self._last_sent_at is None or now - self._last_sent_at >= self.interval
        if new_session or due:
            self.inner.publish(snapshot)
            self._last_sent_at = now
            self._last = snapshot

    def end(self) -> None:
        self._last_sent_at = None
        self._last = None
        self.inner.end()


def default_snapshot_path() -> Path:
    return default_data_dir() / "live_state.json"


class SnapshotFilePublisher(LiveStatePublisher):
    """Writes the latest snapshot to a JSON file for status bars and widgets.

    Readers should recompute remaining time from ``session_end_time``.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or default_snapshot_path()

    def publish(self, snapshot: LiveSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f)
        os.replace(tmp, self.path)

    def end(self) -> None:
        self.path.unlink(missing_ok=True)


def read_snapshot(path: Path | None = None) -> LiveSnapshot | None:
    """Read a snapshot written by SnapshotFilePublisher; None if absent or invalid."""
    path = path or default_snapshot_path()
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return LiveSnapshot.from_dict(json.load(f))
    except (OSError, json.JSONDecodeError, KeyError, ValueError):
        return None
