"""Shared test fixtures and configuration.

Keeps tests away from the real platform data and log directories and
provides fakes for the timer core's collaborators.
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

# Must be set before focusguard creates its logger
os.environ.setdefault("FOCUSGUARD_LOG_DIR", tempfile.mkdtemp(prefix="focusguard-logs-"))

from focusguard.commands import deps  # noqa: E402
from focusguard.config import TimerConfiguration  # noqa: E402
from focusguard.models.runtime import LiveSnapshot  # noqa: E402
from focusguard.services.blocking import BlockingGateway, BlockingOutcome  # noqa: E402
from focusguard.services.notifications import NotificationScheduler  # noqa: E402
from focusguard.services.publisher import LiveStatePublisher  # noqa: E402
from focusguard.storage.history import SessionRecordStore  # noqa: E402
from focusguard.storage.kv_store import MemoryStore  # noqa: E402

T0 = datetime(2026, 1, 5, 9, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class RecordingPublisher(LiveStatePublisher):
    """Keeps every snapshot it receives."""

    def __init__(self):
        self.snapshots: list[LiveSnapshot] = []
        self.ended = 0

    def publish(self, snapshot: LiveSnapshot) -> None:
        self.snapshots.append(snapshot)

    def end(self) -> None:
        self.ended += 1


def make_gateway(permission: bool = True) -> AsyncMock:
    """AsyncMock gateway that grants (or denies) permission."""
    gateway = AsyncMock(spec=BlockingGateway)
    gateway.has_permission.return_value = permission
    gateway.request_permission.return_value = permission
    gateway.start_blocking.return_value = BlockingOutcome(engaged=True)
    return gateway


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def history(store: MemoryStore) -> SessionRecordStore:
    return SessionRecordStore(store)


@pytest.fixture()
def config() -> TimerConfiguration:
    return TimerConfiguration()


@pytest.fixture()
def gateway() -> AsyncMock:
    return make_gateway()


@pytest.fixture()
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture()
def notifier() -> AsyncMock:
    return AsyncMock(spec=NotificationScheduler)


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Point FOCUSGUARD_DATA_DIR at a temporary directory."""
    monkeypatch.setenv("FOCUSGUARD_DATA_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture()
def denying_gateway() -> AsyncMock:
    return make_gateway(permission=False)


@pytest.fixture()
def cli_env(data_dir):
    """Fresh file-backed services for CLI tests, rooted in *data_dir*."""
    for factory in (deps.get_store, deps.get_settings_manager, deps.get_history):
        factory.cache_clear()
    yield data_dir
    for factory in (deps.get_store, deps.get_settings_manager, deps.get_history):
        factory.cache_clear()
