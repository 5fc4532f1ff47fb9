"""Focus session history kept in the key-value store."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from pydantic import TypeAdapter, ValidationError

from focusguard.errors import PersistenceError
from focusguard.models.session import SessionRecord, SessionStatus
from focusguard.utils.logger import get_logger

from .kv_store import KeyValueStore

HISTORY_KEY = "sessionHistory"

_records_adapter = TypeAdapter(list[SessionRecord])
logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionStats:
    """Counts of sessions started within a date range."""

    total: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def in_progress(self) -> int:
        return self.total - self.completed - self.failed

    @property
    def completion_rate(self) -> float:
        """Completed share of finished sessions, as a percentage."""
        finished = self.completed + self.failed
        return round(self.completed / finished * 100, 1) if finished else 0.0

    def to_dict(self) -> dict[str, int | float]:
        return {
            "total_sessions": self.total,
            "completed_sessions": self.completed,
            "failed_sessions": self.failed,
            "completion_rate": self.completion_rate,
        }


def _months_ago(moment: datetime, months: int) -> datetime:
    year, month = divmod(moment.year * 12 + (moment.month - 1) - months, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class SessionRecordStore:
    """Append-only log of session records.

    The whole history is one JSON array under ``sessionHistory``. Records
    never change after they are appended.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self) -> list[SessionRecord]:
        raw = self.store.get(HISTORY_KEY)
        if raw is None:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable session history: %s", e)
            return []

    def append(self, record: SessionRecord) -> None:
        """Append one record.

        Raises:
            PersistenceError: If the history cannot be read or written.
        """
        records = self._load()
        records.append(record)
        payload = _records_adapter.dump_json(records).decode("utf-8")
        self.store.set(HISTORY_KEY, payload)
        logger.debug(
            "Recorded %s session %s as %s",
            record.kind.value,
            record.id,
            record.status.value,
        )

    def all(self) -> list[SessionRecord]:
        """Return every stored record in insertion order."""
        try:
            return self._load()
        except PersistenceError as e:
            logger.warning("Session history unavailable: %s", e)
            return []

    def clear(self) -> None:
        """Delete the whole history."""
        self.store.delete(HISTORY_KEY)
        logger.info("Session history cleared")

    def query_by_date_range(self, start: datetime, end: datetime) -> list[SessionRecord]:
        """Records whose start time falls in [start, end)."""
        return [r for r in self.all() if start <= r.start_time < end]

    def aggregate(self, start: datetime, end: datetime) -> SessionStats:
        """Total, completed and failed counts for sessions started in range."""
        records = self.query_by_date_range(start, end)
        completed = sum(1 for r in records if r.status is SessionStatus.COMPLETED)
        failed = sum(1 for r in records if r.status is SessionStatus.FAILED)
        return SessionStats(total=len(records), completed=completed, failed=failed)

    def weekly_stats(self, now: datetime) -> SessionStats:
        """Stats for the last 7 days."""
        return self.aggregate(now - timedelta(days=7), now + timedelta(microseconds=1))

    def monthly_stats(self, now: datetime) -> SessionStats:
        """Stats since the same day last month."""
        return self.aggregate(_months_ago(now, 1), now + timedelta(microseconds=1))

    def sessions_for_day(self, day: date, tz=None) -> list[SessionRecord]:
        """Records started on *day* (local time unless *tz* is given)."""
        start = datetime.combine(day, time.min)
        start = start.replace(tzinfo=tz) if tz else start.astimezone()
        return self.query_by_date_range(start, start + timedelta(days=1))

    def session_count_by_day(self, days: int, now: datetime) -> list[tuple[date, int]]:
        """
        Count sessions per day for the last *days* days.

        Args:
            days: Number of days to include, today first
            now: Reference time; its timezone defines day boundaries

        Returns:
            List of (day, session count), most recent day first
        """
        records = self.all()
        tz = now.tzinfo
        result = []
        for offset in range(days):
            day = (now - timedelta(days=offset)).date()
            day_start = datetime.combine(day, time.min, tzinfo=tz)
            day_end = day_start + timedelta(days=1)
            count = sum(1 for r in records if day_start <= r.start_time < day_end)
            result.append((day, count))
        return result
