"""Live timer state owned by the session timer core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .session import SessionKind


class TimerPhase(str, Enum):
    """Phase of the timer state machine.

    ``PAUSED`` is part of the model but no public command reaches it.
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass
class TimerRuntimeState:
    """Mutable runtime state. Only the timer core writes to it."""

    phase: TimerPhase = TimerPhase.IDLE
    session_kind: SessionKind = SessionKind.FOCUS
    total_time: float = 0.0
    remaining_time: float = 0.0
    session_start_time: datetime | None = None
    session_end_time: datetime | None = None
    completed_focus_count: int = 0
    suspended: bool = False

    def remaining_at(self, now: datetime) -> float:
        """Remaining seconds at *now*, recomputed from the stored end time."""
        if self.session_end_time is None:
            return self.remaining_time
        remaining = (self.session_end_time - now).total_seconds()
        return min(self.total_time, max(0.0, remaining))


@dataclass(frozen=True)
class LiveSnapshot:
    """Point-in-time projection pushed to live-state sinks."""

    remaining_time: float
    total_time: float
    session_kind: SessionKind
    session_end_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "remaining_time": self.remaining_time,
            "total_time": self.total_time,
            "session_kind": self.session_kind.value,
            "session_end_time": (
                self.session_end_time.isoformat() if self.session_end_time else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiveSnapshot":
        """Create from dictionary."""
        end = data.get("session_end_time")
        return cls(
            remaining_time=float(data["remaining_time"]),
            total_time=float(data["total_time"]),
            session_kind=SessionKind(data["session_kind"]),
            session_end_time=datetime.fromisoformat(end) if end else None,
        )


def format_clock(seconds: float) -> str:
    """Format seconds as MM:SS (minutes may exceed 59)."""
    whole = max(0, int(seconds))
    mins, secs = divmod(whole, 60)
    return f"{mins:02d}:{secs:02d}"


def progress_fraction(remaining: float, total: float) -> float:
    """Fraction of the session already elapsed, clamped to [0, 1]."""
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, 1.0 - remaining / total))
