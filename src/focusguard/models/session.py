"""Session records: one entry per focus or break session."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SessionKind(str, Enum):
    """Kind of interval the timer is counting down."""

    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def display_name(self) -> str:
        return {
            SessionKind.FOCUS: "Focus",
            SessionKind.SHORT_BREAK: "Short Break",
            SessionKind.LONG_BREAK: "Long Break",
        }[self]

    @property
    def is_break(self) -> bool:
        return self is not SessionKind.FOCUS


class SessionStatus(str, Enum):
    """Lifecycle status of a session record."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class SessionRecord(BaseModel):
    """A single focus or break session.

    Records are immutable. A record is created in progress when a session
    starts and replaced by its finalized copy exactly once, either on natural
    expiry or on a user stop.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: SessionKind
    planned_duration: int = Field(gt=0, description="Planned length in seconds")
    start_time: datetime
    end_time: datetime | None = None
    status: SessionStatus = SessionStatus.IN_PROGRESS

    @model_validator(mode="after")
    def _check_end_time(self) -> "SessionRecord":
        in_progress = self.status is SessionStatus.IN_PROGRESS
        if in_progress and self.end_time is not None:
            raise ValueError("in-progress sessions cannot have an end time")
        if not in_progress and self.end_time is None:
            raise ValueError(f"{self.status.value} sessions need an end time")
        return self

    @classmethod
    def begin(
        cls, kind: SessionKind, planned_duration: int, start_time: datetime
    ) -> "SessionRecord":
        """Create an in-progress record for a session starting now."""
        return cls(kind=kind, planned_duration=planned_duration, start_time=start_time)

    @property
    def is_finalized(self) -> bool:
        return self.status is not SessionStatus.IN_PROGRESS

    @property
    def elapsed(self) -> float:
        """Seconds between start and end (0 while in progress)."""
        if self.end_time is None:
            return 0.0
        return max(0.0, (self.end_time - self.start_time).total_seconds())

    def finalize(self, status: SessionStatus, end_time: datetime) -> "SessionRecord":
        """Return the finalized copy of this record."""
        if self.is_finalized:
            raise ValueError(f"Session {self.id} is already {self.status.value}")
        if status is SessionStatus.IN_PROGRESS:
            raise ValueError("Cannot finalize a session as in progress")
        return self.model_copy(update={"status": status, "end_time": end_time})
