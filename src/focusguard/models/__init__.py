"""Data models for focusguard."""

from .cycling import cycle_position, next_session_kind, progress_dots
from .runtime import (
    LiveSnapshot,
    TimerPhase,
    TimerRuntimeState,
    format_clock,
    progress_fraction,
)
from .session import SessionKind, SessionRecord, SessionStatus

__all__ = [
    "LiveSnapshot",
    "SessionKind",
    "SessionRecord",
    "SessionStatus",
    "TimerPhase",
    "TimerRuntimeState",
    "cycle_position",
    "format_clock",
    "next_session_kind",
    "progress_dots",
    "progress_fraction",
]
