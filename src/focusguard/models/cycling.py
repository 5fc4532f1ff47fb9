"""Pomodoro cycle rules: which session comes next."""

from .session import SessionKind


def next_session_kind(
    current: SessionKind,
    completed_focus_count: int,
    sessions_before_long_break: int,
) -> SessionKind:
    """Determine the kind that follows a finished *current* session.

    *completed_focus_count* already includes the focus session that just
    finished.
    """
    if current is SessionKind.FOCUS:
        if completed_focus_count % sessions_before_long_break == 0:
            return SessionKind.LONG_BREAK
        return SessionKind.SHORT_BREAK
    return SessionKind.FOCUS


def cycle_position(
    completed_focus_count: int, sessions_before_long_break: int
) -> tuple[int, int]:
    """Return (cycle_number, session_in_cycle) for the next focus session."""
    cycle_number = completed_focus_count // sessions_before_long_break + 1
    session_in_cycle = completed_focus_count % sessions_before_long_break + 1
    return cycle_number, session_in_cycle


def progress_dots(
    completed_focus_count: int,
    sessions_before_long_break: int,
    current: SessionKind = SessionKind.FOCUS,
) -> str:
    """Get progress dots showing cycle position."""
    _, session_in_cycle = cycle_position(
        completed_focus_count, sessions_before_long_break
    )
    # A long break closes a full cycle
    if current is SessionKind.LONG_BREAK:
        session_in_cycle = sessions_before_long_break + 1

    dots = []
    for i in range(1, sessions_before_long_break + 1):
        if i < session_in_cycle:
            dots.append("●")  # Completed
        elif i == session_in_cycle and current is SessionKind.FOCUS:
            dots.append("◉")  # Current
        else:
            dots.append("○")  # Upcoming
    return " ".join(dots)
