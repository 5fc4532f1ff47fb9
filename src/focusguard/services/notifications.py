"""Session completion alerts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rich.console import Console

from focusguard.models.session import SessionKind


class NotificationScheduler(ABC):
    """Fires a local alert when a session ends naturally."""

    @abstractmethod
    async def schedule_completion_alert(self, kind: SessionKind) -> None:
        """Alert the user that a *kind* session has finished."""


class ConsoleNotificationScheduler(NotificationScheduler):
    """Rings the terminal bell and prints a completion line."""

    MESSAGES = {
        SessionKind.FOCUS: "Focus session complete. Time for a break!",
        SessionKind.SHORT_BREAK: "Break is over. Ready to focus?",
        SessionKind.LONG_BREAK: "Long break is over. Ready for a new cycle?",
    }

    def __init__(self, console: Console | None = None, bell: bool = True):
        self.console = console or Console()
        self.bell = bell

    async def schedule_completion_alert(self, kind: SessionKind) -> None:
        if self.bell:
            self.console.bell()
        self.console.print(f"[bold green]🔔 {self.MESSAGES[kind]}[/bold green]")
