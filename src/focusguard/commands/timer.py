"""Focus timer commands."""

from datetime import datetime

import typer
from rich.prompt import Confirm

from focusguard.host import TerminalHost
from focusguard.models.runtime import format_clock, progress_fraction
from focusguard.models.session import SessionStatus
from focusguard.services.blocking import SimulatedBlockingGateway
from focusguard.services.notifications import ConsoleNotificationScheduler
from focusguard.services.publisher import (
    FanOutPublisher,
    SnapshotFilePublisher,
    ThrottledPublisher,
    read_snapshot,
)
from focusguard.services.timer_core import SessionTimerCore
from focusguard.ui.console import get_console
from focusguard.ui.formatters import format_warning
from focusguard.ui.timer_display import TimerDisplay
from focusguard.utils.exit_codes import ERROR_NOT_FOUND

from .decorators import AppError, command_wrapper
from .deps import get_history, get_settings_manager

console = get_console()
app = typer.Typer(help="Run focus and break sessions")


def build_core(bell: bool = True) -> SessionTimerCore:
    """Wire the timer core with terminal collaborators."""
    settings = get_settings_manager()
    publisher = FanOutPublisher(
        TimerDisplay(console),
        ThrottledPublisher(SnapshotFilePublisher(), interval=3.0),
    )
    return SessionTimerCore(
        settings.config,
        SimulatedBlockingGateway(),
        publisher,
        ConsoleNotificationScheduler(console, bell=bell),
        get_history(),
        settings=settings,
        on_warning=format_warning,
    )


@app.command("run")
@command_wrapper
async def run_timer(
    sessions: int = typer.Option(
        1, "--sessions", "-n", min=1, help="Number of sessions to run back to back"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Start each following session without asking"
    ),
    skip_breaks: bool = typer.Option(False, "--skip-breaks", help="Go straight from focus to focus"),
    no_bell: bool = typer.Option(False, "--no-bell", help="Do not ring the terminal bell"),
) -> None:
    """Run Pomodoro sessions. Ctrl+C stops the current session."""
    core = build_core(bell=not no_bell)
    confirm = None if yes else (lambda question: Confirm.ask(question, default=True))
    host = TerminalHost(core, console, confirm=confirm)

    records = await host.run(sessions=sessions, skip_breaks=skip_breaks)

    completed = sum(1 for r in records if r.status is SessionStatus.COMPLETED)
    console.print(
        f"\n[bold]{completed}/{len(records)} session(s) completed[/bold]"
    )


@app.command("status")
@command_wrapper
def timer_status() -> None:
    """Show the running session, recomputed from its end time."""
    snapshot = read_snapshot()
    if snapshot is None:
        raise AppError("No session is running", exit_code=ERROR_NOT_FOUND)

    remaining = snapshot.remaining_time
    if snapshot.session_end_time is not None:
        now = datetime.now().astimezone()
        remaining = max(0.0, (snapshot.session_end_time - now).total_seconds())

    percent = int(progress_fraction(remaining, snapshot.total_time) * 100)
    console.print(
        f"{snapshot.session_kind.display_name}: [bold cyan]{format_clock(remaining)}[/bold cyan] "
        f"remaining ({percent}% done)"
    )
