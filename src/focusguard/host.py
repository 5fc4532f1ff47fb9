"""Terminal host for the session timer core.

The host plays the part of the app shell: it dispatches ``start``/``stop``
commands, and turns process signals into lifecycle events. Ctrl+C stops the
running session, Ctrl+Z suspends the process (``on_suspend``) and ``fg``
resumes it (``on_resume``).
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from collections.abc import Callable
from datetime import datetime

from focusguard.models.cycling import cycle_position, progress_dots
from focusguard.models.runtime import TimerPhase, format_clock
from focusguard.models.session import SessionKind, SessionRecord
from focusguard.services.timer_core import SessionTimerCore
from focusguard.utils.logger import get_logger

logger = get_logger(__name__)


class TerminalHost:
    """Runs sessions on a core until the requested count is reached."""

    def __init__(
        self,
        core: SessionTimerCore,
        console,
        confirm: Callable[[str], bool] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.core = core
        self.console = console
        self.confirm = confirm
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._session_over = asyncio.Event()
        self.interrupted = False
        self.core.add_listener(self._on_phase_change)

    def _on_phase_change(self, old: TimerPhase, new: TimerPhase) -> None:
        if new in (TimerPhase.IDLE, TimerPhase.FAILED):
            self._session_over.set()

    # ----- Signals -----
    def _interrupt(self) -> None:
        self.interrupted = True
        self.core.stop()
        self._session_over.set()

    def _suspend(self) -> None:
        self.core.on_suspend(self._clock())
        os.kill(os.getpid(), signal.SIGSTOP)

    def _resume(self) -> None:
        self.core.on_resume(self._clock())

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        installed = []
        handlers = [(signal.SIGINT, self._interrupt)]
        if hasattr(signal, "SIGTSTP"):
            handlers.append((signal.SIGTSTP, self._suspend))
            handlers.append((signal.SIGCONT, self._resume))
        for signum, handler in handlers:
            # Not available on Windows event loops or outside the main thread
            with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
                loop.add_signal_handler(signum, handler)
                installed.append(signum)
        return installed

    # ----- Running -----
    def describe_next(self) -> str:
        core = self.core
        kind = core.session_kind
        minutes = core.config.duration_for(kind) // 60
        if kind is SessionKind.FOCUS:
            cycle, position = cycle_position(
                core.state.completed_focus_count,
                core.config.sessions_before_long_break,
            )
            dots = progress_dots(
                core.state.completed_focus_count,
                core.config.sessions_before_long_break,
                kind,
            )
            return f"{kind.display_name} {minutes}m  (cycle {cycle}, session {position})  {dots}"
        return f"{kind.display_name} {minutes}m"

    async def run_one(self) -> SessionRecord | None:
        """Start one session and wait until it finishes or is stopped."""
        loop = asyncio.get_running_loop()
        self._session_over.clear()
        self.console.print(f"\n[bold]▶ {self.describe_next()}[/bold]")
        installed = self._install_signal_handlers(loop)
        try:
            self.core.start()
            await self._session_over.wait()
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)
        await self.core.drain()
        return self.core.last_record

    async def run(self, sessions: int = 1, skip_breaks: bool = False) -> list[SessionRecord]:
        """Run up to *sessions* sessions back to back."""
        records: list[SessionRecord] = []
        try:
            while len(records) < sessions and not self.interrupted:
                if skip_breaks and self.core.session_kind.is_break:
                    self.core.skip_break()
                    self.console.print("[dim]Break skipped[/dim]")
                    continue
                if records and self.confirm is not None:
                    if not self.confirm(f"Start {self.core.session_kind.display_name}?"):
                        break
                record = await self.run_one()
                if record is not None:
                    records.append(record)
                    self._report(record)
        finally:
            await self.core.aclose()
        return records

    def _report(self, record: SessionRecord) -> None:
        kind = record.kind.display_name
        if self.core.phase is TimerPhase.FAILED:
            self.console.print(
                f"[yellow]⚠ {kind} stopped after {format_clock(record.elapsed)}; "
                "recorded as failed[/yellow]"
            )
        elif self.interrupted:
            self.console.print(f"[yellow]{kind} ended early after {format_clock(record.elapsed)}[/yellow]")
        else:
            self.console.print(f"[green]✓ {kind} complete ({format_clock(record.elapsed)})[/green]")
        logger.info("Session %s finished as %s", record.id, record.status.value)
