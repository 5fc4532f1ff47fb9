"""Tests for focusguard.host.TerminalHost."""

from __future__ import annotations

import asyncio
import signal
from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
import pytest_asyncio
from rich.console import Console

from focusguard.config import TimerConfiguration
from focusguard.host import TerminalHost
from focusguard.models.runtime import TimerPhase
from focusguard.models.session import SessionKind, SessionStatus
from focusguard.services.timer_core import SessionTimerCore


class SteppingClock:
    """Clock that moves forward a fixed step on every read."""

    def __init__(self, start, step: float):
        self.now = start
        self.step = timedelta(seconds=step)

    def __call__(self):
        self.now = self.now + self.step
        return self.now


@pytest.fixture()
def console() -> Console:
    return Console(file=StringIO(), width=100, force_terminal=False)


@pytest_asyncio.fixture()
async def core(config, gateway, publisher, notifier, history, clock):
    core = SessionTimerCore(
        config, gateway, publisher, notifier, history, clock=clock, tick_interval=0.005
    )
    yield core
    await core.aclose()


def _output(console: Console) -> str:
    return console.file.getvalue()


# ---------------------------------------------------------------------------
# run_one
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_run_one_waits_for_completion(core, console, clock):
    host = TerminalHost(core, console, clock=clock)
    task = asyncio.create_task(host.run_one())
    await asyncio.sleep(0)
    assert core.phase is TimerPhase.RUNNING

    clock.advance(1500)
    record = await asyncio.wait_for(task, timeout=1)

    assert record.status is SessionStatus.COMPLETED
    assert core.session_kind is SessionKind.SHORT_BREAK
    assert "Focus 25m" in _output(console)


@pytest.mark.asyncio
async def test_interrupt_stops_session(core, console, clock):
    host = TerminalHost(core, console, clock=clock)
    task = asyncio.create_task(host.run_one())
    await asyncio.sleep(0)

    clock.advance(60)
    host._interrupt()
    record = await asyncio.wait_for(task, timeout=1)

    assert host.interrupted
    assert record.status is SessionStatus.FAILED
    assert core.phase is TimerPhase.FAILED


@pytest.mark.asyncio
async def test_suspend_and_resume(core, console, clock):
    host = TerminalHost(core, console, clock=clock)
    core.start()

    with patch("focusguard.host.os.kill") as kill:
        clock.advance(100)
        host._suspend()

    kill.assert_called_once()
    assert kill.call_args[0][1] == signal.SIGSTOP
    assert core.state.suspended
    assert not core.is_ticking

    host._resume()
    assert not core.state.suspended
    assert core.is_ticking
    assert core.state.remaining_time == 1400


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


def _fast_core(gateway, publisher, notifier, history, clock) -> SessionTimerCore:
    return SessionTimerCore(
        TimerConfiguration(),
        gateway,
        publisher,
        notifier,
        history,
        clock=SteppingClock(clock.now, step=1000),
        tick_interval=0.001,
    )


@pytest.mark.asyncio
async def test_run_skips_breaks(gateway, publisher, notifier, history, clock, console):
    core = _fast_core(gateway, publisher, notifier, history, clock)
    host = TerminalHost(core, console)

    records = await asyncio.wait_for(host.run(sessions=2, skip_breaks=True), timeout=2)

    assert [r.kind for r in records] == [SessionKind.FOCUS, SessionKind.FOCUS]
    assert all(r.status is SessionStatus.COMPLETED for r in records)
    assert "Break skipped" in _output(console)
    assert not core.is_ticking


@pytest.mark.asyncio
async def test_run_stops_when_declined(gateway, publisher, notifier, history, clock, console):
    core = _fast_core(gateway, publisher, notifier, history, clock)
    questions = []

    def decline(question: str) -> bool:
        questions.append(question)
        return False

    host = TerminalHost(core, console, confirm=decline)
    records = await asyncio.wait_for(host.run(sessions=3), timeout=2)

    assert len(records) == 1
    assert questions == ["Start Short Break?"]


# ---------------------------------------------------------------------------
# describe_next
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_describe_next(core, console, clock):
    host = TerminalHost(core, console, clock=clock)
    assert host.describe_next() == "Focus 25m  (cycle 1, session 1)  ◉ ○ ○ ○"

    core.start()
    core.reconcile(clock.advance(1500))
    assert host.describe_next() == "Short Break 5m"
