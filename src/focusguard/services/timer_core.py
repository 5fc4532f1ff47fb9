"""Session timer core: the focus/break state machine.

The core owns :class:`TimerRuntimeState` and is the only thing that mutates
it. Remaining time is never decremented; it is recomputed from the stored
session end time on every tick and on every resume, so a suspended process
catches up as soon as it is resumed.

All public commands must be called from the event loop thread that runs the
core. Gateway and notification calls run as separate tasks so a slow
collaborator never delays a tick.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from datetime import datetime, timedelta
from typing import Any

from focusguard.config import BlockingMode, SettingsManager, TimerConfiguration
from focusguard.errors import BlockingError, PermissionDenied, PersistenceError
from focusguard.models.cycling import next_session_kind
from focusguard.models.runtime import LiveSnapshot, TimerPhase, TimerRuntimeState
from focusguard.models.session import SessionKind, SessionRecord, SessionStatus
from focusguard.storage.history import SessionRecordStore
from focusguard.utils.logger import get_logger

from .blocking import BlockingGateway
from .notifications import NotificationScheduler
from .publisher import LiveStatePublisher

PhaseListener = Callable[[TimerPhase, TimerPhase], None]

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


class SessionTimerCore:
    """Drives focus and break sessions and their side effects."""

    def __init__(
        self,
        config: TimerConfiguration,
        gateway: BlockingGateway,
        publisher: LiveStatePublisher,
        notifier: NotificationScheduler,
        history: SessionRecordStore,
        *,
        settings: SettingsManager | None = None,
        clock: Callable[[], datetime] = _now,
        tick_interval: float = 1.0,
        on_warning: Callable[[str], None] | None = None,
    ):
        self.config = config
        self.gateway = gateway
        self.publisher = publisher
        self.notifier = notifier
        self.history = history
        self.settings = settings
        self.tick_interval = tick_interval
        self.on_warning = on_warning
        self._clock = clock

        total = float(config.focus_duration)
        self.state = TimerRuntimeState(total_time=total, remaining_time=total)
        self.current_record: SessionRecord | None = None
        self.last_record: SessionRecord | None = None
        self.warnings: list[str] = []

        self._listeners: list[PhaseListener] = []
        self._tick_task: asyncio.Task | None = None
        self._tick_generation = 0
        self._session_seq = 0
        self._side_tasks: set[asyncio.Task] = set()
        self._gateway_lock = asyncio.Lock()

    # ----- Observation -----
    @property
    def phase(self) -> TimerPhase:
        return self.state.phase

    @property
    def session_kind(self) -> SessionKind:
        return self.state.session_kind

    @property
    def is_ticking(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def snapshot(self) -> LiveSnapshot:
        return LiveSnapshot(
            remaining_time=self.state.remaining_time,
            total_time=self.state.total_time,
            session_kind=self.state.session_kind,
            session_end_time=self.state.session_end_time,
        )

    def add_listener(self, listener: PhaseListener) -> None:
        """Call *listener(old_phase, new_phase)* on every phase change."""
        self._listeners.append(listener)

    # ----- Commands -----
    def start(self) -> None:
        """Start a session of the current kind. Ignored while running."""
        if self.state.phase is TimerPhase.RUNNING:
            logger.debug("start ignored: a session is already running")
            return

        self._cancel_ticks()
        now = self._clock()
        kind = self.state.session_kind
        total = float(self.config.duration_for(kind))

        self.state.total_time = total
        self.state.remaining_time = total
        self.state.session_start_time = now
        self.state.session_end_time = now + timedelta(seconds=total)
        self.state.suspended = False
        self.current_record = SessionRecord.begin(kind, int(total), now)
        self._session_seq += 1
        logger.info("Starting %s session (%ds)", kind.value, int(total))

        self._set_phase(TimerPhase.RUNNING)
        if kind is SessionKind.FOCUS:
            self._spawn(self._engage_blocking(self._session_seq))
        else:
            self._spawn(self._release_blocking())
        self._publish()
        self._start_ticks()

    def stop(self) -> None:
        """User stop. A stopped focus session fails; a stopped break completes."""
        if self.state.phase is not TimerPhase.RUNNING:
            return

        now = self._clock()
        if self.state.remaining_at(now) <= 0:
            # Expired before the stop arrived; count it as finished.
            self.reconcile(now)
            return

        self._cancel_ticks()
        kind = self.state.session_kind
        self.state.remaining_time = self.state.remaining_at(now)
        self.state.suspended = False
        self._spawn(self._release_blocking())
        self._end_publisher()

        if kind is SessionKind.FOCUS:
            self._finalize_record(SessionStatus.FAILED, now)
            self._set_phase(TimerPhase.FAILED)
        else:
            self._finalize_record(SessionStatus.COMPLETED, now)
            self._set_phase(TimerPhase.IDLE)
        logger.info(
            "%s session stopped with %.0fs remaining",
            kind.display_name,
            self.state.remaining_time,
        )

    def reset(self) -> None:
        """Stop any running session and rewind the timer for the current kind."""
        self.stop()
        total = float(self.config.duration_for(self.state.session_kind))
        self.state.total_time = total
        self.state.remaining_time = total
        self.state.session_start_time = None
        self.state.session_end_time = None
        self._set_phase(TimerPhase.IDLE)

    def skip_break(self) -> None:
        """End the current break early and move on to focus."""
        kind = self.state.session_kind
        if not kind.is_break:
            return

        if self.state.phase is TimerPhase.RUNNING:
            now = self._clock()
            self._cancel_ticks()
            self.state.remaining_time = self.state.remaining_at(now)
            self.state.suspended = False
            self._end_publisher()
            self._finalize_record(SessionStatus.COMPLETED, now)
            self._set_phase(TimerPhase.FINISHED)
            logger.info("%s skipped", kind.display_name)

        self.state.session_kind = SessionKind.FOCUS
        self._set_phase(TimerPhase.IDLE)

    def change_mode(self, mode: BlockingMode) -> None:
        """Switch blocking mode; a running focus session is re-shielded."""
        self._update_config(blocking_mode=mode)
        self._reapply_if_focusing()

    def update_allow_list(self, apps: list[str]) -> None:
        """Replace the whitelist; re-applied at once in a running whitelist session."""
        self._update_config(allow_list=list(apps))
        if self.config.blocking_mode is BlockingMode.WHITELIST:
            self._reapply_if_focusing()

    def update_configuration(self, config: TimerConfiguration) -> None:
        """Adopt new settings. Durations apply from the next start."""
        self.config = config
        if self.state.phase is TimerPhase.IDLE:
            total = float(config.duration_for(self.state.session_kind))
            self.state.total_time = total
            self.state.remaining_time = total

    # ----- Time reconciliation -----
    def reconcile(self, now: datetime) -> float:
        """Recompute remaining time at *now* and finish the session if it expired.

        Returns the remaining seconds. Calling it again after completion has no
        further effect.
        """
        if self.state.phase is not TimerPhase.RUNNING:
            return self.state.remaining_time

        remaining = self.state.remaining_at(now)
        self.state.remaining_time = remaining
        if remaining <= 0:
            self._complete()
        else:
            self._publish()
        return self.state.remaining_time

    def on_suspend(self, now: datetime) -> None:
        """The host is going to the background; ticking stops until resume."""
        if self.state.phase is not TimerPhase.RUNNING:
            return
        self._cancel_ticks()
        if self.reconcile(now) > 0:
            self.state.suspended = True
            logger.debug("Suspended with %.0fs remaining", self.state.remaining_time)

    def on_resume(self, now: datetime) -> None:
        """The host is back in the foreground; catch up from the end time."""
        self.state.suspended = False
        if self.state.phase is not TimerPhase.RUNNING:
            return
        if self.reconcile(now) > 0:
            self._start_ticks()

    async def drain(self) -> None:
        """Wait for outstanding gateway and notification calls."""
        while self._side_tasks:
            await asyncio.gather(*list(self._side_tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Stop ticking and wait for side effects; the session state is kept."""
        task = self._tick_task
        self._cancel_ticks()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)
        await self.drain()

    # ----- Tick loop -----
    def _start_ticks(self) -> None:
        self._cancel_ticks()
        generation = self._tick_generation
        self._tick_task = asyncio.get_running_loop().create_task(
            self._tick_loop(generation)
        )

    def _cancel_ticks(self) -> None:
        # Bumping the generation invalidates the old loop even before the
        # cancellation is delivered.
        self._tick_generation += 1
        task = self._tick_task
        self._tick_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _tick_loop(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            if generation != self._tick_generation:
                return
            if self.state.phase is not TimerPhase.RUNNING:
                return
            self.reconcile(self._clock())

    # ----- Transitions -----
    def _complete(self) -> None:
        self._cancel_ticks()
        kind = self.state.session_kind
        end_time = self.state.session_end_time or self._clock()
        self.state.remaining_time = 0.0
        self.state.suspended = False
        self._set_phase(TimerPhase.FINISHED)

        if kind is SessionKind.FOCUS:
            self.state.completed_focus_count += 1
            self._spawn(self._release_blocking())
        self._spawn(self._notify(kind))
        self._publish()
        self._end_publisher()
        self._finalize_record(SessionStatus.COMPLETED, end_time)

        self.state.session_kind = next_session_kind(
            kind,
            self.state.completed_focus_count,
            self.config.sessions_before_long_break,
        )
        logger.info(
            "%s session completed; next is %s",
            kind.display_name,
            self.state.session_kind.display_name,
        )
        self._set_phase(TimerPhase.IDLE)

    def _set_phase(self, phase: TimerPhase) -> None:
        old = self.state.phase
        if old is phase:
            return
        self.state.phase = phase
        logger.debug("Phase %s -> %s", old.value, phase.value)
        for listener in list(self._listeners):
            try:
                listener(old, phase)
            except Exception:
                logger.exception("Phase listener failed")

    def _finalize_record(self, status: SessionStatus, end_time: datetime) -> None:
        record = self.current_record
        if record is None:
            return
        self.current_record = None
        finalized = record.finalize(status, end_time)
        self.last_record = finalized
        try:
            self.history.append(finalized)
        except PersistenceError as e:
            logger.error("Dropping session record %s: %s", finalized.id, e)

    # ----- Side effects -----
    def _publish(self) -> None:
        try:
            self.publisher.publish(self.snapshot())
        except Exception:
            logger.warning("Live-state publish failed", exc_info=True)

    def _end_publisher(self) -> None:
        try:
            self.publisher.end()
        except Exception:
            logger.warning("Live-state end failed", exc_info=True)

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)
        if self.on_warning is not None:
            try:
                self.on_warning(message)
            except Exception:
                logger.exception("Warning callback failed")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._side_tasks.add(task)
        task.add_done_callback(self._side_task_done)

    def _side_task_done(self, task: asyncio.Task) -> None:
        self._side_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background call failed", exc_info=task.exception())

    async def _engage_blocking(self, seq: int) -> None:
        async with self._gateway_lock:
            if not self._is_current_focus(seq):
                return
            await self._apply_blocking()

    def _is_current_focus(self, seq: int) -> bool:
        return (
            seq == self._session_seq
            and self.state.phase is TimerPhase.RUNNING
            and self.state.session_kind is SessionKind.FOCUS
        )

    async def _apply_blocking(self) -> None:
        mode = self.config.blocking_mode
        try:
            if mode is BlockingMode.RELAXED:
                await self.gateway.stop_blocking()
                return
            if not await self.gateway.has_permission():
                if not await self.gateway.request_permission():
                    raise PermissionDenied("App blocking permission denied")
            allow_list = (
                list(self.config.allow_list) if mode is BlockingMode.WHITELIST else None
            )
            outcome = await self.gateway.start_blocking(mode, allow_list)
        except PermissionDenied as e:
            self._warn(f"{e}; focusing without app blocking.")
            return
        except BlockingError as e:
            logger.error("Could not start app blocking: %s", e)
            self._warn("App blocking failed; focusing without app blocking.")
            return
        if outcome.warning:
            self._warn(outcome.warning)

    async def _release_blocking(self) -> None:
        async with self._gateway_lock:
            try:
                await self.gateway.stop_blocking()
            except BlockingError as e:
                logger.error("Could not stop app blocking: %s", e)

    async def _notify(self, kind: SessionKind) -> None:
        try:
            await self.notifier.schedule_completion_alert(kind)
        except Exception:
            logger.warning("Completion alert failed", exc_info=True)

    # ----- Settings -----
    def _update_config(self, **changes: Any) -> None:
        data = self.config.model_dump()
        data.update(changes)
        self.config = TimerConfiguration.model_validate(data)
        if self.settings is None:
            return
        try:
            self.settings.save_config(self.config)
        except PersistenceError as e:
            logger.error("Could not save settings: %s", e)
            self._warn("Settings could not be saved; the change lasts until exit.")

    def _reapply_if_focusing(self) -> None:
        if (
            self.state.phase is TimerPhase.RUNNING
            and self.state.session_kind is SessionKind.FOCUS
        ):
            self._spawn(self._engage_blocking(self._session_seq))
