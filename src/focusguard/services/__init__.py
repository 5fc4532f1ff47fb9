"""Timer core and the collaborators it drives."""

from .blocking import (
    EMPTY_ALLOW_LIST_WARNING,
    BlockingGateway,
    BlockingOutcome,
    SimulatedBlockingGateway,
)
from .notifications import ConsoleNotificationScheduler, NotificationScheduler
from .publisher import (
    FanOutPublisher,
    LiveStatePublisher,
    NullPublisher,
    SnapshotFilePublisher,
    ThrottledPublisher,
    read_snapshot,
)
from .timer_core import SessionTimerCore

__all__ = [
    "EMPTY_ALLOW_LIST_WARNING",
    "BlockingGateway",
    "BlockingOutcome",
    "ConsoleNotificationScheduler",
    "FanOutPublisher",
    "LiveStatePublisher",
    "NotificationScheduler",
    "NullPublisher",
    "SessionTimerCore",
    "SimulatedBlockingGateway",
    "SnapshotFilePublisher",
    "ThrottledPublisher",
    "read_snapshot",
]
