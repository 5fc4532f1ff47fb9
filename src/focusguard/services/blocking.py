"""App blocking gateway.

The timer core only depends on the narrow :class:`BlockingGateway` contract.
Platform integrations (screen-time APIs, hosts-file shields, window managers)
implement it; :class:`SimulatedBlockingGateway` keeps the shield state in
process and logs what a platform gateway would do.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from focusguard.config import BlockingMode
from focusguard.errors import BlockingError, PermissionDenied
from focusguard.utils.logger import get_logger

EMPTY_ALLOW_LIST_WARNING = (
    "Whitelist mode has no allowed apps selected; apps are not blocked."
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class BlockingOutcome:
    """Result of a start_blocking call."""

    engaged: bool
    warning: str | None = None


class BlockingGateway(ABC):
    """Contract for engaging and clearing app restrictions."""

    @abstractmethod
    async def start_blocking(
        self, mode: BlockingMode, allow_list: Iterable[str] | None = None
    ) -> BlockingOutcome:
        """Engage restrictions for *mode*.

        Raises:
            PermissionDenied: If called without authorisation.
            BlockingError: If the platform call fails.
        """

    @abstractmethod
    async def stop_blocking(self) -> None:
        """Clear all restrictions. Safe to call when nothing is blocked."""

    @abstractmethod
    async def has_permission(self) -> bool:
        """Whether the gateway is authorised to block apps."""

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask for authorisation; returns whether it was granted."""


@dataclass
class ShieldState:
    """What is currently shielded."""

    block_all: bool = False
    allowed: frozenset[str] = field(default_factory=frozenset)

    @property
    def active(self) -> bool:
        return self.block_all

    def is_blocked(self, app: str) -> bool:
        return self.block_all and app not in self.allowed


class SimulatedBlockingGateway(BlockingGateway):
    """In-process gateway used when no platform shielding is available."""

    def __init__(self, grant_permission: bool = True, authorized: bool = False):
        self.grant_permission = grant_permission
        self._authorized = authorized
        self.shield = ShieldState()

    async def has_permission(self) -> bool:
        return self._authorized

    async def request_permission(self) -> bool:
        self._authorized = self.grant_permission
        if not self._authorized:
            logger.warning("App blocking permission was not granted")
        return self._authorized

    async def start_blocking(
        self, mode: BlockingMode, allow_list: Iterable[str] | None = None
    ) -> BlockingOutcome:
        if mode is BlockingMode.RELAXED:
            await self.stop_blocking()
            return BlockingOutcome(engaged=False)
        if not self._authorized:
            raise PermissionDenied("App blocking is not authorised")

        allowed = frozenset(allow_list or ())
        if mode is BlockingMode.STRICT:
            self.shield = ShieldState(block_all=True)
            logger.info("Shielding all apps (strict)")
            return BlockingOutcome(engaged=True)

        if mode is BlockingMode.WHITELIST:
            if not allowed:
                # Never fall through to blocking everything
                self.shield = ShieldState()
                logger.warning(EMPTY_ALLOW_LIST_WARNING)
                return BlockingOutcome(engaged=False, warning=EMPTY_ALLOW_LIST_WARNING)
            self.shield = ShieldState(block_all=True, allowed=allowed)
            logger.info("Shielding all apps except %d allowed", len(allowed))
            return BlockingOutcome(engaged=True)

        raise BlockingError(f"Unsupported blocking mode: {mode!r}")

    async def stop_blocking(self) -> None:
        if self.shield.active:
            logger.info("Clearing app shields")
        self.shield = ShieldState()
