"""Unit tests for focusguard.services.blocking."""

from __future__ import annotations

import pytest

from focusguard.config import BlockingMode
from focusguard.errors import BlockingError, PermissionDenied
from focusguard.services.blocking import (
    EMPTY_ALLOW_LIST_WARNING,
    ShieldState,
    SimulatedBlockingGateway,
)


class TestShieldState:
    def test_empty_shield_blocks_nothing(self):
        shield = ShieldState()
        assert not shield.active
        assert not shield.is_blocked("browser")

    def test_allowed_apps_pass(self):
        shield = ShieldState(block_all=True, allowed=frozenset({"editor"}))
        assert shield.is_blocked("browser")
        assert not shield.is_blocked("editor")


class TestPermission:
    @pytest.mark.asyncio
    async def test_not_authorised_by_default(self):
        assert await SimulatedBlockingGateway().has_permission() is False

    @pytest.mark.asyncio
    async def test_request_grants(self):
        gateway = SimulatedBlockingGateway(grant_permission=True)
        assert await gateway.request_permission() is True
        assert await gateway.has_permission() is True

    @pytest.mark.asyncio
    async def test_request_denied(self):
        gateway = SimulatedBlockingGateway(grant_permission=False)
        assert await gateway.request_permission() is False
        assert await gateway.has_permission() is False

    @pytest.mark.asyncio
    async def test_blocking_without_permission_raises(self):
        gateway = SimulatedBlockingGateway()
        with pytest.raises(PermissionDenied):
            await gateway.start_blocking(BlockingMode.STRICT)
        assert not gateway.shield.active


class TestStartBlocking:
    @pytest.mark.asyncio
    async def test_strict_blocks_everything(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        outcome = await gateway.start_blocking(BlockingMode.STRICT, ["editor"])

        assert outcome.engaged
        assert outcome.warning is None
        assert gateway.shield.is_blocked("editor")

    @pytest.mark.asyncio
    async def test_whitelist_keeps_allowed_apps(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        outcome = await gateway.start_blocking(BlockingMode.WHITELIST, ["editor", "terminal"])

        assert outcome.engaged
        assert not gateway.shield.is_blocked("terminal")
        assert gateway.shield.is_blocked("chat")

    @pytest.mark.parametrize("allow_list", [None, []])
    @pytest.mark.asyncio
    async def test_whitelist_without_apps_blocks_nothing(self, allow_list):
        gateway = SimulatedBlockingGateway(authorized=True)
        outcome = await gateway.start_blocking(BlockingMode.WHITELIST, allow_list)

        assert not outcome.engaged
        assert outcome.warning == EMPTY_ALLOW_LIST_WARNING
        assert not gateway.shield.active

    @pytest.mark.asyncio
    async def test_relaxed_clears_without_permission(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        await gateway.start_blocking(BlockingMode.STRICT)
        gateway._authorized = False

        outcome = await gateway.start_blocking(BlockingMode.RELAXED)

        assert not outcome.engaged
        assert not gateway.shield.active

    @pytest.mark.asyncio
    async def test_unknown_mode_raises(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        with pytest.raises(BlockingError):
            await gateway.start_blocking("paranoid")

    @pytest.mark.asyncio
    async def test_reapply_replaces_shield(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        await gateway.start_blocking(BlockingMode.STRICT)
        await gateway.start_blocking(BlockingMode.WHITELIST, ["editor"])

        assert not gateway.shield.is_blocked("editor")


class TestStopBlocking:
    @pytest.mark.asyncio
    async def test_stop_clears(self):
        gateway = SimulatedBlockingGateway(authorized=True)
        await gateway.start_blocking(BlockingMode.STRICT)
        await gateway.stop_blocking()
        assert not gateway.shield.active

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_safe(self):
        gateway = SimulatedBlockingGateway()
        await gateway.stop_blocking()
        await gateway.stop_blocking()
        assert not gateway.shield.active
