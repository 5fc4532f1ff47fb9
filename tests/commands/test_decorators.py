"""Tests for focusguard.commands.decorators.command_wrapper."""

from __future__ import annotations

import asyncio

import pytest
import typer

from focusguard.commands.decorators import AppError, command_wrapper
from focusguard.errors import PersistenceError
from focusguard.utils.exit_codes import ERROR_GENERAL, ERROR_NOT_FOUND, ERROR_PERSISTENCE


def test_sync_result_passed_through():
    @command_wrapper
    def cmd(x):
        return x * 2

    assert cmd(21) == 42


def test_async_command_is_run():
    @command_wrapper
    async def cmd():
        await asyncio.sleep(0)
        return "done"

    assert cmd() == "done"


def test_name_preserved():
    @command_wrapper
    def show_stats():
        """Docs."""

    assert show_stats.__name__ == "show_stats"
    assert show_stats.__doc__ == "Docs."


def test_app_error_exit_code(capsys):
    @command_wrapper
    def cmd():
        raise AppError("No session is running", exit_code=ERROR_NOT_FOUND)

    with pytest.raises(typer.Exit) as exc_info:
        cmd()

    assert exc_info.value.exit_code == ERROR_NOT_FOUND
    assert "No session is running" in capsys.readouterr().out


def test_persistence_error():
    @command_wrapper
    def cmd():
        raise PersistenceError("disk full")

    with pytest.raises(typer.Exit) as exc_info:
        cmd()

    assert exc_info.value.exit_code == ERROR_PERSISTENCE


def test_unexpected_error():
    @command_wrapper
    async def cmd():
        raise RuntimeError("boom")

    with pytest.raises(typer.Exit) as exc_info:
        cmd()

    assert exc_info.value.exit_code == ERROR_GENERAL


def test_typer_exit_passes_through():
    @command_wrapper
    def cmd():
        raise typer.Exit(code=0)

    with pytest.raises(typer.Exit) as exc_info:
        cmd()

    assert exc_info.value.exit_code == 0
