"""Tests for the application logger utility."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

import focusguard.utils.logger as logger_mod
from focusguard.utils.logger import get_logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset the logger singleton and its handlers around each test."""
    original = logger_mod._logger
    original_handlers = list(logging.getLogger("focusguard").handlers)
    logger_mod._logger = None
    logging.getLogger("focusguard").handlers.clear()

    yield

    for handler in logging.getLogger("focusguard").handlers:
        handler.close()
    logging.getLogger("focusguard").handlers[:] = original_handlers
    logger_mod._logger = original


def test_log_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSGUARD_LOG_DIR", str(tmp_path / "logs"))

    logger = get_logger()

    assert (tmp_path / "logs" / "focusguard.log").exists()
    assert logger.name == "focusguard"
    assert logger.propagate is False


def test_platform_log_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("FOCUSGUARD_LOG_DIR", raising=False)
    with patch("focusguard.utils.logger.user_log_dir", return_value=str(tmp_path)):
        get_logger()

    assert (tmp_path / "focusguard.log").exists()


def test_singleton(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSGUARD_LOG_DIR", str(tmp_path))
    assert get_logger() is get_logger()
    assert len(logging.getLogger("focusguard").handlers) == 1


def test_module_loggers_are_children(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSGUARD_LOG_DIR", str(tmp_path))

    child = get_logger("focusguard.services.timer_core")

    assert child.name == "focusguard.services.timer_core"
    assert child.parent is get_logger()


def test_messages_reach_the_file(tmp_path, monkeypatch):
    monkeypatch.setenv("FOCUSGUARD_LOG_DIR", str(tmp_path))

    get_logger("focusguard.storage").warning("history unreadable")
    for handler in get_logger().handlers:
        handler.flush()

    text = (tmp_path / "focusguard.log").read_text()
    assert "WARNING" in text
    assert "[focusguard.storage] history unreadable" in text
