"""Tests for structlog/stdlib logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from varsync.config.logging import configure_logging


class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("flags", "level"),
        [
            ({}, logging.WARNING),
            ({"verbose": True}, logging.DEBUG),
            ({"quiet": True}, logging.ERROR),
            ({"verbose": True, "quiet": True}, logging.DEBUG),
        ],
    )
    def test_levels(self, flags: dict[str, bool], level: int) -> None:
        configure_logging(**flags)
        assert logging.getLogger("varsync").level == level

    def test_single_stderr_handler(self) -> None:
        configure_logging()
        configure_logging()
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_json_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        structlog.get_logger("varsync.sync.engine").warning("sync.tick_skipped", errors="x: bad")
        err = capsys.readouterr().err
        assert '"event": "sync.tick_skipped"' in err
        assert '"errors": "x: bad"' in err

    def test_debug_hidden_by_default(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging()
        structlog.get_logger("varsync.sync.engine").debug("sync.store_write")
        assert "sync.store_write" not in capsys.readouterr().err
