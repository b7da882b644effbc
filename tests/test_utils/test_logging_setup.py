"""Tests for collectible_forecaster.utils.logging.configure_logging."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from collectible_forecaster.config import LoggingConfig
from collectible_forecaster.utils.logging import configure_logging

pytestmark = pytest.mark.usefixtures("restore_root_logger")


def test_sets_root_level() -> None:
    configure_logging(LoggingConfig(level="WARNING"))
    assert logging.getLogger().level == logging.WARNING


def test_file_handler_writes_json_lines(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "forecast.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))

    logging.getLogger("collectible_forecaster.test").info("hello %s", "world", extra={"regime": "FLOW"})
    for h in logging.getLogger().handlers:
        h.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["msg"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["regime"] == "FLOW"


def test_package_levels_override_root() -> None:
    configure_logging(
        LoggingConfig(level="INFO", levels={"collectible_forecaster.backtest": "DEBUG"})
    )
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("collectible_forecaster.backtest").level == logging.DEBUG
    assert all(h.level == logging.NOTSET for h in logging.getLogger().handlers)
    logging.getLogger("collectible_forecaster.backtest").setLevel(logging.NOTSET)


def test_text_format_timestamps_are_utc(tmp_path: Path) -> None:
    log_file = tmp_path / "forecast.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))

    logging.getLogger("collectible_forecaster.test").warning("valve tripped")
    for h in logging.getLogger().handlers:
        h.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert line.endswith("[WARNING] collectible_forecaster.test: valve tripped")
    assert line[:20].endswith("Z")
