"""
Logging setup for the Collectible Forecaster CLI.

Library modules only create loggers (``logging.getLogger(__name__)``); the
engine never installs handlers. ``configure_logging`` is for the CLI and
other top-level callers.

What the engine logs:
  DEBUG    sanitizer removals, fitted Holt-Winters parameters, ensemble
           weights, per-engine drift / spread / decay inputs
  INFO     one summary line per full forecast
  WARNING  sanitizer safety valve tripped

Per-package levels
------------------
``[logging.levels]`` raises or lowers individual loggers without touching
the root level, e.g. to trace only the ensemble weighting::

    [logging.levels]
    "collectible_forecaster.backtest" = "DEBUG"

Handlers carry no level of their own, so a DEBUG package logger still reaches
the console under an INFO root.

JSON lines (``json_format = true``)::

    {"ts": "2026-02-24T15:00:00Z", "level": "INFO", "logger": "...", "msg": "..."}

Values passed via ``extra=`` appear as additional top-level keys.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collectible_forecaster.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes present on every LogRecord; anything else came from ``extra=``.
_STANDARD_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def level_number(name: str) -> int:
    """``"debug"`` → ``logging.DEBUG``; unknown names fall back to INFO."""
    return getattr(logging, name.upper(), logging.INFO)


class _UtcFormatter(logging.Formatter):
    converter = time.gmtime


class _JsonFormatter(_UtcFormatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg`` plus extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": self.formatTime(record, LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def _build_handlers(config: "LoggingConfig") -> list[logging.Handler]:
    formatter: logging.Formatter = (
        _JsonFormatter() if config.json_format
        else _UtcFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    )

    # stderr keeps stdout clean for ``predict --json``.
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig") -> None:
    """Install console (and optional file) handlers on the root logger.

    Args:
        config: Logging section of ``AppConfig``.
    """
    logging.basicConfig(
        level=level_number(config.level), handlers=_build_handlers(config), force=True
    )
    for name, level in config.levels.items():
        logging.getLogger(name).setLevel(level_number(level))
