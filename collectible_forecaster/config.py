"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``: committed static defaults
  2. ``config/local.toml``: optional local overrides (gitignored)
  3. ``.env``: local overrides (gitignored)
  4. Environment variables: ``COLLECTIBLE_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The forecasting engine itself never calls ``load_config()``. Callers pass an
``AppConfig`` (or nothing, which means ``AppConfig()`` defaults) into
``generate_full_prediction(settings=...)`` so every call is reproducible
from its arguments alone.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class SanitizerConfig(BaseModel):
    """Snipe / outlier filtering thresholds, relative to the reference value."""

    model_config = ConfigDict(frozen=True)

    snipe_ratio: float = 0.5
    outlier_ratio: float = 3.0
    max_removal_fraction: float = 0.7

    @model_validator(mode="after")
    def validate_ratios(self) -> "SanitizerConfig":
        if not 0.0 < self.snipe_ratio < 1.0:
            raise ValueError(f"snipe_ratio must be in (0.0, 1.0), got {self.snipe_ratio}.")
        if self.outlier_ratio <= 1.0:
            raise ValueError(f"outlier_ratio must be > 1.0, got {self.outlier_ratio}.")
        if not 0.0 < self.max_removal_fraction <= 1.0:
            raise ValueError(
                f"max_removal_fraction must be in (0.0, 1.0], got {self.max_removal_fraction}."
            )
        return self


class SimulationConfig(BaseModel):
    """Monte Carlo simulation settings."""

    model_config = ConfigDict(frozen=True)

    num_paths: int = 500
    use_fat_tails: bool = True
    degrees_of_freedom: int = 4
    seed: Optional[int] = None

    @field_validator("num_paths")
    @classmethod
    def validate_num_paths(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"num_paths must be >= 1, got {v}.")
        return v

    @field_validator("degrees_of_freedom")
    @classmethod
    def validate_dof(cls, v: int) -> int:
        # df <= 2 has infinite variance, so the shocks cannot be normalised.
        if v <= 2:
            raise ValueError(f"degrees_of_freedom must be > 2, got {v}.")
        return v


class BacktestConfig(BaseModel):
    """Hold-out backtest parameters used to weight the Flow ensemble."""

    model_config = ConfigDict(frozen=True)

    holdout_points: int = 14
    min_history_points: int = 30
    backtest_paths: int = 100

    @field_validator("holdout_points", "min_history_points", "backtest_paths")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Backtest sizes must be >= 1, got {v}.")
        return v


class ForecastConfig(BaseModel):
    """Forecast horizon and minimum-data settings."""

    model_config = ConfigDict(frozen=True)

    default_prediction_days: int = 30
    min_points: int = 5

    @field_validator("default_prediction_days", "min_points")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _check_level(v: str) -> str:
    if v.upper() not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {sorted(LOG_LEVELS)}, got '{v}'.")
    return v.upper()


class LoggingConfig(BaseModel):
    """Logging output settings.

    ``debug = true`` at the top level of the config forces ``level`` to DEBUG
    when the CLI configures logging.
    """

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False
    levels: dict[str, str] = Field(default_factory=dict)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        return _check_level(v)

    @field_validator("levels")
    @classmethod
    def validate_levels(cls, v: dict[str, str]) -> dict[str, str]:
        """Per-logger overrides, e.g. ``{"collectible_forecaster.backtest": "DEBUG"}``."""
        return {name: _check_level(level) for name, level in v.items()}


class AppConfig(BaseModel):
    """Complete application configuration; the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env, or directly
    as ``AppConfig()`` for library use and tests.
    """

    model_config = ConfigDict(frozen=True)

    sanitizer: SanitizerConfig = SanitizerConfig()
    simulation: SimulationConfig = SimulationConfig()
    backtest: BacktestConfig = BacktestConfig()
    forecast: ForecastConfig = ForecastConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PACKAGE_DIR = Path(__file__).resolve().parent
_ENV_PREFIX = "COLLECTIBLE_FORECASTER_"


def _parse_bool(text: str) -> bool:
    return text.strip().lower() in ("1", "true", "yes", "on")


# Env suffix → (path into the raw TOML dict, parser).
_ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "LOG_LEVEL": (("logging", "level"), str),
    "SEED": (("simulation", "seed"), int),
    "NUM_PATHS": (("simulation", "num_paths"), int),
    "DEBUG": (("debug",), _parse_bool),
}


def _find_project_root() -> Path:
    """First ancestor of the package holding ``pyproject.toml`` (else the package's parent)."""
    for candidate in (_PACKAGE_DIR, *_PACKAGE_DIR.parents[:4]):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return _PACKAGE_DIR.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = dict(base)
    for key, val in override.items():
        if isinstance(result.get(key), dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``COLLECTIBLE_FORECASTER_*`` variables onto the raw config dict.

    Supported: ``_LOG_LEVEL``, ``_SEED``, ``_NUM_PATHS``, ``_DEBUG``. Unset or
    empty variables leave the TOML value in place.
    """
    for suffix, (path, parse) in _ENV_OVERRIDES.items():
        text = os.environ.get(f"{_ENV_PREFIX}{suffix}")
        if not text:
            continue
        section = raw
        for key in path[:-1]:
            section = section.setdefault(key, {})
        section[path[-1]] = parse(text)
    return raw


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``. A ``local.toml`` next to
            it is merged on top when present.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If merged config values fail validation.
        ValueError: If an environment override cannot be parsed.
    """
    root = _find_project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    raw = _read_toml(path)
    local_path = path.parent / "local.toml"
    if local_path.exists():
        raw = _deep_merge(raw, _read_toml(local_path))

    return AppConfig.model_validate(_apply_env_overrides(raw))
