"""
Tests for collectible_forecaster.config.

What we test
------------
1. AppConfig() defaults match config/default.toml.
2. Sub-config validators reject out-of-range values.
3. load_config() reads an explicit TOML file and deep-merges local.toml.
4. COLLECTIBLE_FORECASTER_* environment overrides.
5. Missing config file → FileNotFoundError.
6. The committed config/default.toml loads cleanly.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from collectible_forecaster.config import (
    AppConfig,
    BacktestConfig,
    ForecastConfig,
    LoggingConfig,
    SanitizerConfig,
    SimulationConfig,
    load_config,
)

_ENV_VARS = (
    "COLLECTIBLE_FORECASTER_LOG_LEVEL",
    "COLLECTIBLE_FORECASTER_SEED",
    "COLLECTIBLE_FORECASTER_NUM_PATHS",
    "COLLECTIBLE_FORECASTER_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── Defaults ──────────────────────────────────────────────────────────────────

def test_app_config_defaults() -> None:
    cfg = AppConfig()
    assert cfg.sanitizer.snipe_ratio == pytest.approx(0.5)
    assert cfg.sanitizer.outlier_ratio == pytest.approx(3.0)
    assert cfg.sanitizer.max_removal_fraction == pytest.approx(0.7)
    assert cfg.simulation.num_paths == 500
    assert cfg.simulation.use_fat_tails is True
    assert cfg.simulation.degrees_of_freedom == 4
    assert cfg.simulation.seed is None
    assert cfg.backtest.holdout_points == 14
    assert cfg.backtest.min_history_points == 30
    assert cfg.forecast.default_prediction_days == 30
    assert cfg.forecast.min_points == 5
    assert cfg.logging.level == "INFO"
    assert cfg.debug is False


def test_app_config_is_frozen() -> None:
    cfg = AppConfig()
    with pytest.raises(ValidationError):
        cfg.debug = True  # type: ignore[misc]


def test_committed_default_toml_loads() -> None:
    cfg = load_config()
    assert cfg.simulation.num_paths == 500
    assert cfg.forecast.min_points == 5


# ── Validators ────────────────────────────────────────────────────────────────

class TestValidators:
    def test_snipe_ratio_must_be_fraction(self):
        with pytest.raises(ValidationError, match="snipe_ratio"):
            SanitizerConfig(snipe_ratio=1.5)

    def test_outlier_ratio_must_exceed_one(self):
        with pytest.raises(ValidationError, match="outlier_ratio"):
            SanitizerConfig(outlier_ratio=0.9)

    def test_max_removal_fraction_bounds(self):
        with pytest.raises(ValidationError, match="max_removal_fraction"):
            SanitizerConfig(max_removal_fraction=0.0)
        assert SanitizerConfig(max_removal_fraction=1.0).max_removal_fraction == 1.0

    def test_num_paths_positive(self):
        with pytest.raises(ValidationError, match="num_paths"):
            SimulationConfig(num_paths=0)

    def test_degrees_of_freedom_above_two(self):
        with pytest.raises(ValidationError, match="degrees_of_freedom"):
            SimulationConfig(degrees_of_freedom=2)

    def test_backtest_sizes_positive(self):
        with pytest.raises(ValidationError):
            BacktestConfig(holdout_points=0)

    def test_forecast_sizes_positive(self):
        with pytest.raises(ValidationError):
            ForecastConfig(min_points=0)

    def test_log_level_normalised_to_upper(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_log_level_rejects_unknown(self):
        with pytest.raises(ValidationError, match="Log level"):
            LoggingConfig(level="LOUD")


# ── Loader ────────────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_explicit_file(self, tmp_path: Path):
        path = _write_toml(tmp_path / "cfg.toml", "[simulation]\nnum_paths = 50\nseed = 3\n")
        cfg = load_config(path)
        assert cfg.simulation.num_paths == 50
        assert cfg.simulation.seed == 3
        # Unspecified sections keep their defaults.
        assert cfg.sanitizer.snipe_ratio == pytest.approx(0.5)

    def test_local_toml_deep_merged(self, tmp_path: Path):
        path = _write_toml(
            tmp_path / "cfg.toml",
            "[simulation]\nnum_paths = 50\nuse_fat_tails = true\n",
        )
        _write_toml(tmp_path / "local.toml", "[simulation]\nuse_fat_tails = false\n")
        cfg = load_config(path)
        assert cfg.simulation.num_paths == 50
        assert cfg.simulation.use_fat_tails is False

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        path = _write_toml(tmp_path / "cfg.toml", "[logging]\nlevel = \"INFO\"\n")
        monkeypatch.setenv("COLLECTIBLE_FORECASTER_LOG_LEVEL", "warning")
        monkeypatch.setenv("COLLECTIBLE_FORECASTER_SEED", "99")
        monkeypatch.setenv("COLLECTIBLE_FORECASTER_NUM_PATHS", "25")
        monkeypatch.setenv("COLLECTIBLE_FORECASTER_DEBUG", "true")
        cfg = load_config(path)
        assert cfg.logging.level == "WARNING"
        assert cfg.simulation.seed == 99
        assert cfg.simulation.num_paths == 25
        assert cfg.debug is True

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_values_raise(self, tmp_path: Path):
        path = _write_toml(tmp_path / "cfg.toml", "[simulation]\ndegrees_of_freedom = 1\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_logger_levels_table(self, tmp_path: Path):
        path = _write_toml(
            tmp_path / "cfg.toml",
            '[logging.levels]\n"collectible_forecaster.backtest" = "debug"\n',
        )
        cfg = load_config(path)
        assert cfg.logging.levels == {"collectible_forecaster.backtest": "DEBUG"}


def test_logger_levels_reject_unknown() -> None:
    with pytest.raises(ValidationError, match="Log level"):
        LoggingConfig(levels={"collectible_forecaster": "CHATTY"})
