"""
Collectible Forecaster CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action.
  5. Report result to stdout.

The CLI is a thin caller of the engine: the engine itself reads no files and
no environment variables.

Install and run::

    pip install -e .
    collectible-forecaster --help
    collectible-forecaster validate-config
    collectible-forecaster predict history.json --seed 42 --days 14

Input file format (``predict``)::

    {
      "series": [{"price": 1000, "time": 1767225600, "volume": 3}, ...],
      "config": {"sellers": 20, "demand": 3, "trend": 3, "rap": 1100, "value": 1000}
    }

A bare JSON list is accepted as the series with default fundamentals.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="collectible-forecaster",
    help="Regime-switching price forecaster for illiquid collectibles.",
    add_completion=False,
)


class OutputShape(StrEnum):
    FULL = "full"
    BANDS = "bands"
    PREDICTED = "predicted"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from collectible_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config; ``debug = true`` forces DEBUG."""
    from collectible_forecaster.utils.logging import configure_logging

    logging_config = config.logging
    if config.debug:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(logging_config)


def _read_input_or_exit(input_file: Path) -> tuple[Any, dict[str, Any]]:
    """Return ``(series, config_dict)`` from a forecast input file."""
    if not input_file.exists():
        typer.echo(f"[ERROR] Input file not found: {input_file}", err=True)
        raise typer.Exit(code=1)

    try:
        payload = json.loads(input_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] Invalid JSON in {input_file}: {exc}", err=True)
        raise typer.Exit(code=1)

    if isinstance(payload, list):
        return payload, {}
    if isinstance(payload, dict) and "series" in payload:
        return payload["series"], dict(payload.get("config") or {})

    typer.echo(
        "[ERROR] Input must be a JSON list of price points or an object "
        "with a 'series' key.",
        err=True,
    )
    raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    seed = config.simulation.seed if config.simulation.seed is not None else "(random)"
    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Monte Carlo paths: {config.simulation.num_paths}")
    typer.echo(f"  Fat tails:         {config.simulation.use_fat_tails} "
               f"(df={config.simulation.degrees_of_freedom})")
    typer.echo(f"  Seed:              {seed}")
    typer.echo(f"  Backtest holdout:  {config.backtest.holdout_points} points")
    typer.echo(f"  Default horizon:   {config.forecast.default_prediction_days} days")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("predict")
def predict(
    input_file: Path = typer.Argument(
        ...,
        help="JSON file with 'series' (and optional 'config') fields.",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for a reproducible Monte Carlo run (overrides config).",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        min=1,
        help="Forecast horizon in days (overrides the input config).",
    ),
    shape: OutputShape = typer.Option(
        OutputShape.FULL,
        "--shape",
        case_sensitive=False,
        help="full = bands + metrics, bands = three bands only, predicted = median only.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Emit JSON instead of the ASCII summary.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Forecast the price of one asset from a JSON history file."""
    from pydantic import ValidationError

    from collectible_forecaster.pipeline.orchestrator import generate_full_prediction
    from collectible_forecaster.reporting.formatters import format_prediction_summary
    from collectible_forecaster.simulation.rng import make_rng

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    series, fundamentals = _read_input_or_exit(input_file)
    if days is not None:
        fundamentals["prediction_days"] = days

    rng = make_rng(seed) if seed is not None else None
    try:
        result = generate_full_prediction(series, fundamentals, rng=rng, settings=config)
    except (ValidationError, TypeError) as exc:
        typer.echo(f"[ERROR] Invalid forecast input: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        if shape is OutputShape.FULL:
            typer.echo(result.model_dump_json(indent=2))
        elif shape is OutputShape.BANDS:
            typer.echo(result.model_dump_json(
                indent=2, include={"predicted", "upper_band", "lower_band"}
            ))
        else:
            typer.echo(result.model_dump_json(indent=2, include={"predicted"}))
        return

    last_price = None
    usable = [p for p in series if isinstance(p, dict) and p.get("price")]
    if usable:
        last_price = float(usable[-1]["price"])
    typer.echo(format_prediction_summary(
        result, last_price=last_price, show_factors=shape is OutputShape.FULL
    ))

    if result.is_empty:
        typer.echo("")
        typer.echo("[WARN] Not enough usable data for a forecast.")
        return
    typer.echo("")
    typer.echo(f"[OK] {len(result)}-day forecast generated ({result.regime}).")
