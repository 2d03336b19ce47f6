"""Primary Typer application for the astroevents CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import typer
import yaml
from pydantic import BaseModel

from astroevents.analysis import (
    lunar_year,
    natal_transits,
    perigee_year,
    phase_returns,
    retrograde_year,
    swiss_session_factory,
)
from astroevents.analysis.batch import SessionFactory
from astroevents.boot import configure_logging
from astroevents.config import (
    Settings,
    config_path,
    default_settings,
    load_settings,
    save_settings,
)
from astroevents.exceptions import ConfigurationError
from astroevents.observability import ensure_metrics_registered

app = typer.Typer(help="Astronomical event search (perigees, stations, phases).")
config_app = typer.Typer(help="Inspect and initialise the settings file.")
app.add_typer(config_app, name="config")


class _State:
    config: Optional[Path] = None


_STATE = _State()


def _settings() -> Settings:
    try:
        return load_settings(_STATE.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        typer.secho(f"Unable to load settings: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from exc


def _session_factory(settings: Settings) -> SessionFactory:
    return swiss_session_factory(settings.ephemeris)


def _split_bodies(values: Optional[List[str]]) -> Optional[list[str]]:
    if not values:
        return None
    tokens: list[str] = []
    for entry in values:
        for token in str(entry).replace(",", " ").split():
            cleaned = token.strip().lower()
            if cleaned:
                tokens.append(cleaned)
    return list(dict.fromkeys(tokens)) or None


def _run(label: str, compute: Callable[[], BaseModel], output: Optional[Path]) -> None:
    try:
        report = compute()
    except ConfigurationError as exc:
        typer.secho(f"Ephemeris unavailable: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2) from exc
    except ValueError as exc:
        typer.secho(f"{label} failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc

    payload = report.model_dump_json(indent=2)
    if output is None:
        typer.echo(payload)
        return
    try:
        output.write_text(payload, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors reported at runtime
        typer.secho(f"Unable to write JSON output: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    typer.secho(f"Wrote {label} report to {output}", fg=typer.colors.GREEN, err=True)


_OUTPUT = typer.Option(None, "--output", "-o", help="Write the JSON report to this file.")
_BODIES = typer.Option(
    None, "--body", "--bodies", help="Bodies to evaluate (repeatable, comma separated)."
)
_WORKERS = typer.Option(
    None, "--workers", min=1, max=8, help="Worker threads across bodies."
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None, "--config", help="Settings file (defaults to $ASTROEVENTS_HOME/config.yaml)."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (overrides ASTROEVENTS_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before executing subcommands."""

    configure_logging(level=log_level)
    ensure_metrics_registered()
    _STATE.config = config
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("perigees")
def perigees_command(
    year: int = typer.Argument(..., help="Calendar year (1900-2050)."),
    bodies: Optional[List[str]] = _BODIES,
    workers: Optional[int] = _WORKERS,
    output: Optional[Path] = _OUTPUT,
) -> None:
    """List the perigees of the Sun, planets and Chiron in YEAR."""

    settings = _settings()
    _run(
        "Perigee search",
        lambda: perigee_year(
            year,
            bodies=_split_bodies(bodies),
            settings=settings,
            session_factory=_session_factory(settings),
            workers=workers,
        ),
        output,
    )


@app.command("retrograde")
def retrograde_command(
    year: int = typer.Argument(..., help="Calendar year (1900-2050)."),
    bodies: Optional[List[str]] = _BODIES,
    workers: Optional[int] = _WORKERS,
    output: Optional[Path] = _OUTPUT,
) -> None:
    """List retrograde windows and stations in YEAR."""

    settings = _settings()
    _run(
        "Retrograde search",
        lambda: retrograde_year(
            year,
            bodies=_split_bodies(bodies),
            settings=settings,
            session_factory=_session_factory(settings),
            workers=workers,
        ),
        output,
    )


@app.command("lunar")
def lunar_command(
    year: int = typer.Argument(..., help="Calendar year (1900-2050)."),
    output: Optional[Path] = _OUTPUT,
) -> None:
    """Lunar perigees/apogees of YEAR with super and mini new/full moons."""

    settings = _settings()
    _run(
        "Lunar search",
        lambda: lunar_year(
            year, settings=settings, session_factory=_session_factory(settings)
        ),
        output,
    )


@app.command("phase-returns")
def phase_returns_command(
    birth: str = typer.Option(
        ..., "--birth", help="Birth instant (ISO-8601, e.g. 1999-11-18T20:10:00+01:00)."
    ),
    year: Optional[int] = typer.Option(None, "--year", help="Search the whole UTC year."),
    start: Optional[str] = typer.Option(None, "--start", help="Search start (ISO-8601)."),
    end: Optional[str] = typer.Option(None, "--end", help="Search end (ISO-8601)."),
    step_hours: Optional[float] = typer.Option(
        None, "--step-hours", help="Scan cadence in hours (clamped to 1-24)."
    ),
    tolerance_deg: Optional[float] = typer.Option(
        None, "--tolerance-deg", help="Maximum residual in degrees (clamped to 0.01-5)."
    ),
    output: Optional[Path] = _OUTPUT,
) -> None:
    """Find returns of the Sun-Moon phase angle to its natal value."""

    settings = _settings()
    _run(
        "Phase return search",
        lambda: phase_returns(
            birth,
            start=start,
            end=end,
            year=year,
            step_hours=step_hours,
            tolerance_deg=tolerance_deg,
            settings=settings,
            session_factory=_session_factory(settings),
        ),
        output,
    )


@app.command("natal-transits")
def natal_transits_command(
    birth_date: str = typer.Argument(..., help="Birth date (YYYY-MM-DD)."),
    bodies: Optional[List[str]] = _BODIES,
    workers: Optional[int] = _WORKERS,
    output: Optional[Path] = _OUTPUT,
) -> None:
    """Prenatal crossings of the slow bodies' natal longitudes."""

    settings = _settings()
    _run(
        "Natal transit search",
        lambda: natal_transits(
            birth_date,
            bodies=_split_bodies(bodies),
            settings=settings,
            session_factory=_session_factory(settings),
            workers=workers,
        ),
        output,
    )


@config_app.command("path")
def config_path_command() -> None:
    """Print the settings file location."""

    typer.echo(str(_STATE.config or config_path()))


@config_app.command("show")
def config_show_command() -> None:
    """Print the effective settings as YAML."""

    settings = _settings()
    typer.echo(
        yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False, allow_unicode=True)
    )


@config_app.command("init")
def config_init_command(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write the default settings file."""

    target = _STATE.config or config_path()
    if target.exists() and not force:
        typer.secho(f"{target} already exists (use --force to overwrite).", fg=typer.colors.YELLOW)
        raise typer.Exit(1)
    save_settings(default_settings(), target)
    typer.secho(f"Wrote default settings to {target}", fg=typer.colors.GREEN)
