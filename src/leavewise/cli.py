"""Typer CLI for the Leave Optimizer."""

from __future__ import annotations

import datetime
import json
import pathlib
import sys

import typer
from loguru import logger

from leavewise.days import is_weekend
from leavewise.errors import ExtractionError, ExtractionErrorKind
from leavewise.extract import HolidayExtractor, ParsedHoliday
from leavewise.holidays import PRESETS, get_holidays
from leavewise.optimizer import (
    LeaveOptimizer,
    OptimizationResult,
    format_calendar_view,
    format_result,
)

app = typer.Typer(
    name="leavewise",
    help="Leave Optimizer — find the leave days that turn holidays into the "
    "longest breaks.",
    add_completion=False,
)

_EXTRACTION_ADVICE: dict[ExtractionErrorKind, str] = {
    ExtractionErrorKind.NO_DATES: "Add the holidays with --holiday instead.",
    ExtractionErrorKind.SCANNED_PDF: "Run OCR on the document first, or use --holiday.",
    ExtractionErrorKind.WORKER_FAILED: "Re-export the document, or use --holiday.",
    ExtractionErrorKind.UNSUPPORTED_FORMAT: "Save the holiday list as a plain-text or PDF file.",
    ExtractionErrorKind.PARSE_ERROR: "Make sure the file is UTF-8 encoded text.",
}


def _setup_logging(debug: bool = False) -> None:
    """Send log records to stderr; DEBUG with --debug, otherwise warnings only."""
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level="DEBUG" if debug else "WARNING",
        colorize=True,
    )
    logger.enable("leavewise")


def _parse_date(value: str) -> datetime.date:
    """Parse a YYYY-MM-DD date string."""
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date format {value!r}. Use YYYY-MM-DD.") from None


def _current_year() -> int:
    return datetime.date.today().year


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Config and holiday sources
# ---------------------------------------------------------------------------


def _load_config(path: str) -> dict[str, object]:
    """Load a JSON config file holding default option values."""
    p = pathlib.Path(path)
    if not p.exists():
        raise _fail(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text())
    except json.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON in config file: {exc}") from None

    if not isinstance(data, dict):
        raise _fail("Config file must contain a JSON object.")

    logger.debug(f"Loaded config {path}: {sorted(data)}")
    return data


def _config_int(value: object, key: str, minimum: int | None = None) -> int:
    """Check an integer setting that may have come from the config file."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(f"'{key}' in the config file must be a whole number, got {value!r}.")
    if minimum is not None and value < minimum:
        raise _fail(f"'{key}' must be at least {minimum}, got {value}.")
    return value


def _config_str(value: object, key: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise _fail(f"'{key}' in the config file must be a string, got {value!r}.")
    return value


def _config_flag(data: dict[str, object], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise _fail(f"'{key}' in the config file must be true or false, got {value!r}.")
    return value


def _config_dates(data: dict[str, object]) -> list[datetime.date]:
    """Parse the config file's extra ``holidays`` list of YYYY-MM-DD strings."""
    extra = data.get("holidays", [])
    if not isinstance(extra, list):
        raise _fail("'holidays' in the config file must be a list of dates.")
    dates = []
    for h in extra:
        if not isinstance(h, str):
            raise _fail(f"'holidays' in the config file must hold YYYY-MM-DD strings, got {h!r}.")
        dates.append(_parse_date(h))
    return dates


def _read_holidays_file(path: str, year: int | None) -> list[ParsedHoliday]:
    """Extract holidays from a document, exiting with advice on failure."""
    p = pathlib.Path(path)
    if not p.exists():
        raise _fail(f"Holidays file not found: {path}")

    window = None
    if year is not None:
        window = (datetime.date(year, 1, 1), datetime.date(year, 12, 31))

    try:
        return HolidayExtractor(window=window).extract(p.read_bytes(), p.name)
    except ExtractionError as exc:
        typer.echo(f"Error: {exc}", err=True)
        typer.echo(f"  {_EXTRACTION_ADVICE[exc.kind]}", err=True)
        raise typer.Exit(code=1) from None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    _setup_logging(debug)


@app.command()
def optimize(
    budget: int = typer.Option(
        None,
        "--budget",
        "-b",
        help="Number of leave days available.",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year for holiday presets and documents. Defaults to the current year.",
    ),
    country: str | None = typer.Option(
        None,
        "--country",
        "-c",
        help=f"Holiday preset ({', '.join(sorted(PRESETS))}). Use 'none' to skip. "
        "Defaults to 'us'.",
    ),
    holiday: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--holiday",
        "-H",
        help="Additional holiday date (YYYY-MM-DD). Repeatable.",
    ),
    holidays_file: str | None = typer.Option(
        None,
        "--holidays-file",
        help="Text or PDF document listing holidays to add.",
    ),
    prefer_longer: bool = typer.Option(
        False,
        "--prefer-longer",
        help="Rank by break length instead of days off per leave day.",
    ),
    sandwich_rule: bool = typer.Option(
        False,
        "--sandwich-rule",
        help="Accepted for compatibility; has no effect on the result.",
    ),
    max_consecutive: int | None = typer.Option(
        None,
        "--max-consecutive",
        help="Most consecutive working days one vacation may use (default 3).",
        min=1,
    ),
    seed_window: int | None = typer.Option(
        None,
        "--seed-window",
        help="Working days considered on each side of a holiday (default 3).",
        min=0,
    ),
    calendar: bool = typer.Option(
        True,
        "--calendar/--no-calendar",
        help="Show month-by-month calendar view.",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output results as JSON.",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        help="Path to a JSON config file with default option values.",
    ),
) -> None:
    """Recommend leave days that bridge holidays and weekends."""
    data = _load_config(config) if config is not None else {}

    def pick(value: object, key: str, default: object) -> object:
        if value is not None:
            return value
        return data.get(key, default)

    resolved_budget = pick(budget, "budget", None)
    if resolved_budget is None:
        raise _fail("--budget is required (or set 'budget' in --config).")

    resolved_budget = _config_int(resolved_budget, "budget")
    resolved_year = _config_int(pick(year, "year", _current_year()), "year", minimum=1)
    resolved_country = _config_str(pick(country, "country", "us"), "country")

    holidays: list[datetime.date] = []
    holiday_names: dict[datetime.date, str] = {}

    if resolved_country and resolved_country != "none":
        try:
            preset = get_holidays(resolved_country, resolved_year)
        except KeyError as exc:
            raise _fail(str(exc.args[0])) from None
        for d, name in preset:
            holidays.append(d)
            holiday_names[d] = name

    holidays.extend(_config_dates(data))
    for h in holiday or []:
        holidays.append(_parse_date(h))

    doc_path = _config_str(pick(holidays_file, "holidays_file", None), "holidays_file")
    if doc_path is not None:
        for parsed in _read_holidays_file(doc_path, resolved_year):
            holidays.append(parsed.date)
            if parsed.name:
                holiday_names.setdefault(parsed.date, parsed.name)

    holidays = sorted(set(holidays))

    optimizer = LeaveOptimizer(
        holidays,
        resolved_budget,
        sandwich_rule=sandwich_rule or _config_flag(data, "sandwich_rule"),
        prefer_longer=prefer_longer or _config_flag(data, "prefer_longer"),
        seed_window=_config_int(pick(seed_window, "seed_window", 3), "seed_window", minimum=0),
        max_consecutive_leave=_config_int(
            pick(max_consecutive, "max_consecutive", 3), "max_consecutive", minimum=1
        ),
    )
    result = optimizer.optimize()

    if output_json:
        _print_json(result, optimizer)
    else:
        _print_text(result, optimizer, holiday_names, calendar)


def _print_text(
    result: OptimizationResult,
    optimizer: LeaveOptimizer,
    holiday_names: dict[datetime.date, str],
    show_calendar: bool,
) -> None:
    w = 64
    typer.echo("=" * w)
    typer.echo("  LEAVE OPTIMIZER")
    typer.echo("=" * w)
    typer.echo(f"  Leave budget:      {optimizer.total_leaves} days")
    typer.echo(f"  Company holidays:  {len(optimizer.holidays)}")
    typer.echo()
    for h in sorted(optimizer.holidays):
        name = holiday_names.get(h, h.strftime("%b %d"))
        typer.echo(f"    {h.strftime('%a, %b %d'):>12}  {name}")

    typer.echo(format_result(result, optimizer))
    if show_calendar:
        typer.echo(format_calendar_view(result, optimizer))

    typer.echo()
    typer.echo("=" * w)
    n = result.total_vacations
    typer.echo(f"  Found {n} vacation{'s' if n != 1 else ''}.")
    typer.echo("=" * w)


def _serialize_result(result: OptimizationResult) -> dict[str, object]:
    return {
        "recommendations": [
            {
                "leave_dates": [d.isoformat() for d in r.leave_dates],
                "start_date": r.start_date.isoformat(),
                "end_date": r.end_date.isoformat(),
                "total_days": r.total_days,
                "leaves_used": r.leaves_used,
                "description": r.description,
            }
            for r in result.recommendations
        ],
        "optimized_leaves": [d.isoformat() for d in result.optimized_leaves],
        "total_vacations": result.total_vacations,
        "longest_break": result.longest_break,
        "leaves_remaining": result.leaves_remaining,
    }


def _print_json(result: OptimizationResult, optimizer: LeaveOptimizer) -> None:
    output = {
        "total_leaves": optimizer.total_leaves,
        "prefer_longer": optimizer.prefer_longer,
        "holidays": [h.isoformat() for h in sorted(optimizer.holidays)],
        "result": _serialize_result(result),
    }
    json.dump(output, sys.stdout, indent=2)
    typer.echo()


@app.command()
def holidays(
    country: str = typer.Option(
        "us",
        "--country",
        "-c",
        help=f"Country preset ({', '.join(sorted(PRESETS))}).",
    ),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Year to list holidays for. Defaults to the current year.",
    ),
) -> None:
    """List holidays for a country preset, flagging the ones on a weekend."""
    resolved_year = year if year is not None else _current_year()

    try:
        preset = get_holidays(country, resolved_year)
    except KeyError as exc:
        raise _fail(str(exc.args[0])) from None

    typer.echo(f"  {PRESETS[country]} — {resolved_year}")
    typer.echo()
    on_weekend = 0
    for d, name in preset:
        marker = ""
        if is_weekend(d):
            on_weekend += 1
            marker = "  (weekend)"
        typer.echo(f"    {d.strftime('%a, %b %d'):>12}  {name}{marker}")
    typer.echo()
    typer.echo(f"  {len(preset) - on_weekend} of {len(preset)} fall on a working day.")


@app.command()
def extract(
    path: str = typer.Argument(..., help="Text or PDF document listing holidays."),
    year: int = typer.Option(
        None,
        "--year",
        "-y",
        help="Only keep holidays in this year.",
    ),
) -> None:
    """Show the holidays found in a document."""
    found = _read_holidays_file(path, year)
    typer.echo(f"  Found {len(found)} holiday{'s' if len(found) != 1 else ''} in {path}")
    typer.echo()
    for h in found:
        typer.echo(f"    {h.date.isoformat()}  {h.date.strftime('%a')}  {h.name or ''}".rstrip())


def main() -> None:
    """Entry point for the CLI."""
    app()
