"""Command-line interface for gridcalc."""

from __future__ import annotations

from pathlib import Path

import click

from gridcalc import __version__
from gridcalc.errors import GridError
from gridcalc.logging.events import EventType


@click.group()
@click.version_option(version=__version__, prog_name="gridcalc")
def main() -> None:
    """gridcalc -- compute a comma-separated sheet and print it as a table."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _load_config(config_path: str | None, sheet_path: Path) -> dict:
    from gridcalc.config import load_config

    try:
        return load_config(Path(config_path) if config_path else sheet_path.parent)
    except GridError as e:
        raise click.ClickException(str(e))


# ---------------------------------------------------------------------------
# Compute
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--width", "cell_width", type=int, default=None, help="Cell width (default from config, else 8).")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True), help="gridcalc.yaml file or directory containing one.")
@click.option("--log-dir", "log_dir", default=None, type=click.Path(file_okay=False), help="Write NDJSON events to this directory.")
@click.option("--errors", "show_errors", is_flag=True, help="List failed cells on stderr.")
def compute(
    file: str,
    cell_width: int | None,
    config_path: str | None,
    log_dir: str | None,
    show_errors: bool,
) -> None:
    """Compute FILE and print the rendered table."""
    from gridcalc.evaluator import Evaluator
    from gridcalc.ingest import load_sheet_file
    from gridcalc.logging.events import set_log_dir
    from gridcalc.render import render_grid

    sheet_path = Path(file)
    cfg = _load_config(config_path, sheet_path)
    width = cell_width if cell_width is not None else cfg["cell_width"]
    if width < 1:
        raise click.BadParameter("must be >= 1", param_hint="--width")

    set_log_dir(log_dir or cfg["log_dir"], fsync=cfg["logging_fsync"])
    try:
        sheet = load_sheet_file(sheet_path)
        grid = Evaluator().compute(sheet)
        table = render_grid(grid, width, markers=cfg["error_markers"])
    except GridError as e:
        raise click.ClickException(str(e))
    finally:
        set_log_dir(None)

    click.echo(table.to_text(), nl=False)
    if show_errors:
        for addr, err in grid.errors().items():
            click.echo(f"{addr}: {err}", err=True)


# ---------------------------------------------------------------------------
# Check
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def check(file: str) -> None:
    """Parse FILE without computing it."""
    from gridcalc.ingest import load_sheet_file

    try:
        sheet = load_sheet_file(file)
    except GridError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"OK: {len(sheet.rows)} rows, {len(sheet.columns)} columns, "
        f"{sheet.cell_count()} cells"
    )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@main.command("events")
@click.argument("log_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--level", default=None, type=click.Choice(["info", "warning", "error"]), help="Filter by level.")
@click.option(
    "--type",
    "event_type",
    default=None,
    type=click.Choice([t.value for t in EventType]),
    help="Filter by event type.",
)
@click.option("--limit", default=100, type=click.IntRange(min=1), help="Maximum events to show.")
def events_cmd(log_dir: str, level: str | None, event_type: str | None, limit: int) -> None:
    """Show events logged to LOG_DIR, newest first."""
    from gridcalc.logging.sink import EventSink

    events = EventSink(Path(log_dir)).read(level=level, event_type=event_type, limit=limit)
    if not events:
        click.echo("No events found.")
        return

    for evt in events:
        line = f"[{evt.ts}] {evt.level.value.upper():7s} {evt.event_type.value}: {evt.message}"
        if evt.context.get("addr"):
            line += f"  at {evt.context['addr']}"
        if evt.error_code:
            line += f"  ({evt.error_code})"
        click.echo(line)


# ---------------------------------------------------------------------------
# Address helpers
# ---------------------------------------------------------------------------


@main.command()
@click.argument("position", type=int)
def label(position: int) -> None:
    """Print the column label for 1-based POSITION."""
    from gridcalc.addressing import position_to_label

    try:
        click.echo(position_to_label(position))
    except GridError as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("label_text", metavar="LABEL")
def position(label_text: str) -> None:
    """Print the 1-based position of column LABEL."""
    from gridcalc.addressing import label_to_position

    try:
        click.echo(label_to_position(label_text.upper()))
    except GridError as e:
        raise click.ClickException(str(e))
