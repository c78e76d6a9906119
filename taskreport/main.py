from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import typer

from . import config
from .models import ArtifactKind, ReportData, ReportGenerationError
from .pipeline.aggregate import aggregate
from .pipeline.formatting import parse_date
from .pipeline.ingest import default_range, group_tasks, load_rows, parse_tasks, select_range
from .pipeline.render_text import render_text
from .pipeline.run import ALL_KINDS, export_reports
from .storage import DirectorySink

app = typer.Typer(help="Daily task report renderer")


def _check_date(value: Optional[str], option: str) -> Optional[str]:
    if value is None:
        return None
    try:
        parse_date(value)
    except ValueError:
        raise typer.BadParameter(f"{option} must be an ISO date (YYYY-MM-DD)")
    return value


def _load_report(tasks: Path, start: Optional[str], end: Optional[str]) -> ReportData:
    default_start, default_end = default_range(date.today())
    start = _check_date(start, "--start") or default_start
    end = _check_date(end, "--end") or default_end
    if start > end:
        raise typer.BadParameter("--start must not be after --end")
    grouped = group_tasks(parse_tasks(load_rows(tasks)))
    return aggregate(select_range(grouped, start, end), start, end)


def _parse_kinds(formats: Optional[List[str]]) -> List[ArtifactKind]:
    if not formats:
        return list(ALL_KINDS)
    kinds: List[ArtifactKind] = []
    for value in formats:
        try:
            kind = ArtifactKind(value.lower().lstrip("."))
        except ValueError:
            raise typer.BadParameter(f"Unsupported format: {value}")
        if kind not in kinds:
            kinds.append(kind)
    return kinds


@app.command()
def build(
    tasks: Path = typer.Option(..., "--tasks", help="CSV path with id/title/completed/date"),
    start: Optional[str] = typer.Option(None, "--start", help="First day (defaults to 6 days ago)"),
    end: Optional[str] = typer.Option(None, "--end", help="Last day (defaults to today)"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    formats: Optional[List[str]] = typer.Option(None, "--format", help="txt, docx or pdf; repeatable"),
    verbose: bool = typer.Option(False, "--verbose", help="Log progress"),
) -> None:
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    if out:
        config.set_out_dir(out)
    kinds = _parse_kinds(formats)
    report = _load_report(tasks, start, end)
    if report.is_empty:
        typer.echo(config.EMPTY_MESSAGE)
    try:
        written = export_reports(report, DirectorySink(config.OUT_DIR), datetime.now(), kinds)
    except ReportGenerationError as exc:
        typer.echo(f"FAILED: {exc}", err=True)
        raise typer.Exit(code=1)
    for name in written:
        typer.echo(f"WROTE: {name}")


@app.command()
def show(
    tasks: Path = typer.Option(..., "--tasks", help="CSV path with id/title/completed/date"),
    start: Optional[str] = typer.Option(None, "--start", help="First day (defaults to 6 days ago)"),
    end: Optional[str] = typer.Option(None, "--end", help="Last day (defaults to today)"),
) -> None:
    report = _load_report(tasks, start, end)
    typer.echo(render_text(report, datetime.now()), nl=False)


if __name__ == "__main__":
    app()
