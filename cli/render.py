from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from models.schemas import AggregateResult, SensorReport
from services.ingestion import IngestionStats, IngestOutcome

MENU_OPTIONS = (
    ("1", "Register thermal sensor"),
    ("2", "Register barometric sensor"),
    ("3", "Add manual reading"),
    ("4", "Process all sensors"),
    ("5", "Exit"),
    ("6", "Connect serial device"),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def echo_error(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)


def render_menu() -> None:
    typer.echo()
    echo_heading("IoT Telemetry Monitor")
    for key, label in MENU_OPTIONS:
        typer.echo(f"  {key}. {label}")


def render_aggregates(results: Sequence[AggregateResult]) -> None:
    echo_heading("Aggregates")
    if not results:
        typer.echo("No sensors registered.")
        return
    for result in results:
        if result.has_data:
            if result.aggregate == "minimum":
                summary = f"minimum {result.value!r}"
            else:
                summary = f"mean {result.value:.2f}"
        else:
            summary = "no data"
        typer.echo(
            f"  - {result.sensor_id} [{result.kind.value}] {summary} "
            f"(readings: {result.count})"
        )


def render_reports(reports: Sequence[SensorReport]) -> None:
    echo_heading("Sensors")
    if not reports:
        typer.echo("No sensors registered.")
        return
    for report in reports:
        echo_key_values(
            [
                ("sensor_id", report.sensor_id),
                ("kind", report.kind.value),
                ("readings", report.count),
            ]
        )
        if report.readings:
            values = " ".join(f"{value!r}{report.unit}" for value in report.readings)
            typer.echo(f"data: {values}")
        typer.echo()


def render_stats(stats: IngestionStats) -> None:
    echo_heading("Ingestion")
    echo_key_values(
        [
            ("lines_received", stats.lines_received),
            ("accepted", stats.accepted),
            ("skipped", stats.count(IngestOutcome.skipped)),
            ("malformed", stats.count(IngestOutcome.malformed)),
            ("unknown_type", stats.count(IngestOutcome.unknown_type)),
            ("mismatch", stats.count(IngestOutcome.mismatch)),
        ]
    )
