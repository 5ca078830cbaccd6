"""CLI output and error rendering helpers."""

from __future__ import annotations

import json
from typing import NoReturn

import typer

from .errors import PipelineStageError
from .pipeline.runtime import PassReport


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_pass_report(report: PassReport) -> None:
    """Print one summary line per stage pass."""

    line = (
        f"{report.stage.capitalize()}: examined={report.examined} "
        f"advanced={report.advanced} deferred={report.deferred} skipped={report.skipped}"
    )
    if report.halted:
        line += " (stopped at time budget; remaining rows left for the next run)"
    typer.echo(line)


def echo_json_payload(payload: dict[str, object]) -> None:
    """Print a response payload as stable, indented JSON."""

    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True))
