"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic stage- and row-level runtime logs via `loguru`.
- Keep every line grep-friendly: `[phase] level=.. stage=.. event=.. key=value`.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic phase logs for CLI-observable pipeline activity."""

    def __init__(self, sink: TextIO | None = None) -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level="INFO", colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def info(self, stage: str, event: str, **context: object) -> None:
        """Emit an informational row- or chunk-level event."""

        self._emit("INFO", event, stage, **context)

    def warning(self, stage: str, event: str, **context: object) -> None:
        """Emit a recoverable anomaly that leaves work for a later pass."""

        self._emit("WARNING", event, stage, **context)

    def error(self, stage: str, event: str, **context: object) -> None:
        """Emit a fault that was absorbed at row or chunk level."""

        self._emit("ERROR", event, stage, **context)

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event with summary counters."""

        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)


class NullRunLogger(RunLogger):
    """Run logger that drops every event; used when no sink is configured."""

    def __init__(self) -> None:
        """Initialize without touching global `loguru` handlers."""

        self._sink = None

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Discard one runtime log line."""
