"""Telemetry and observability helpers.

This package emits deterministic run events for auditing batch passes.
"""

from .logger import NullRunLogger, RunLogger

__all__ = ["NullRunLogger", "RunLogger"]
