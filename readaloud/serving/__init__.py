"""Requester-facing lookup of finished documents and their audio."""

from .gate import (
    AssessmentFound,
    AudioFound,
    FetchFailed,
    NotFound,
    NotReady,
    ServingGate,
)

__all__ = [
    "AssessmentFound",
    "AudioFound",
    "FetchFailed",
    "NotFound",
    "NotReady",
    "ServingGate",
]
