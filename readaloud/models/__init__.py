"""Shared typed data models for ReadAloud.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AccessControl,
    ArtifactFolder,
    AudioManifest,
    ChunkCount,
    ChunkCountState,
    LedgerRow,
    ManifestEntry,
    ManifestState,
    NoManifest,
    StoredFile,
    Unanalyzed,
)

__all__ = [
    "AccessControl",
    "ArtifactFolder",
    "AudioManifest",
    "ChunkCount",
    "ChunkCountState",
    "LedgerRow",
    "ManifestEntry",
    "ManifestState",
    "NoManifest",
    "StoredFile",
    "Unanalyzed",
]
