"""Text processing components.

This package contains enumerated-item chunking and the deterministic artifact
naming used for deduplication.
"""

from .chunking import Chunker, split_enumerated_items
from .naming import (
    DEFAULT_NAMING_STRATEGIES,
    ArtifactResolver,
    candidate_artifact_names,
    canonical_artifact_name,
    document_stem,
)

__all__ = [
    "ArtifactResolver",
    "Chunker",
    "DEFAULT_NAMING_STRATEGIES",
    "candidate_artifact_names",
    "canonical_artifact_name",
    "document_stem",
    "split_enumerated_items",
]
