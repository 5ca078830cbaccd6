"""Deterministic artifact naming and existing-artifact resolution.

Responsibilities:
- Derive the canonical, content-based artifact name for one chunk.
- Keep earlier naming conventions as ordered fallback strategies so audio
  produced under them is found instead of synthesized (and billed) again.

Names are content-derived but not unique: two chunks with the same leading six
words and the same ordinal share a name. Within one ordinal-indexed folder that
only yields look-alike names, never wrong audio.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Protocol, Sequence

from ..io.storage import ARTIFACT_SUFFIX, SOURCE_DOCUMENT_SUFFIX, DocumentStore
from ..models.datatypes import ArtifactFolder, StoredFile


MAX_ARTIFACT_NAME_CHARS = 250
_LEADING_WORD_COUNT = 6
_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_SOURCE_SUFFIX = re.compile(re.escape(SOURCE_DOCUMENT_SUFFIX) + r"$", re.IGNORECASE)


def chunk_suffix(chunk_index: int) -> str:
    """Return the ordinal suffix shared by every naming scheme (1-based)."""

    return f"-chunk-{chunk_index + 1}{ARTIFACT_SUFFIX}"


def canonical_artifact_name(chunk_text: str, chunk_index: int) -> str:
    """Build the canonical name from the chunk's first six words and its ordinal.

    The result never exceeds `MAX_ARTIFACT_NAME_CHARS`; truncation only shortens
    the word stem so the `-chunk-<n>.wav` suffix always survives.
    """

    leading_words = " ".join(_WHITESPACE.split(chunk_text.strip())[:_LEADING_WORD_COUNT])
    stem = _WHITESPACE.sub("-", _DISALLOWED.sub("", leading_words).strip())
    suffix = chunk_suffix(chunk_index)
    return stem[: max(0, MAX_ARTIFACT_NAME_CHARS - len(suffix))] + suffix


def document_stem(document_name: str) -> str:
    """Return the document name without its PDF extension."""

    return _SOURCE_SUFFIX.sub("", document_name).strip()


class NamingStrategy(Protocol):
    """One artifact naming convention."""

    label: str

    def artifact_name(self, document_name: str, chunk_text: str, chunk_index: int) -> str:
        """Return the artifact name this convention gives one chunk."""


@dataclass(frozen=True, slots=True)
class CanonicalNaming:
    """Current convention: leading words of the chunk text plus ordinal."""

    label: str = "canonical"

    def artifact_name(self, document_name: str, chunk_text: str, chunk_index: int) -> str:
        return canonical_artifact_name(chunk_text, chunk_index)


@dataclass(frozen=True, slots=True)
class DocumentStemNaming:
    """Legacy convention: document name without extension plus ordinal."""

    label: str = "legacy-stem"

    def artifact_name(self, document_name: str, chunk_text: str, chunk_index: int) -> str:
        return f"{document_stem(document_name)}{chunk_suffix(chunk_index)}"


@dataclass(frozen=True, slots=True)
class FullDocumentNameNaming:
    """Oldest convention: full original document name plus ordinal."""

    label: str = "legacy-full-name"

    def artifact_name(self, document_name: str, chunk_text: str, chunk_index: int) -> str:
        return f"{document_name}{chunk_suffix(chunk_index)}"


DEFAULT_NAMING_STRATEGIES: tuple[NamingStrategy, ...] = (
    CanonicalNaming(),
    DocumentStemNaming(),
    FullDocumentNameNaming(),
)


def candidate_artifact_names(
    document_name: str,
    chunk_text: str,
    chunk_index: int,
    strategies: Sequence[NamingStrategy] = DEFAULT_NAMING_STRATEGIES,
) -> tuple[str, ...]:
    """Return names to look up for one chunk, in priority order, without repeats."""

    names: list[str] = []
    for strategy in strategies:
        name = strategy.artifact_name(document_name, chunk_text, chunk_index)
        if name not in names:
            names.append(name)
    return tuple(names)


class ArtifactResolver:
    """Find an already-produced artifact for a chunk under any known name."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def resolve(
        self,
        folder: ArtifactFolder,
        name: str,
        legacy_names: Sequence[str] = (),
    ) -> StoredFile | None:
        """Return the first existing artifact among `name` then `legacy_names`."""

        for candidate in (name, *legacy_names):
            found = self._store.find_artifact(folder, candidate)
            if found is not None:
                return found
        return None
