"""Core datatypes shared across ReadAloud modules.

Responsibilities:
- Represent one ledger row and its per-field states as immutable records.
- Make illegal row states (manifest without a chunk count, completion without a
  matching manifest) unrepresentable at construction time.

Key types:
- `Unanalyzed`, `ChunkCount`: chunk-count field states.
- `NoManifest`, `AudioManifest`, `ManifestEntry`: audio-manifest field states.
- `AccessControl`, `LedgerRow`, `StoredFile`, `ArtifactFolder`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Union


@dataclass(frozen=True, slots=True)
class Unanalyzed:
    """Chunk-count state of a row whose source has not been chunked yet."""


@dataclass(frozen=True, slots=True)
class ChunkCount:
    """Chunk-count state recorded by the analysis stage.

    Attributes:
        value: Number of chunks found in the source; always positive.
    """

    value: int

    def __post_init__(self) -> None:
        if self.value <= 0:
            raise ValueError("`ChunkCount.value` must be a positive integer.")


ChunkCountState = Union[Unanalyzed, ChunkCount]


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """One finalized chunk of a completed row.

    Attributes:
        text: Chunk text as narrated.
        audio_url: Direct-download locator of the chunk's audio artifact.
        audio_filename: Artifact name inside the document's artifact folder.
    """

    text: str
    audio_url: str
    audio_filename: str

    def as_payload(self) -> dict[str, str]:
        """Return the wire-format record stored in the ledger and served to clients."""

        return {
            "text": self.text,
            "audioUrl": self.audio_url,
            "audioFilename": self.audio_filename,
        }


@dataclass(frozen=True, slots=True)
class NoManifest:
    """Manifest state of a row that has not been finalized."""


@dataclass(frozen=True, slots=True)
class AudioManifest:
    """Ordered manifest of a finalized row."""

    entries: tuple[ManifestEntry, ...]

    def as_payload(self) -> list[dict[str, str]]:
        """Return the ordered wire-format records."""

        return [entry.as_payload() for entry in self.entries]


ManifestState = Union[NoManifest, AudioManifest]


@dataclass(frozen=True, slots=True)
class AccessControl:
    """Serving-gate access columns of a ledger row.

    Attributes:
        group_label: Group label (for example a class name).
        responsible_label: Responsible-party label (for example an instructor).
        secret: Shared secret requesters must present.
        authorized_identities: Normalized identities allowed to fetch the row.
    """

    group_label: str = ""
    responsible_label: str = ""
    secret: str = ""
    authorized_identities: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class LedgerRow:
    """One source document and its processing status.

    Attributes:
        row_number: 1-based data-row position in the ledger (header excluded).
        source_ref: Opaque source-document locator; blank rows are ignored.
        chunk_count: `Unanalyzed` or `ChunkCount`.
        manifest: `NoManifest` or `AudioManifest`.
        is_complete: Whether the manifest covers every chunk of the source.
        access: Serving-gate access columns.
    """

    row_number: int
    source_ref: str
    chunk_count: ChunkCountState = field(default_factory=Unanalyzed)
    manifest: ManifestState = field(default_factory=NoManifest)
    is_complete: bool = False
    access: AccessControl = field(default_factory=AccessControl)

    def __post_init__(self) -> None:
        if isinstance(self.manifest, AudioManifest) and not isinstance(
            self.chunk_count, ChunkCount
        ):
            raise ValueError("A manifest requires a recorded chunk count.")
        if not self.is_complete:
            return
        if not isinstance(self.manifest, AudioManifest) or not isinstance(
            self.chunk_count, ChunkCount
        ):
            raise ValueError("A complete row requires a manifest and a chunk count.")
        if len(self.manifest.entries) != self.chunk_count.value:
            raise ValueError("A complete row's manifest must cover every chunk.")
        if any(not entry.audio_url for entry in self.manifest.entries):
            raise ValueError("A complete row's manifest entries need audio locators.")

    @property
    def needs_analysis(self) -> bool:
        """Whether the analysis pass should chunk this row."""

        return bool(self.source_ref) and isinstance(self.chunk_count, Unanalyzed)

    @property
    def needs_generation(self) -> bool:
        """Whether the generation pass should fill this row's audio."""

        return (
            bool(self.source_ref)
            and isinstance(self.chunk_count, ChunkCount)
            and not self.is_complete
        )

    def with_chunk_count(self, count: int) -> LedgerRow:
        """Return the analyzed row with a fresh count and completion reset."""

        return replace(
            self,
            chunk_count=ChunkCount(count),
            manifest=NoManifest(),
            is_complete=False,
        )

    def completed(self, entries: tuple[ManifestEntry, ...]) -> LedgerRow:
        """Return the finalized row carrying the full ordered manifest."""

        return replace(self, manifest=AudioManifest(entries=entries), is_complete=True)


@dataclass(frozen=True, slots=True)
class StoredFile:
    """A file held by the document store.

    Attributes:
        file_id: Store-relative identifier used to build locators.
        name: File name including extension.
        path: Local path of the file.
    """

    file_id: str
    name: str
    path: Path


@dataclass(frozen=True, slots=True)
class ArtifactFolder:
    """Per-document folder holding one audio artifact per chunk."""

    name: str
    path: Path
