"""Document and artifact storage abstraction.

Responsibilities:
- List source documents in the well-known source folder.
- Resolve source locators and build direct-download locators for artifacts.
- Provide per-document artifact folders with atomic, name-addressed writes.

Layout under the audio root::

    <root>/<source folder>/*.pdf       source documents
    <root>/<document stem>/<name>.wav  one artifact per chunk
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, unquote, urlparse
from urllib.request import url2pathname

from ..errors import SourceDocumentError
from ..models.datatypes import ArtifactFolder, StoredFile


SOURCE_DOCUMENT_SUFFIX = ".pdf"
ARTIFACT_SUFFIX = ".wav"


class DocumentStore(Protocol):
    """Operations the pipeline and serving gate need from a document store."""

    def list_source_documents(self) -> list[StoredFile]:
        """Return source documents available for discovery."""

    def locator_for(self, stored: StoredFile) -> str:
        """Return the unique locator recorded in the ledger for a source document."""

    def resolve_source(self, source_ref: str) -> StoredFile:
        """Resolve a ledger locator to a stored source document."""

    def artifact_folder(self, name: str) -> ArtifactFolder:
        """Return (creating if needed) the artifact folder for one document."""

    def find_artifact(self, folder: ArtifactFolder, name: str) -> StoredFile | None:
        """Return an existing artifact by exact name, if present."""

    def save_artifact(self, folder: ArtifactFolder, name: str, data: bytes) -> StoredFile:
        """Persist one artifact under `name` and return it."""

    def open_artifact(self, file_id: str) -> StoredFile | None:
        """Return a generated artifact by identifier, never a source document."""

    def read_bytes(self, stored: StoredFile) -> bytes:
        """Return the raw bytes of a stored file."""

    def download_url(self, stored: StoredFile) -> str:
        """Return a direct-download locator built from the file identifier."""


class FilesystemDocumentStore:
    """Filesystem-backed document store rooted at the audio root folder."""

    def __init__(
        self,
        root: Path,
        source_folder_name: str = "Assessment PDFs",
        public_base_url: str | None = None,
    ) -> None:
        """Initialize the store with its root and well-known source folder name."""

        self.root = root
        self.source_folder_name = source_folder_name
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

    @property
    def source_folder(self) -> Path:
        return self.root / self.source_folder_name

    def list_source_documents(self) -> list[StoredFile]:
        """Return PDFs in the source folder sorted by name."""

        self.root.mkdir(parents=True, exist_ok=True)
        if not self.source_folder.is_dir():
            raise SourceDocumentError(
                f'Source folder "{self.source_folder_name}" not found inside "{self.root}".'
            )
        documents = [
            self._stored(path)
            for path in self.source_folder.iterdir()
            if path.is_file() and path.suffix.lower() == SOURCE_DOCUMENT_SUFFIX
        ]
        return sorted(documents, key=lambda item: item.name)

    def locator_for(self, stored: StoredFile) -> str:
        """Return a public URL when configured, otherwise a `file://` URI."""

        return self.download_url(stored)

    def resolve_source(self, source_ref: str) -> StoredFile:
        """Resolve a source locator or raise `SourceDocumentError`."""

        path = self._path_from_locator(source_ref)
        if not path.is_file():
            raise SourceDocumentError(f"Source document not found: {source_ref}")
        return self._stored(path)

    def artifact_folder(self, name: str) -> ArtifactFolder:
        """Return the artifact folder for a document stem, creating it on demand."""

        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise SourceDocumentError(f"Invalid artifact folder name: {name!r}")
        if name.casefold() == self.source_folder_name.casefold():
            raise SourceDocumentError(
                f"Artifact folder {name!r} would share the source folder; rename the document."
            )
        path = self.root / name
        path.mkdir(parents=True, exist_ok=True)
        return ArtifactFolder(name=name, path=path)

    def find_artifact(self, folder: ArtifactFolder, name: str) -> StoredFile | None:
        """Return an artifact with exactly this name inside `folder`, if present."""

        path = folder.path / name
        if path.parent != folder.path or not path.is_file():
            return None
        return self._stored(path)

    def save_artifact(self, folder: ArtifactFolder, name: str, data: bytes) -> StoredFile:
        """Write artifact bytes atomically so partial writes are never visible."""

        path = folder.path / name
        temp_path = folder.path / f".{name}.part"
        temp_path.write_bytes(data)
        os.replace(temp_path, path)
        return self._stored(path)

    def open_artifact(self, file_id: str) -> StoredFile | None:
        """Return a WAV artifact inside the root, excluding the source folder."""

        root = self.root.resolve()
        path = (self.root / unquote(file_id)).resolve()
        if not path.is_relative_to(root) or path.is_relative_to(self.source_folder.resolve()):
            return None
        if path.suffix.lower() != ARTIFACT_SUFFIX or not path.is_file():
            return None
        return self._stored(path)

    def read_bytes(self, stored: StoredFile) -> bytes:
        """Read raw file bytes."""

        return stored.path.read_bytes()

    def download_url(self, stored: StoredFile) -> str:
        """Build a direct-download locator from the file identifier."""

        if self.public_base_url is not None:
            return f"{self.public_base_url}/{quote(stored.file_id)}"
        return stored.path.resolve().as_uri()

    def _stored(self, path: Path) -> StoredFile:
        return StoredFile(file_id=self._file_id(path), name=path.name, path=path)

    def _file_id(self, path: Path) -> str:
        resolved = path.resolve()
        root = self.root.resolve()
        if resolved.is_relative_to(root):
            return resolved.relative_to(root).as_posix()
        return resolved.as_posix()

    def _path_from_locator(self, source_ref: str) -> Path:
        """Translate a ledger locator back to a local path."""

        locator = source_ref.strip()
        if self.public_base_url is not None and locator.startswith(f"{self.public_base_url}/"):
            relative = unquote(locator[len(self.public_base_url) + 1 :])
            path = (self.root / relative).resolve()
            if not path.is_relative_to(self.root.resolve()):
                raise SourceDocumentError(f"Source locator escapes the store root: {source_ref}")
            return path

        parsed = urlparse(locator)
        if parsed.scheme != "file" or not parsed.path:
            raise SourceDocumentError(f"Unsupported source locator: {source_ref}")
        return Path(url2pathname(parsed.path))
