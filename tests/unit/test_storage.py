"""Unit tests for the filesystem document store."""

from __future__ import annotations

from pathlib import Path

import pytest

from readaloud.errors import SourceDocumentError
from readaloud.io.storage import FilesystemDocumentStore


def test_list_source_documents_returns_sorted_pdfs_only(store, write_source) -> None:
    """Only PDFs in the source folder should be listed, sorted by name."""

    write_source("b.PDF", "x")
    write_source("a.pdf", "x")
    write_source("readme.md", "x")

    names = [item.name for item in store.list_source_documents()]

    assert names == ["a.pdf", "b.PDF"]


def test_missing_source_folder_is_reported(tmp_path: Path) -> None:
    """A root without the well-known source folder should raise a source error."""

    store = FilesystemDocumentStore(tmp_path / "root", source_folder_name="Assessment PDFs")

    with pytest.raises(SourceDocumentError, match="Assessment PDFs"):
        store.list_source_documents()


def test_locator_round_trips_to_source(store, write_source) -> None:
    """A locator built by the store should resolve back to the same document."""

    path = write_source("Quiz One.pdf", "1. a")
    document = store.list_source_documents()[0]

    locator = store.locator_for(document)

    assert locator.startswith("file://")
    assert store.resolve_source(locator).path == path.resolve()


def test_public_base_url_locators_resolve_inside_root(audio_root: Path, write_source) -> None:
    """Configured public locators should map back to files under the root."""

    store = FilesystemDocumentStore(audio_root, public_base_url="https://files.example/audio/")
    path = write_source("Quiz One.pdf", "1. a")
    document = store.list_source_documents()[0]

    locator = store.locator_for(document)

    assert locator == "https://files.example/audio/Assessment%20PDFs/Quiz%20One.pdf"
    assert store.resolve_source(locator).path == path.resolve()
    with pytest.raises(SourceDocumentError):
        store.resolve_source("https://files.example/audio/../../etc/passwd")


@pytest.mark.parametrize("locator", ["", "s3://bucket/key.pdf", "file:///does/not/exist.pdf"])
def test_unresolvable_locators_raise_source_errors(store, locator: str) -> None:
    """Unsupported or dangling locators should raise `SourceDocumentError`."""

    with pytest.raises(SourceDocumentError):
        store.resolve_source(locator)


def test_save_artifact_is_atomic_and_findable(store) -> None:
    """Saved artifacts should be complete files found by exact name."""

    folder = store.artifact_folder("Quiz One")

    saved = store.save_artifact(folder, "1-a-chunk-1.wav", b"RIFF-data")

    assert saved.path.read_bytes() == b"RIFF-data"
    assert [item.name for item in folder.path.iterdir()] == ["1-a-chunk-1.wav"]
    assert store.find_artifact(folder, "1-a-chunk-1.wav") == saved
    assert store.find_artifact(folder, "missing.wav") is None
    assert saved.file_id == "Quiz One/1-a-chunk-1.wav"


@pytest.mark.parametrize("name", ["", ".", "..", "a/b"])
def test_artifact_folder_rejects_unsafe_names(store, name: str) -> None:
    """Artifact folder names must stay one level below the root."""

    with pytest.raises(SourceDocumentError):
        store.artifact_folder(name)


def test_open_artifact_only_serves_generated_audio(store, write_source) -> None:
    """Source documents and paths escaping the root must never be served as audio."""

    write_source("Quiz One.pdf", "1. a")
    write_source("sneaky.wav", "not generated")
    folder = store.artifact_folder("Quiz One")
    saved = store.save_artifact(folder, "1-a-chunk-1.wav", b"audio")

    assert store.open_artifact(saved.file_id).file_id == saved.file_id
    assert store.open_artifact("Quiz%20One/1-a-chunk-1.wav").name == saved.name
    assert store.open_artifact("Assessment PDFs/Quiz One.pdf") is None
    assert store.open_artifact("Assessment PDFs/sneaky.wav") is None
    assert store.open_artifact("../outside.wav") is None


@pytest.mark.parametrize("name", ["Assessment PDFs", "assessment pdfs"])
def test_artifact_folder_never_shares_the_source_folder(store, name: str) -> None:
    """A document stem equal to the source folder name must not receive audio there."""

    with pytest.raises(SourceDocumentError, match="source folder"):
        store.artifact_folder(name)
