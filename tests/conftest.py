"""Shared pytest fixtures for the full ReadAloud test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from readaloud.errors import ProviderError
from readaloud.io.pdf_text_extractor import PdfExtractionError
from readaloud.io.storage import FilesystemDocumentStore


SOURCE_FOLDER = "Assessment PDFs"


class TextFileExtractor:
    """Extractor double that reads each source `.pdf` as a UTF-8 text file."""

    def extract(self, pdf_path: Path) -> str:
        """Return file text, mirroring the real extractor's missing-file error."""

        if not pdf_path.exists():
            raise PdfExtractionError(f"Input PDF not found: {pdf_path}")
        return pdf_path.read_text(encoding="utf-8")


class RecordingSynthesizer:
    """Synthesizer double recording every text and failing on selected texts."""

    def __init__(self) -> None:
        """Initialize call log, failure set, and optional per-call hook."""

        self.calls: list[str] = []
        self.fail_on: set[str] = set()
        self.on_call: Callable[[], None] | None = None

    def synthesize(self, text: str) -> bytes:
        """Return deterministic PCM or raise a provider error for selected texts."""

        self.calls.append(text)
        if self.on_call is not None:
            self.on_call()
        if text in self.fail_on:
            raise ProviderError("synthetic provider outage", failure_kind="http_error")
        return b"\x00\x01" * 240


@pytest.fixture
def audio_root(tmp_path: Path) -> Path:
    """Provide an audio root that already holds the well-known source folder."""

    root = tmp_path / "audio"
    (root / SOURCE_FOLDER).mkdir(parents=True)
    return root


@pytest.fixture
def store(audio_root: Path) -> FilesystemDocumentStore:
    """Provide a filesystem store over the test audio root."""

    return FilesystemDocumentStore(audio_root, source_folder_name=SOURCE_FOLDER)


@pytest.fixture
def write_source(audio_root: Path) -> Callable[[str, str], Path]:
    """Provide a helper that writes a text-backed source document."""

    def _write(name: str, text: str) -> Path:
        path = audio_root / SOURCE_FOLDER / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def text_extractor() -> TextFileExtractor:
    """Provide the text-file extractor double."""

    return TextFileExtractor()


@pytest.fixture
def synthesizer() -> RecordingSynthesizer:
    """Provide a fresh recording synthesizer."""

    return RecordingSynthesizer()
