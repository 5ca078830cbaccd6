"""Integration-test fixtures for deterministic provider and credential behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from readaloud.io.pdf_text_extractor import PdfTextExtractor
from readaloud.tts.gemini_client import GeminiSpeechClient


class InMemoryCredentialStore:
    """Credential store double that never touches the host keyring."""

    def __init__(self) -> None:
        """Initialize with no stored key."""

        self.api_key: str | None = None

    def is_available(self) -> bool:
        """Report storage as available."""

        return True

    def get_api_key(self) -> str | None:
        """Return the stored key."""

        return self.api_key

    def set_api_key(self, api_key: str) -> None:
        """Store a key."""

        self.api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        """Clear the stored key and report whether one existed."""

        existed = self.api_key is not None
        self.api_key = None
        return existed


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop host configuration so only test-provided values are visible."""

    for env_key in (
        "GEMINI_API_KEY",
        "READALOUD_LEDGER_PATH",
        "READALOUD_AUDIO_ROOT",
        "READALOUD_SOURCE_FOLDER",
        "READALOUD_TTS_MODEL",
        "READALOUD_TTS_VOICE",
        "READALOUD_TIME_BUDGET_SECONDS",
        "READALOUD_REQUEST_TIMEOUT_SECONDS",
        "READALOUD_REQUESTS_PER_MINUTE",
        "READALOUD_PUBLIC_BASE_URL",
    ):
        monkeypatch.delenv(env_key, raising=False)


@pytest.fixture(autouse=True)
def _mock_text_extraction(monkeypatch: pytest.MonkeyPatch) -> None:
    """Read test source documents as plain UTF-8 text instead of parsing PDF."""

    def _mock_extract(self, pdf_path: Path) -> str:
        """Return the raw file text."""

        _ = self
        return pdf_path.read_text(encoding="utf-8")

    monkeypatch.setattr(PdfTextExtractor, "extract", _mock_extract)


@pytest.fixture(autouse=True)
def _mock_gemini_speech_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock Gemini TTS calls to avoid network and key requirements."""

    def _mock_generate_speech(self, **kwargs: object) -> bytes:
        """Return deterministic silent PCM for every chunk."""

        _ = self
        _ = kwargs
        return b"\x00\x00" * 2400

    monkeypatch.setattr(GeminiSpeechClient, "generate_speech", _mock_generate_speech)


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Route CLI credential storage to an in-memory double."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr("readaloud.cli.create_credential_store", lambda: store)
    return store
