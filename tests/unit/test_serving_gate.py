"""Unit tests for credential-matched document lookup."""

from __future__ import annotations

import base64
import csv
import json
from pathlib import Path

import pytest

from readaloud.io.ledger import LEDGER_COLUMNS, CsvLedger
from readaloud.serving.gate import (
    NOT_FOUND_MESSAGE,
    AssessmentFound,
    AudioFound,
    FetchFailed,
    NotFound,
    NotReady,
    ServingGate,
)


@pytest.fixture
def gate(tmp_path: Path, store, write_source) -> ServingGate:
    """Provide a gate over one complete row and one row without a manifest."""

    ready = write_source("Ready Quiz.pdf", "%PDF ready")
    pending = write_source("Pending Quiz.pdf", "%PDF pending")
    folder = store.artifact_folder("Ready Quiz")
    artifact = store.save_artifact(folder, "1-Apple-chunk-1.wav", b"RIFF-audio")
    manifest = json.dumps(
        [
            {
                "text": "1. Apple",
                "audioUrl": store.download_url(artifact),
                "audioFilename": artifact.name,
            }
        ]
    )
    ledger_path = tmp_path / "ledger.csv"
    with ledger_path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(LEDGER_COLUMNS)
        writer.writerow(
            [ready.resolve().as_uri(), "1", manifest, "true", "Bio", "Dr. Lee", "pw1", "a@x.com"]
        )
        writer.writerow(
            [pending.resolve().as_uri(), "2", "", "false", "Bio", "Dr. Lee", "pw2", "c@x.com; a@x.com"]
        )
    return ServingGate(ledger=CsvLedger(ledger_path), store=store)


def test_fetch_matches_normalized_identity_and_trimmed_secret(gate: ServingGate) -> None:
    """Identity matching ignores case and whitespace; the secret must match exactly."""

    result = gate.fetch("A@X.com", " pw1")

    assert isinstance(result, AssessmentFound)
    payload = result.to_payload()
    assert payload["status"] == "success"
    assert payload["fileName"] == "Ready Quiz.pdf"
    assert base64.b64decode(payload["pdfData"]) == b"%PDF ready"  # type: ignore[arg-type]
    assert payload["audioChunks"] == [
        {
            "text": "1. Apple",
            "audioUrl": result.manifest.entries[0].audio_url,
            "audioFilename": "1-Apple-chunk-1.wav",
        }
    ]


@pytest.mark.parametrize(
    ("identity", "secret"),
    [("b@x.com", "pw1"), ("a@x.com", "PW1"), ("a@x.com", "wrong"), ("", "pw1"), ("a@x.com", " ")],
)
def test_credential_faults_share_one_generic_not_found(
    gate: ServingGate, identity: str, secret: str
) -> None:
    """Wrong identity and wrong secret must be indistinguishable to the caller."""

    result = gate.fetch(identity, secret)

    assert isinstance(result, NotFound)
    assert result.to_payload() == {"status": "not_found", "error": NOT_FOUND_MESSAGE}


def test_matching_row_without_manifest_is_not_ready(gate: ServingGate) -> None:
    """Valid credentials on an unfinished row should report not-ready, never partial audio."""

    result = gate.fetch("c@x.com", "pw2")

    assert isinstance(result, NotReady)
    assert result.to_payload()["status"] == "not_ready"


def test_missing_source_document_is_an_error(gate: ServingGate, audio_root: Path) -> None:
    """A finished row whose source vanished should report a generic error."""

    (audio_root / "Assessment PDFs" / "Ready Quiz.pdf").unlink()

    result = gate.fetch("a@x.com", "pw1")

    assert isinstance(result, FetchFailed)
    assert result.to_payload()["status"] == "error"


def test_fetch_audio_serves_artifacts_only(gate: ServingGate) -> None:
    """Audio lookups should return generated artifacts and refuse source documents."""

    found = gate.fetch_audio("Ready Quiz/1-Apple-chunk-1.wav")
    refused = gate.fetch_audio("Assessment PDFs/Ready Quiz.pdf")

    assert isinstance(found, AudioFound)
    assert base64.b64decode(found.to_payload()["audioData"]) == b"RIFF-audio"  # type: ignore[arg-type]
    assert isinstance(refused, NotFound)
