"""Credential-matched lookup of completed documents for requesters.

A requester presents an identity (for example an e-mail address) and a shared
secret. The gate scans the ledger for the first row whose secret matches
exactly and whose authorized identities contain the normalized identity, then
returns the source document with its finished audio manifest.

Credential faults are reported with one generic message so callers cannot tell
a wrong identity from a wrong secret.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Union

from ..errors import LedgerFormatError, SourceDocumentError
from ..io.ledger import LedgerRepository
from ..io.storage import SOURCE_DOCUMENT_SUFFIX, DocumentStore
from ..models.datatypes import AudioManifest, LedgerRow
from ..parsing import normalize_identity
from ..telemetry.logger import NullRunLogger, RunLogger


NOT_FOUND_MESSAGE = "Assessment not found. Please check your email and password and try again."
NOT_READY_MESSAGE = "Audio for this assessment has not been generated yet. Please try again later."
NOT_A_PDF_MESSAGE = "The file is not a PDF."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while loading the assessment."
AUDIO_NOT_FOUND_MESSAGE = "Audio file not found."


@dataclass(frozen=True, slots=True)
class AssessmentFound:
    """Source document bytes with its complete audio manifest."""

    document_name: str
    document_bytes: bytes
    manifest: AudioManifest

    def to_payload(self) -> dict[str, object]:
        return {
            "status": "success",
            "pdfData": base64.b64encode(self.document_bytes).decode("ascii"),
            "fileName": self.document_name,
            "audioChunks": self.manifest.as_payload(),
        }


@dataclass(frozen=True, slots=True)
class NotFound:
    message: str = NOT_FOUND_MESSAGE

    def to_payload(self) -> dict[str, object]:
        return {"status": "not_found", "error": self.message}


@dataclass(frozen=True, slots=True)
class NotReady:
    message: str = NOT_READY_MESSAGE

    def to_payload(self) -> dict[str, object]:
        return {"status": "not_ready", "error": self.message}


@dataclass(frozen=True, slots=True)
class FetchFailed:
    message: str = UNEXPECTED_ERROR_MESSAGE

    def to_payload(self) -> dict[str, object]:
        return {"status": "error", "error": self.message}


@dataclass(frozen=True, slots=True)
class AudioFound:
    """One generated artifact's bytes."""

    name: str
    data: bytes

    def to_payload(self) -> dict[str, object]:
        return {"status": "success", "audioData": base64.b64encode(self.data).decode("ascii")}


FetchResult = Union[AssessmentFound, NotFound, NotReady, FetchFailed]
AudioResult = Union[AudioFound, NotFound, FetchFailed]


class ServingGate:
    """Answer fetch requests against the ledger and document store."""

    def __init__(
        self,
        *,
        ledger: LedgerRepository,
        store: DocumentStore,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._ledger = ledger
        self._store = store
        self._run_logger = run_logger if run_logger is not None else NullRunLogger()

    def fetch(self, identity: str, secret: str) -> FetchResult:
        """Return the requester's document and manifest, or a tagged failure."""

        requested_identity = normalize_identity(identity)
        requested_secret = (secret or "").strip()
        if not requested_identity or not requested_secret:
            return NotFound()

        try:
            row = self._match_row(requested_identity, requested_secret)
        except (LedgerFormatError, OSError) as exc:
            self._run_logger.error("serve", "ledger_unavailable", error_type=type(exc).__name__)
            return FetchFailed()
        if row is None:
            self._run_logger.info("serve", "fetch_not_found")
            return NotFound()
        if not row.is_complete or not isinstance(row.manifest, AudioManifest):
            self._run_logger.info("serve", "fetch_not_ready", row=row.row_number)
            return NotReady()

        try:
            document = self._store.resolve_source(row.source_ref)
            if not document.name.lower().endswith(SOURCE_DOCUMENT_SUFFIX):
                return FetchFailed(NOT_A_PDF_MESSAGE)
            document_bytes = self._store.read_bytes(document)
        except (SourceDocumentError, OSError) as exc:
            self._run_logger.error(
                "serve", "source_unavailable", row=row.row_number, error_type=type(exc).__name__
            )
            return FetchFailed()

        self._run_logger.info(
            "serve", "fetch_served", row=row.row_number, chunks=len(row.manifest.entries)
        )
        return AssessmentFound(
            document_name=document.name,
            document_bytes=document_bytes,
            manifest=row.manifest,
        )

    def fetch_audio(self, file_id: str) -> AudioResult:
        """Return one generated artifact by its store identifier."""

        artifact = self._store.open_artifact(file_id)
        if artifact is None:
            return NotFound(AUDIO_NOT_FOUND_MESSAGE)
        try:
            return AudioFound(name=artifact.name, data=self._store.read_bytes(artifact))
        except OSError as exc:
            self._run_logger.error("serve", "audio_unavailable", error_type=type(exc).__name__)
            return FetchFailed()

    def _match_row(self, identity: str, secret: str) -> LedgerRow | None:
        for row in self._ledger.read_all():
            if not row.source_ref or not row.access.secret:
                continue
            if row.access.secret == secret and identity in row.access.authorized_identities:
                return row
        return None
