"""Enumerated-item chunking of source documents.

Responsibilities:
- Split extracted document text at lines that start an enumerated item
  (`<integer>.` followed by whitespace, after optional indentation).
- Return either the full ordered chunk list or nothing; never a partial list.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Protocol

from ..errors import SourceDocumentError
from ..io.pdf_text_extractor import PdfExtractionError
from ..io.storage import SOURCE_DOCUMENT_SUFFIX, DocumentStore
from ..telemetry.logger import NullRunLogger, RunLogger


_ITEM_BOUNDARY = re.compile(r"\n(?=\s*[0-9]+\.\s)")


class TextExtractor(Protocol):
    """Protocol for full-text extraction from a local document path."""

    def extract(self, pdf_path: Path) -> str:
        """Return the document's plain text."""


def split_enumerated_items(text: str) -> tuple[str, ...]:
    """Split text before each enumerated-item line, trimming and dropping empties."""

    pieces = (piece.strip() for piece in _ITEM_BOUNDARY.split(text))
    return tuple(piece for piece in pieces if piece)


class Chunker:
    """Deterministic source-document chunker backed by a text extractor."""

    def __init__(
        self,
        store: DocumentStore,
        extractor: TextExtractor,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._store = store
        self._extractor = extractor
        self._run_logger = run_logger if run_logger is not None else NullRunLogger()

    def split(self, source_ref: str) -> tuple[str, ...]:
        """Return ordered chunk texts for a source, or `()` on any source fault."""

        try:
            document = self._store.resolve_source(source_ref)
            if document.path.suffix.lower() != SOURCE_DOCUMENT_SUFFIX:
                raise SourceDocumentError(f"Source document is not a PDF: {document.name}")
            text = self._extractor.extract(document.path)
        except (SourceDocumentError, PdfExtractionError, OSError) as exc:
            self._run_logger.warning(
                "chunk",
                "extraction_failed",
                source=source_ref,
                error_type=type(exc).__name__,
                detail=str(exc),
            )
            return ()
        return split_enumerated_items(text)
