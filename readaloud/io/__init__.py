"""Input/output components for ReadAloud.

This package contains the ledger repository, document storage, and PDF text
extraction used by the pipeline and serving gate.
"""

from .ledger import LEDGER_COLUMNS, CsvLedger, LedgerRepository
from .pdf_text_extractor import PdfExtractionError, PdfTextExtractor
from .storage import DocumentStore, FilesystemDocumentStore

__all__ = [
    "CsvLedger",
    "DocumentStore",
    "FilesystemDocumentStore",
    "LEDGER_COLUMNS",
    "LedgerRepository",
    "PdfExtractionError",
    "PdfTextExtractor",
]
