"""PDF text extraction.

Responsibilities:
- Extract the full plain text of a source PDF.
- Prefer the `pdftotext` tool and fall back to `pypdf` when it is not installed.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess

from pypdf import PdfReader
from pypdf.errors import PyPdfError


class PdfExtractionError(RuntimeError):
    """Raised when text extraction from PDF cannot be completed."""


class PdfTextExtractor:
    """Extractor for text-based PDFs."""

    def extract(self, pdf_path: Path) -> str:
        """Extract all text from a PDF file."""

        if not pdf_path.exists():
            raise PdfExtractionError(f"Input PDF not found: {pdf_path}")

        executable = shutil.which("pdftotext")
        if executable is None:
            text = self._extract_with_pypdf(pdf_path)
        else:
            text = self._run_pdftotext(executable, pdf_path)
        text = text.replace("\f", "\n").strip()
        if not text:
            raise PdfExtractionError(f"No extractable text found in PDF: {pdf_path}.")
        return text

    def _run_pdftotext(self, executable: str, pdf_path: Path) -> str:
        result = subprocess.run(
            [executable, "-enc", "UTF-8", str(pdf_path), "-"],
            check=False,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            details = result.stderr.strip() or "unknown error"
            raise PdfExtractionError(f"pdftotext failed for {pdf_path}: {details}")
        return result.stdout

    def _extract_with_pypdf(self, pdf_path: Path) -> str:
        """Extract page texts with `pypdf` and join them with newlines."""

        try:
            reader = PdfReader(str(pdf_path))
            pages = [page.extract_text() or "" for page in reader.pages]
        except PyPdfError as exc:
            raise PdfExtractionError(f"pypdf could not read {pdf_path}: {exc}") from exc
        return "\n".join(pages)
