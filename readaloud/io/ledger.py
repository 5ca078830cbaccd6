"""Ledger repository for per-document processing rows.

Responsibilities:
- Read the whole tabular ledger at pass start and hand out typed `LedgerRow`s.
- Buffer per-row writes and flush them atomically at a pass boundary.
- Encode/decode row cells by column meaning in a fixed column order.

Key types:
- `LedgerRepository`: protocol every stage receives explicitly.
- `CsvLedger`: CSV-file implementation with one header row.
"""

from __future__ import annotations

import csv
import json
import os
from pathlib import Path
from typing import Protocol

from ..errors import LedgerFormatError
from ..models.datatypes import (
    AccessControl,
    AudioManifest,
    ChunkCount,
    LedgerRow,
    ManifestEntry,
    NoManifest,
    Unanalyzed,
)
from ..parsing import (
    normalize_optional_string,
    parse_non_negative_count,
    parse_permissive_boolean,
    split_identities,
)
from ..telemetry.logger import NullRunLogger, RunLogger


LEDGER_COLUMNS = (
    "source_ref",
    "chunk_count",
    "audio_manifest",
    "is_complete",
    "group_label",
    "responsible_label",
    "secret",
    "authorized_identities",
)
_COLUMN_INDEX = {name: index for index, name in enumerate(LEDGER_COLUMNS)}


class LedgerRepository(Protocol):
    """Explicit ledger handle passed into every stage."""

    def read_all(self) -> list[LedgerRow]:
        """Return every data row in ledger order."""

    def write_row(self, row: LedgerRow) -> None:
        """Record an updated row; visible to readers after `flush()`."""

    def append_row(self, source_ref: str) -> LedgerRow:
        """Append a new, unanalyzed row for a source locator."""

    def flush(self) -> None:
        """Persist buffered writes."""


def parse_manifest_cell(raw: str) -> AudioManifest | None:
    """Parse a manifest cell; return `None` when blank or malformed."""

    text = normalize_optional_string(raw)
    if text is None:
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, list):
        return None

    entries: list[ManifestEntry] = []
    for item in payload:
        if not isinstance(item, dict):
            return None
        text_value = item.get("text")
        url_value = item.get("audioUrl")
        name_value = item.get("audioFilename")
        if not all(isinstance(value, str) for value in (text_value, url_value, name_value)):
            return None
        entries.append(
            ManifestEntry(text=text_value, audio_url=url_value, audio_filename=name_value)
        )
    return AudioManifest(entries=tuple(entries))


def format_manifest_cell(manifest: AudioManifest) -> str:
    """Serialize a manifest as indented JSON for the single manifest column."""

    return json.dumps(manifest.as_payload(), ensure_ascii=False, indent=2)


class CsvLedger:
    """CSV-backed ledger with buffered per-row writes and atomic flush."""

    def __init__(self, path: Path, run_logger: RunLogger | None = None) -> None:
        """Initialize the ledger for a CSV path; the file may not exist yet."""

        self.path = path
        self._run_logger = run_logger if run_logger is not None else NullRunLogger()
        self._header: list[str] = list(LEDGER_COLUMNS)
        self._rows: list[LedgerRow] | None = None
        self._trailing_cells: dict[int, list[str]] = {}
        self._dirty = False

    def read_all(self) -> list[LedgerRow]:
        """Return all rows, loading the file on first access."""

        return list(self._loaded_rows())

    def write_row(self, row: LedgerRow) -> None:
        """Replace the buffered row at `row.row_number`."""

        rows = self._loaded_rows()
        if not 1 <= row.row_number <= len(rows):
            raise IndexError(f"Ledger has no data row {row.row_number}.")
        rows[row.row_number - 1] = row
        self._dirty = True

    def append_row(self, source_ref: str) -> LedgerRow:
        """Append an unanalyzed row and return it."""

        rows = self._loaded_rows()
        row = LedgerRow(row_number=len(rows) + 1, source_ref=source_ref)
        rows.append(row)
        self._dirty = True
        return row

    def flush(self) -> None:
        """Write buffered rows to disk atomically when anything changed."""

        if not self._dirty or self._rows is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        with temp_path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(self._header)
            for row in self._rows:
                writer.writerow(
                    self._encode_row(row) + self._trailing_cells.get(row.row_number, [])
                )
        os.replace(temp_path, self.path)
        self._dirty = False

    def _loaded_rows(self) -> list[LedgerRow]:
        if self._rows is None:
            self._rows = self._load()
        return self._rows

    def _load(self) -> list[LedgerRow]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8", newline="") as handle:
            records = list(csv.reader(handle))
        if not records:
            return []

        header = [cell.strip() for cell in records[0]]
        if header[: len(LEDGER_COLUMNS)] != list(LEDGER_COLUMNS):
            raise LedgerFormatError(
                f"Ledger `{self.path}` header must start with: {', '.join(LEDGER_COLUMNS)}."
            )
        self._header = header

        rows: list[LedgerRow] = []
        for row_number, cells in enumerate(records[1:], start=1):
            padded = list(cells) + [""] * (len(LEDGER_COLUMNS) - len(cells))
            self._trailing_cells[row_number] = padded[len(LEDGER_COLUMNS) :]
            rows.append(self._decode_row(row_number, padded[: len(LEDGER_COLUMNS)]))
        return rows

    def _decode_row(self, row_number: int, cells: list[str]) -> LedgerRow:
        """Decode one row, coercing inconsistent cells to the nearest legal state."""

        def cell(name: str) -> str:
            return cells[_COLUMN_INDEX[name]]

        source_ref = normalize_optional_string(cell("source_ref")) or ""
        access = AccessControl(
            group_label=cell("group_label").strip(),
            responsible_label=cell("responsible_label").strip(),
            secret=cell("secret").strip(),
            authorized_identities=split_identities(cell("authorized_identities")),
        )

        raw_count = normalize_optional_string(cell("chunk_count"))
        count = parse_non_negative_count(raw_count)
        if raw_count is not None and count is None:
            self._run_logger.warning(
                "ledger", "invalid_chunk_count", row=row_number, value=raw_count
            )
        chunk_count = ChunkCount(count) if count else Unanalyzed()

        manifest = parse_manifest_cell(cell("audio_manifest"))
        if manifest is None and normalize_optional_string(cell("audio_manifest")) is not None:
            self._run_logger.warning("ledger", "invalid_manifest", row=row_number)
        if manifest is not None and isinstance(chunk_count, Unanalyzed):
            self._run_logger.warning("ledger", "manifest_without_count", row=row_number)
            manifest = None

        is_complete = parse_permissive_boolean(cell("is_complete")) or False
        if is_complete and not self._manifest_covers(manifest, chunk_count):
            self._run_logger.warning("ledger", "complete_flag_without_manifest", row=row_number)
            is_complete = False

        return LedgerRow(
            row_number=row_number,
            source_ref=source_ref,
            chunk_count=chunk_count,
            manifest=manifest if manifest is not None else NoManifest(),
            is_complete=is_complete,
            access=access,
        )

    @staticmethod
    def _manifest_covers(manifest: AudioManifest | None, chunk_count: object) -> bool:
        return (
            manifest is not None
            and isinstance(chunk_count, ChunkCount)
            and len(manifest.entries) == chunk_count.value
            and all(entry.audio_url for entry in manifest.entries)
        )

    @staticmethod
    def _encode_row(row: LedgerRow) -> list[str]:
        count = row.chunk_count.value if isinstance(row.chunk_count, ChunkCount) else ""
        manifest = (
            format_manifest_cell(row.manifest)
            if isinstance(row.manifest, AudioManifest)
            else ""
        )
        return [
            row.source_ref,
            str(count),
            manifest,
            "true" if row.is_complete else "false",
            row.access.group_label,
            row.access.responsible_label,
            row.access.secret,
            ", ".join(row.access.authorized_identities),
        ]
