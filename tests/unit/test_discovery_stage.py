"""Unit tests for source-document discovery."""

from __future__ import annotations

from pathlib import Path

from readaloud.io.ledger import CsvLedger
from readaloud.io.storage import FilesystemDocumentStore
from readaloud.pipeline.discovery import DiscoveryStage


def test_discovery_appends_one_row_per_pdf_and_is_idempotent(
    tmp_path: Path, store, write_source
) -> None:
    """Re-running discovery should never duplicate rows for known locators."""

    write_source("Quiz B.pdf", "1. b")
    write_source("Quiz A.pdf", "1. a")
    write_source("notes.txt", "ignored")
    ledger_path = tmp_path / "ledger.csv"

    first = DiscoveryStage(ledger=CsvLedger(ledger_path), store=store).run()
    second = DiscoveryStage(ledger=CsvLedger(ledger_path), store=store).run()

    assert first.advanced == 2
    assert second.advanced == 0
    assert second.examined == 2
    rows = CsvLedger(ledger_path).read_all()
    assert [row.source_ref.rsplit("/", 1)[-1] for row in rows] == ["Quiz%20A.pdf", "Quiz%20B.pdf"]
    assert all(row.needs_analysis for row in rows)


def test_discovery_without_source_folder_leaves_ledger_untouched(tmp_path: Path) -> None:
    """A missing source folder should end the pass with an empty report."""

    ledger_path = tmp_path / "ledger.csv"
    store = FilesystemDocumentStore(tmp_path / "empty-root")

    report = DiscoveryStage(ledger=CsvLedger(ledger_path), store=store).run()

    assert report.examined == 0
    assert report.advanced == 0
    assert not ledger_path.exists()
