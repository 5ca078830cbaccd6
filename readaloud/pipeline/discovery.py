"""Discovery stage: register newly available source documents as ledger rows."""

from __future__ import annotations

from ..errors import SourceDocumentError
from ..io.ledger import LedgerRepository
from ..io.storage import DocumentStore
from ..telemetry.logger import NullRunLogger, RunLogger
from .runtime import PassReport


class DiscoveryStage:
    """Append one row per source document whose locator is not in the ledger."""

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

    def run(self) -> PassReport:
        """Run one idempotent discovery pass."""

        report = PassReport(stage="discover")
        self._run_logger.log_stage_start(report.stage)
        try:
            documents = self._store.list_source_documents()
        except (SourceDocumentError, OSError) as exc:
            self._run_logger.error(
                report.stage, "source_folder_unavailable", detail=str(exc)
            )
            self._run_logger.log_stage_complete(report.stage, **report.as_log_context())
            return report

        known = {row.source_ref for row in self._ledger.read_all()}
        for document in documents:
            report.examined += 1
            locator = self._store.locator_for(document)
            if locator in known:
                continue
            self._ledger.append_row(locator)
            known.add(locator)
            report.advanced += 1
            self._run_logger.info(report.stage, "source_added", document=document.name)

        if report.advanced:
            self._ledger.flush()
        self._run_logger.log_stage_complete(report.stage, **report.as_log_context())
        return report
