"""Time-boxed stage scheduler driving the per-row state machine.

Responsibilities:
- Analysis pass: record the chunk count of every unanalyzed row.
- Generation pass: resolve or synthesize one artifact per chunk, in index
  order, and finalize a row only when every chunk has an artifact.
- Stop starting rows once the invocation deadline passes; never stop mid-row.

Row states::

    Discovered -> Analyzed -> (Generating <-> PartiallyGenerated) -> Complete

Faults are absorbed per row: source and provider faults defer the row to a later
pass, a chunk-count mismatch skips it with a diagnostic.
"""

from __future__ import annotations

from ..audio.wav import SPEECH_PCM_FORMAT, PcmFormat, encode_wav, read_wav_header
from ..errors import PipelineStageError, ProviderError, SourceDocumentError
from ..io.ledger import LedgerRepository
from ..io.storage import DocumentStore
from ..models.datatypes import ArtifactFolder, ChunkCount, LedgerRow, ManifestEntry, StoredFile
from ..telemetry.logger import NullRunLogger, RunLogger
from ..text.chunking import Chunker
from ..text.naming import (
    DEFAULT_NAMING_STRATEGIES,
    ArtifactResolver,
    NamingStrategy,
    candidate_artifact_names,
    document_stem,
)
from ..tts.synthesizer import SpeechSynthesizer
from .runtime import Deadline, PassReport


class StageScheduler:
    """Advance ledger rows through analysis and generation within a deadline."""

    def __init__(
        self,
        *,
        ledger: LedgerRepository,
        store: DocumentStore,
        chunker: Chunker,
        synthesizer: SpeechSynthesizer | None = None,
        resolver: ArtifactResolver | None = None,
        naming_strategies: tuple[NamingStrategy, ...] = DEFAULT_NAMING_STRATEGIES,
        pcm_format: PcmFormat = SPEECH_PCM_FORMAT,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._ledger = ledger
        self._store = store
        self._chunker = chunker
        self._synthesizer = synthesizer
        self._resolver = resolver if resolver is not None else ArtifactResolver(store)
        self._naming_strategies = naming_strategies
        self._pcm_format = pcm_format
        self._run_logger = run_logger if run_logger is not None else NullRunLogger()

    def run_analysis_pass(self) -> PassReport:
        """Chunk every unanalyzed row and persist its chunk count."""

        report = PassReport(stage="analyze")
        self._run_logger.log_stage_start(report.stage)
        try:
            for row in self._ledger.read_all():
                if not row.needs_analysis:
                    continue
                report.examined += 1
                try:
                    chunks = self._chunker.split(row.source_ref)
                except Exception as exc:
                    report.deferred += 1
                    self._run_logger.error(
                        report.stage,
                        "row_failed",
                        row=row.row_number,
                        error_type=type(exc).__name__,
                    )
                    continue
                if not chunks:
                    report.deferred += 1
                    self._run_logger.warning(
                        report.stage, "no_chunks", row=row.row_number, source=row.source_ref
                    )
                    continue
                self._ledger.write_row(row.with_chunk_count(len(chunks)))
                report.advanced += 1
                self._run_logger.info(
                    report.stage, "row_analyzed", row=row.row_number, chunks=len(chunks)
                )
        finally:
            self._ledger.flush()
        self._run_logger.log_stage_complete(report.stage, **report.as_log_context())
        return report

    def run_generation_pass(self, deadline: Deadline) -> PassReport:
        """Fill missing chunk audio row by row until done or out of time."""

        if self._synthesizer is None:
            raise PipelineStageError(
                stage="generate",
                detail="The generation pass needs a speech synthesizer.",
            )
        report = PassReport(stage="generate")
        self._run_logger.log_stage_start(report.stage)
        try:
            for row in self._ledger.read_all():
                if not row.needs_generation:
                    continue
                if deadline.expired():
                    report.halted = True
                    self._run_logger.warning(
                        report.stage,
                        "deadline_reached",
                        elapsed_seconds=f"{deadline.elapsed_seconds():.1f}",
                        next_row=row.row_number,
                    )
                    break
                report.examined += 1
                try:
                    outcome = self._generate_row(row)
                except Exception as exc:
                    outcome = "deferred"
                    self._run_logger.error(
                        report.stage,
                        "row_failed",
                        row=row.row_number,
                        error_type=type(exc).__name__,
                    )
                if outcome == "complete":
                    report.advanced += 1
                elif outcome == "skipped":
                    report.skipped += 1
                else:
                    report.deferred += 1
        finally:
            self._ledger.flush()
        self._run_logger.log_stage_complete(report.stage, **report.as_log_context())
        return report

    def _generate_row(self, row: LedgerRow) -> str:
        """Advance one row; return `complete`, `deferred`, or `skipped`."""

        if not isinstance(row.chunk_count, ChunkCount):
            return "skipped"
        expected = row.chunk_count.value
        try:
            document = self._store.resolve_source(row.source_ref)
            folder = self._store.artifact_folder(document_stem(document.name))
        except (SourceDocumentError, OSError) as exc:
            self._run_logger.warning(
                "generate", "source_unavailable", row=row.row_number, detail=str(exc)
            )
            return "deferred"

        chunks = self._chunker.split(row.source_ref)
        if len(chunks) != expected:
            self._run_logger.error(
                "generate",
                "chunk_count_mismatch",
                row=row.row_number,
                document=document.name,
                expected=expected,
                found=len(chunks),
            )
            return "skipped"

        self._run_logger.info(
            "generate", "row_started", row=row.row_number, document=document.name, chunks=expected
        )
        artifacts: list[StoredFile] = []
        for index, text in enumerate(chunks):
            artifact = self._artifact_for_chunk(row, folder, document.name, text, index)
            if artifact is None:
                self._run_logger.warning(
                    "generate",
                    "row_partial",
                    row=row.row_number,
                    ready=len(artifacts),
                    chunks=expected,
                )
                return "deferred"
            artifacts.append(artifact)

        entries = tuple(
            ManifestEntry(
                text=text,
                audio_url=self._store.download_url(artifact),
                audio_filename=artifact.name,
            )
            for text, artifact in zip(chunks, artifacts)
        )
        self._ledger.write_row(row.completed(entries))
        self._run_logger.info("generate", "row_completed", row=row.row_number, chunks=expected)
        return "complete"

    def _artifact_for_chunk(
        self,
        row: LedgerRow,
        folder: ArtifactFolder,
        document_name: str,
        text: str,
        index: int,
    ) -> StoredFile | None:
        """Reuse an artifact under any known name, else synthesize a new one."""

        canonical, *legacy = candidate_artifact_names(
            document_name, text, index, self._naming_strategies
        )
        existing = self._resolver.resolve(folder, canonical, legacy)
        if existing is not None:
            self._run_logger.info(
                "generate", "chunk_reused", row=row.row_number, chunk=index + 1, name=existing.name
            )
            return existing

        try:
            pcm = self._synthesizer.synthesize(text)
            container = encode_wav(pcm, self._pcm_format)
            artifact = self._store.save_artifact(folder, canonical, container)
        except (ProviderError, OSError) as exc:
            self._run_logger.error(
                "generate",
                "chunk_failed",
                row=row.row_number,
                chunk=index + 1,
                error_type=type(exc).__name__,
                failure_kind=getattr(exc, "failure_kind", "storage"),
            )
            return None

        self._run_logger.info(
            "generate",
            "chunk_generated",
            row=row.row_number,
            chunk=index + 1,
            name=artifact.name,
            duration_seconds=f"{read_wav_header(container).duration_seconds:.2f}",
        )
        return artifact
