"""Pipeline orchestration for one ReadAloud invocation.

Responsibilities:
- Wire configuration into the ledger, document store, chunker, synthesizer,
  and stage scheduler.
- Run discovery, analysis, and generation individually or as one time-boxed
  invocation sharing a single deadline.
- Build the serving gate over the same ledger and store layout.
"""

from __future__ import annotations

from typing import Callable

from ..config import ProviderRuntimeConfig, ReadAloudConfig
from ..errors import PipelineStageError
from ..io.ledger import CsvLedger
from ..io.pdf_text_extractor import PdfTextExtractor
from ..io.storage import FilesystemDocumentStore
from ..serving.gate import ServingGate
from ..telemetry.logger import NullRunLogger, RunLogger
from ..text.chunking import Chunker
from ..tts.gemini_client import GeminiSpeechClient
from ..tts.rate_limiter import RateLimiter
from ..tts.synthesizer import GeminiTTSSynthesizer
from ..tts.voices import narrator_voice
from .discovery import DiscoveryStage
from .runtime import Deadline, PassReport
from .scheduler import StageScheduler


class ReadAloudPipeline:
    """Coordinate stage passes over one ledger and one audio root."""

    def __init__(self, config: ReadAloudConfig, run_logger: RunLogger | None = None) -> None:
        config.validate()
        self.config = config
        self.run_logger = run_logger if run_logger is not None else NullRunLogger()
        self.store = FilesystemDocumentStore(
            root=config.audio_root,
            source_folder_name=config.source_folder_name,
            public_base_url=config.public_base_url,
        )
        self.ledger = CsvLedger(config.ledger_path, run_logger=self.run_logger)
        self.chunker = Chunker(self.store, PdfTextExtractor(), run_logger=self.run_logger)

    def discover(self) -> PassReport:
        """Register new source documents as ledger rows."""

        stage = DiscoveryStage(ledger=self.ledger, store=self.store, run_logger=self.run_logger)
        return self._run_stage("discover", stage.run)

    def analyze(self) -> PassReport:
        """Record chunk counts for unanalyzed rows."""

        return self._run_stage("analyze", self._scheduler().run_analysis_pass)

    def generate(self, deadline: Deadline | None = None) -> PassReport:
        """Fill missing audio for analyzed rows until done or out of time."""

        active_deadline = deadline if deadline is not None else self.new_deadline()
        runtime = self._provider_runtime()
        client = GeminiSpeechClient(
            api_key=runtime.api_key,
            timeout_seconds=self.config.request_timeout_seconds,
            rate_limiter=RateLimiter.per_minute(self.config.requests_per_minute),
        )
        synthesizer = GeminiTTSSynthesizer(
            client, model=runtime.tts_model, voice=narrator_voice(runtime.tts_voice)
        )
        scheduler = self._scheduler(synthesizer)
        return self._run_stage(
            "generate", lambda: scheduler.run_generation_pass(active_deadline)
        )

    def run_all(self) -> list[PassReport]:
        """Run discovery, analysis, and generation under one invocation deadline."""

        deadline = self.new_deadline()
        self._provider_runtime()
        return [self.discover(), self.analyze(), self.generate(deadline)]

    def new_deadline(self) -> Deadline:
        return Deadline(budget_seconds=self.config.time_budget_seconds)

    def serving_gate(self) -> ServingGate:
        """Build a serving gate that reads the ledger fresh from disk."""

        return ServingGate(
            ledger=CsvLedger(self.config.ledger_path, run_logger=self.run_logger),
            store=self.store,
            run_logger=self.run_logger,
        )

    def _provider_runtime(self) -> ProviderRuntimeConfig:
        runtime = self.config.resolved_provider_runtime()
        if runtime.api_key is None:
            raise PipelineStageError(
                stage="config",
                detail="Audio generation requires a Gemini API key.",
                hint=(
                    "Set `GEMINI_API_KEY`, pass `--prompt-api-key`, or store one with "
                    "`readaloud credentials --set-api-key`."
                ),
            )
        return runtime

    def _run_stage(self, stage_name: str, action: Callable[[], PassReport]) -> PassReport:
        """Run one pass and log a stage failure before re-raising."""

        try:
            return action()
        except Exception as exc:
            self.run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise

    def _scheduler(self, synthesizer: GeminiTTSSynthesizer | None = None) -> StageScheduler:
        return StageScheduler(
            ledger=self.ledger,
            store=self.store,
            chunker=self.chunker,
            synthesizer=synthesizer,
            run_logger=self.run_logger,
        )

