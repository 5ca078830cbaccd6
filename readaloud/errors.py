"""Domain exceptions for pipeline, provider, and source diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a command cannot run a stage at all."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ProviderError(RuntimeError):
    """Raised when a synthesis provider request fails or returns no audio."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for row-level diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class SourceDocumentError(RuntimeError):
    """Raised when a source locator cannot be resolved to a supported document."""


class LedgerFormatError(RuntimeError):
    """Raised when the persisted ledger does not follow the fixed column layout."""
