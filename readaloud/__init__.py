"""Top-level package for ReadAloud.

ReadAloud turns enumerated-item PDF documents into per-item narration audio in
resumable, time-boxed passes over a CSV ledger, and serves finished documents
to authorized requesters. The main orchestration entry point is
`ReadAloudPipeline`.
"""

from .pipeline import ReadAloudPipeline

__all__ = ["ReadAloudPipeline", "__version__"]

__version__ = "0.1.0"
