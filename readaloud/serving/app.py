"""FastAPI surface for the serving gate.

Routes:
- `POST /api/assessment`: `{email, password}` -> document, file name, and audio manifest.
- `GET /api/audio/{file_id}`: base64 bytes of one generated audio artifact.
- `GET /health`: liveness probe.
"""

from __future__ import annotations

from typing import Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .gate import AssessmentFound, AudioFound, FetchFailed, NotFound, NotReady, ServingGate


class FetchRequest(BaseModel):
    email: str
    password: str


_STATUS_CODES = {
    AssessmentFound: 200,
    AudioFound: 200,
    NotFound: 404,
    NotReady: 409,
    FetchFailed: 500,
}


def _respond(result: object) -> JSONResponse:
    return JSONResponse(status_code=_STATUS_CODES[type(result)], content=result.to_payload())


def create_app(
    gate_factory: Callable[[], ServingGate],
    allowed_origins: list[str] | None = None,
) -> FastAPI:
    """Build the HTTP app; `gate_factory` is called once per request."""

    app = FastAPI(
        title="ReadAloud",
        description="Serve assessment documents with their generated narration.",
    )
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/assessment")
    def fetch_assessment(request: FetchRequest) -> JSONResponse:
        return _respond(gate_factory().fetch(request.email, request.password))

    @app.get("/api/audio/{file_id:path}")
    def fetch_audio(file_id: str) -> JSONResponse:
        return _respond(gate_factory().fetch_audio(file_id))

    return app
