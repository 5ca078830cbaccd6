"""Gemini HTTP client for speech synthesis.

Responsibilities:
- Send one `generateContent` speech request per chunk to the Gemini REST API.
- Extract the inline base64 PCM payload and decode it.
- Raise classified provider exceptions; never return empty or fabricated audio.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
import socket
from typing import Any

import requests

from ..errors import ProviderError
from .rate_limiter import RateLimiter


class GeminiProviderError(ProviderError):
    """Raised when a Gemini request fails or returns no usable audio."""


class GeminiSpeechClient:
    """Minimal requests-based Gemini speech client."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 120.0,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize Gemini HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()

    def generate_speech(self, *, model: str, voice: str, prompt: str) -> bytes:
        """Return decoded PCM bytes for one narration prompt."""

        if not self.api_key:
            raise GeminiProviderError(
                "Missing Gemini API key. Set `GEMINI_API_KEY`, use `--api-key`, or "
                "`readaloud credentials --set-api-key`.",
                failure_kind="invalid_api_key",
            )

        payload = {
            "model": model,
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        }
        self.rate_limiter.acquire(f"gemini:tts:{model}")
        raw_payload = self._post_json(f"/models/{model}:generateContent", payload)
        return self._extract_audio(raw_payload)

    def _post_json(self, endpoint_path: str, payload: dict[str, Any]) -> bytes:
        """POST a JSON payload and map transport/HTTP failures to provider errors."""

        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            return bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Gemini request timed out."
            else:
                detail = f"Gemini request transport error: {self._short_message(str(exc))}"
            raise GeminiProviderError(detail, failure_kind=failure_kind) from exc

    @classmethod
    def _extract_audio(cls, raw_payload: bytes) -> bytes:
        """Decode `candidates[0].content.parts[0].inlineData.data` into PCM bytes."""

        try:
            payload = json.loads(raw_payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise GeminiProviderError(
                "Gemini returned invalid JSON payload.", failure_kind="malformed_audio"
            ) from exc

        audio_data: object = None
        try:
            audio_data = payload["candidates"][0]["content"]["parts"][0]["inlineData"]["data"]
        except (KeyError, IndexError, TypeError):
            audio_data = None
        if not isinstance(audio_data, str) or not audio_data:
            raise GeminiProviderError(
                "Gemini response was successful, but contained no audio data.",
                failure_kind="missing_audio",
            )

        try:
            pcm = base64.b64decode(audio_data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise GeminiProviderError(
                "Gemini audio payload is not valid base64.", failure_kind="malformed_audio"
            ) from exc
        if not pcm:
            raise GeminiProviderError(
                "Gemini audio payload is empty.", failure_kind="missing_audio"
            )
        return pcm

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact Google API-key-like tokens from provider error content."""

        return re.sub(r"\bAIza[0-9A-Za-z_-]{20,}\b", "[redacted-key]", text)

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize and cap provider message length."""

        compact = " ".join(cls._redact_sensitive_tokens(text).split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract `error.message` and `error.status` from a Gemini error body."""

        if not body:
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(body), None

        message: str | None = None
        provider_code: str | None = None
        error_payload = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error_payload, dict):
            status_value = error_payload.get("status")
            if isinstance(status_value, str) and status_value.strip():
                provider_code = status_value.strip()
            message_value = error_payload.get("message")
            if isinstance(message_value, str) and message_value.strip():
                message = message_value.strip()
        return cls._short_message(message if message is not None else body), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify Gemini HTTP errors into diagnostic kinds."""

        message_lower = provider_message.lower()
        code = provider_code.upper() if provider_code is not None else ""

        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if status_code == 429 or code == "RESOURCE_EXHAUSTED":
            return "insufficient_quota"
        if status_code == 404 or (code == "NOT_FOUND" and "model" in message_lower):
            return "invalid_model"
        if status_code in {408, 504} or code == "DEADLINE_EXCEEDED":
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> GeminiProviderError:
        """Convert HTTP errors into classified provider exceptions."""

        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = ""
        if response is not None:
            body = bytes(response.content).decode("utf-8", errors="replace").strip()
        provider_message, provider_code = cls._extract_provider_message(body)
        failure_kind = cls._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": "Gemini authentication failed",
            "insufficient_quota": "Gemini quota or rate limit exceeded",
            "invalid_model": "Gemini rejected the selected model",
            "timeout": "Gemini request timed out",
        }.get(failure_kind, "Gemini request failed")
        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."

        return GeminiProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )
