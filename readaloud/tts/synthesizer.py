"""TTS synthesizer interfaces and Gemini-backed implementation.

Responsibilities:
- Define the protocol for chunk-level speech synthesis (text in, raw PCM out).
- Provide the Gemini-backed synthesizer with a fixed narrator voice.

A failed call raises; retries happen only on a later scheduler pass.
"""

from __future__ import annotations

from typing import Protocol

from .gemini_client import GeminiSpeechClient
from .voices import VoiceProfile, narrator_voice


class SpeechSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    def synthesize(self, text: str) -> bytes:
        """Return raw 16-bit mono PCM for one chunk or raise `ProviderError`."""


class GeminiTTSSynthesizer:
    """Gemini-backed synthesizer issuing one provider call per chunk."""

    def __init__(
        self,
        client: GeminiSpeechClient,
        model: str = "gemini-2.5-flash-preview-tts",
        voice: VoiceProfile | None = None,
    ) -> None:
        self.client = client
        self.model = model
        self.voice = voice if voice is not None else narrator_voice()

    def synthesize(self, text: str) -> bytes:
        """Synthesize one chunk with the narrator instruction prefix."""

        return self.client.generate_speech(
            model=self.model,
            voice=self.voice.provider_voice_id,
            prompt=self.voice.prompt_for(text),
        )
