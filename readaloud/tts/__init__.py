"""Text-to-speech provider abstractions.

This package contains the voice profile, provider client, request pacing, and
synthesizer used by the generation pass.
"""

from .gemini_client import GeminiProviderError, GeminiSpeechClient
from .rate_limiter import RateLimiter
from .synthesizer import GeminiTTSSynthesizer, SpeechSynthesizer
from .voices import VoiceProfile, narrator_voice

__all__ = [
    "GeminiProviderError",
    "GeminiSpeechClient",
    "GeminiTTSSynthesizer",
    "RateLimiter",
    "SpeechSynthesizer",
    "VoiceProfile",
    "narrator_voice",
]
