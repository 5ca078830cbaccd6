"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent the provider voice identity and the narration instruction.
- Decouple pipeline logic from provider-specific naming.
"""

from __future__ import annotations

from dataclasses import dataclass


_NEUTRAL_NARRATION_INSTRUCTION = (
    "Read the following text in a clear, neutral, and steady voice: "
)


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by TTS providers.

    Attributes:
        name: Human-readable profile name.
        provider_voice_id: Provider-native prebuilt voice identifier.
        instruction: Fixed prefix prepended to every chunk text.
    """

    name: str
    provider_voice_id: str
    instruction: str = _NEUTRAL_NARRATION_INSTRUCTION

    def prompt_for(self, text: str) -> str:
        """Wrap chunk text in the narration instruction."""

        return f"{self.instruction}{text}"


def narrator_voice(provider_voice_id: str = "Kore") -> VoiceProfile:
    """Return the neutral, steady narrator profile for a provider voice."""

    return VoiceProfile(name="neutral-narrator", provider_voice_id=provider_voice_id)
