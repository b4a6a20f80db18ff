"""Abstract base class for speech-synthesis providers.

This module defines the interface that all providers must implement, so the
orchestrator only ever deals with request shaping, never with a vendor SDK.
"""

from abc import ABC, abstractmethod

from ..tts.models import VoiceProfile


class TTSProvider(ABC):
    """Abstract base class for speech-synthesis providers.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,       # Unique identifier for the voice
            "name": str,     # Human-readable name for the voice
            "provider": str  # Name of the provider (e.g., "elevenlabs")
        }
    """

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        profile: VoiceProfile,
        model_id: str | None = None,
        speed: float = 1.0,
        pronunciation: str | None = None,
    ) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: Normalized Latin text to speak
            profile: Dialect voice profile (voice id and quality settings)
            model_id: Model override; the profile's model when None
            speed: Speaking speed multiplier
            pronunciation: IPA transcript of text, usable as a pronunciation hint

        Returns:
            Encoded audio (MP3)

        Raises:
            SynthesisProviderError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Raises:
            SynthesisProviderError: If voice listing fails
        """
        pass
