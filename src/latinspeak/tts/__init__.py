"""TTS package for latinspeak.

Error taxonomy, voice profiles and the synthesis orchestrator
(``latinspeak.tts.pipeline``).
"""

from .errors import (
    CacheStoreError,
    LatinspeakError,
    ProviderAuthError,
    ReferencePropagationError,
    SynthesisProviderError,
    ValidationError,
)
from .models import VOICE_PROFILES, VoiceProfile, VoiceSettings

__all__ = [
    "VOICE_PROFILES",
    "CacheStoreError",
    "LatinspeakError",
    "ProviderAuthError",
    "ReferencePropagationError",
    "SynthesisProviderError",
    "ValidationError",
    "VoiceProfile",
    "VoiceSettings",
]
