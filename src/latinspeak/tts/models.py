"""TTS data models with validation."""

from dataclasses import dataclass, field

from ..dialects import Dialect

DEFAULT_MODEL = "eleven_multilingual_v2"
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"


@dataclass(frozen=True)
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.75
    similarity_boost: float = 0.8
    style: float = 0.2
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self, speed: float = 1.0) -> dict:
        """Provider request payload for these settings at the given speed."""
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
            "speed": speed,
        }


@dataclass(frozen=True)
class VoiceProfile:
    """Voice used for one dialect.

    Args:
        voice_id: Provider voice identifier
        model_id: Default synthesis model (overridable per request)
        settings: Voice quality parameters
        output_format: Requested audio encoding
    """

    voice_id: str
    model_id: str = DEFAULT_MODEL
    settings: VoiceSettings = field(default_factory=VoiceSettings)
    output_format: str = DEFAULT_OUTPUT_FORMAT

    def __post_init__(self) -> None:
        """Validate voice profile."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")
        if not self.model_id or not self.model_id.strip():
            raise ValueError("model_id cannot be empty")


VOICE_PROFILES: dict[Dialect, VoiceProfile] = {
    # Clear, scholarly delivery
    Dialect.CLASSICAL: VoiceProfile(
        voice_id="21m00Tcm4TlvDq8ikWAM",
        settings=VoiceSettings(stability=0.75, similarity_boost=0.8, style=0.2),
    ),
    # Warmer and slightly more expressive for church Latin
    Dialect.ECCLESIASTICAL: VoiceProfile(
        voice_id="AZnzlk1XvdvUeBnXmlld",
        settings=VoiceSettings(stability=0.8, similarity_boost=0.75, style=0.3),
    ),
}
