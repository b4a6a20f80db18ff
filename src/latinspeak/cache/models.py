"""Data models for the audio cache."""

from dataclasses import dataclass, field
from datetime import datetime

from ..dialects import AssetKind, Dialect

LANGUAGE_CODE = "la"


@dataclass(frozen=True)
class AudioAsset:
    """Metadata row for one synthesized clip.

    Attributes:
        fingerprint: Cache key derived from (text, dialect, voice_model, speed)
        dialect: Pronunciation dialect the clip was synthesized in
        text: Normalized text that was synthesized
        storage_path: Blob location relative to the store's audio root
        public_url: URL recorded at insert time; readers should resolve a
            fresh one through the store instead of trusting it
        voice_model: Synthesis model identifier
        speed: Speaking speed multiplier
        duration_ms: Estimated clip duration
        kind: Word or sentence clip
        item_id: Lesson item that first requested the clip, if any
        text_original: Caller's text before normalization
        language_code: Always "la"
        created_at: When the row was written
    """

    fingerprint: str
    dialect: Dialect
    text: str
    storage_path: str
    public_url: str
    voice_model: str
    speed: float
    duration_ms: int
    kind: AssetKind = AssetKind.WORD
    item_id: str | None = None
    text_original: str | None = None
    language_code: str = LANGUAGE_CODE
    created_at: datetime = field(default_factory=datetime.now)


def storage_path_for(dialect: Dialect, fingerprint: str) -> str:
    """Blob path for a fingerprint, grouped by dialect."""
    return f"tts/{dialect.value}/{fingerprint}.mp3"
