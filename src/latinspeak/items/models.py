"""Lesson item model."""

from dataclasses import dataclass, field

from ..dialects import AssetKind, Dialect


@dataclass
class LessonItem:
    """A lesson item as seen by the audio subsystem.

    Attributes:
        id: Item identifier
        latin: Latin text of the item
        kind: Item kind from the lesson schema ("vocab", "sentence", ...)
        media: Denormalized media shortcuts, e.g. ``{"audio_classical": url}``
    """

    id: str
    latin: str
    kind: str = "vocab"
    media: dict = field(default_factory=dict)

    @property
    def asset_kind(self) -> AssetKind:
        """Vocabulary items are spoken as words, everything else as sentences."""
        return AssetKind.WORD if self.kind == "vocab" else AssetKind.SENTENCE

    def audio_url(self, dialect: Dialect) -> str | None:
        return self.media.get(dialect.media_key) or None
