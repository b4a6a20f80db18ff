"""Latin pronunciation dialects and related request enums."""

from enum import Enum


class Dialect(str, Enum):
    """Historical pronunciation convention used for a request."""

    CLASSICAL = "classical"
    ECCLESIASTICAL = "ecclesiastical"

    @property
    def media_key(self) -> str:
        """Name of the lesson item media field holding this dialect's audio URL."""
        return f"audio_{self.value}"

    @classmethod
    def parse(cls, value: "str | Dialect") -> "Dialect":
        """Convert a request value to a Dialect.

        Raises:
            ValueError: If value does not name a known dialect
        """
        if isinstance(value, Dialect):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(d.value for d in cls)
            raise ValueError(
                f"Unknown dialect '{value}'. Expected one of: {allowed}"
            ) from None


class AssetKind(str, Enum):
    """Granularity of a synthesized clip."""

    WORD = "word"
    SENTENCE = "sentence"

    @classmethod
    def parse(cls, value: "str | AssetKind") -> "AssetKind":
        if isinstance(value, AssetKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown kind '{value}'. Expected 'word' or 'sentence'"
            ) from None
