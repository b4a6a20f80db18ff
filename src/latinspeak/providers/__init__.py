"""Speech-synthesis providers for latinspeak.

Providers register under a name so the backend named in the config file (or
on the command line) is resolved at runtime.
"""

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import TTSProvider

from .elevenlabs import ElevenLabsProvider

__all__ = ["ProviderRegistry"]


class ProviderRegistry:
    """Name to provider class mapping shared by the CLI and the server."""

    _providers: ClassVar[dict[str, type["TTSProvider"]]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["TTSProvider"]) -> None:
        """Register provider_class under name, replacing any earlier entry."""
        cls._providers[name] = provider_class

    @classmethod
    def get(cls, name: str) -> type["TTSProvider"]:
        """Look up a provider class.

        Raises:
            KeyError: If nothing is registered under name
        """
        if name not in cls._providers:
            available = ", ".join(cls.available()) or "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def create(cls, name: str, **options) -> "TTSProvider":
        """Instantiate the provider registered under name with options."""
        return cls.get(name)(**options)

    @classmethod
    def available(cls) -> list[str]:
        return sorted(cls._providers)


ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
