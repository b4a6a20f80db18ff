"""Core functionality for latinspeak - wires configuration into the pipeline."""

import logging
from dataclasses import replace

from .cache.storage import AudioCacheStore
from .config import LatinspeakConfig
from .dialects import Dialect
from .items.store import SQLiteItemStore
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .tts.errors import ProviderAuthError, SynthesisProviderError
from .tts.models import VOICE_PROFILES, VoiceProfile
from .tts.pipeline import SynthesisOrchestrator

logger = logging.getLogger(__name__)


def voice_profiles(config: LatinspeakConfig) -> dict[Dialect, VoiceProfile]:
    """Built-in voice profiles with the configured per-dialect overrides applied."""
    profiles = dict(VOICE_PROFILES)
    for dialect, override in config.tts.voices.items():
        changes = {}
        if override.voice_id:
            changes["voice_id"] = override.voice_id
        if override.model_id:
            changes["model_id"] = override.model_id
        if changes:
            profiles[dialect] = replace(profiles[dialect], **changes)
            logger.debug(f"Voice override for {dialect.value}: {changes}")
    return profiles


def create_provider(config: LatinspeakConfig, name: str | None = None) -> TTSProvider:
    """Instantiate the configured speech-synthesis provider.

    Raises:
        KeyError: If provider not found
        ProviderAuthError: If the provider's credentials are missing
    """
    provider_name = name or config.tts.provider
    logger.debug(f"Creating provider {provider_name}")
    return ProviderRegistry.create(provider_name, phoneme_tags=config.tts.phoneme_tags)


def build_orchestrator(
    config: LatinspeakConfig,
    provider: TTSProvider | None = None,
    public_base_url: str | None = None,
) -> SynthesisOrchestrator:
    """Build an orchestrator with its store, provider and item store.

    Args:
        config: Loaded configuration
        provider: Provider instance; created from config when None
        public_base_url: URL prefix for cached audio, overriding the config

    Returns:
        Ready-to-use SynthesisOrchestrator
    """
    store = AudioCacheStore(
        config.storage.cache_dir,
        public_base_url=public_base_url or config.storage.public_base_url,
    )
    references = SQLiteItemStore(config.items.database)
    logger.debug(
        f"Cache at {config.storage.cache_dir}, items at {config.items.database}"
    )

    return SynthesisOrchestrator(
        store,
        provider or create_provider(config),
        references=references,
        voice_profiles=voice_profiles(config),
    )


async def list_available_voices(provider: TTSProvider) -> list[dict]:
    """List all available voices from a provider.

    Raises:
        ProviderAuthError: If API key is not configured
        SynthesisProviderError: If API call fails
    """
    try:
        return await provider.list_voices()
    except (ProviderAuthError, SynthesisProviderError):
        raise
    except Exception as e:
        raise SynthesisProviderError(f"Failed to list voices: {e}", None, e) from e
