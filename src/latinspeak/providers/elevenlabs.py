"""ElevenLabs speech-synthesis provider implementation."""

import asyncio
import logging
import os
import re

from elevenlabs.client import ElevenLabs

from ..tts.errors import ProviderAuthError, SynthesisProviderError
from ..tts.models import VoiceProfile
from ..tts.ssml import phoneme_markup
from .base import TTSProvider

logger = logging.getLogger(__name__)

_HTTP_STATUS = re.compile(r"\b([45]\d\d)\b")


def _classify_error(e: Exception, action: str) -> SynthesisProviderError:
    """Map an SDK or transport exception onto the provider error taxonomy."""
    status = getattr(e, "status_code", None)
    message = str(e)
    if not isinstance(status, int):
        # Older SDK releases only carry the status in the message
        match = _HTTP_STATUS.search(message)
        status = int(match.group(1)) if match else None

    if status == 401 or "unauthorized" in message.lower():
        return ProviderAuthError(f"Authentication failed: {e}", e)
    if status == 429:
        return SynthesisProviderError(f"Rate limit exceeded: {e}", 429, e)
    if status is not None and status >= 500:
        return SynthesisProviderError(f"Server error: {e}", status, e)
    return SynthesisProviderError(f"{action}: {e}", status, e)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    The SDK client is synchronous; every call runs in a worker thread so the
    event loop keeps serving other requests.
    """

    def __init__(self, api_key: str | None = None, phoneme_tags: bool = False) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            phoneme_tags: Send the IPA transcript as per-word SSML phoneme
                    tags instead of plain text.

        Raises:
            ProviderAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise ProviderAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise ProviderAuthError(
                f"Failed to initialize ElevenLabs client: {e}", e
            ) from e

        self.phoneme_tags = phoneme_tags

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    async def synthesize(
        self,
        text: str,
        profile: VoiceProfile,
        model_id: str | None = None,
        speed: float = 1.0,
        pronunciation: str | None = None,
    ) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            profile: Voice profile for the request's dialect
            model_id: ElevenLabs model ID; the profile's model when None
            speed: Speaking speed multiplier
            pronunciation: IPA transcript used for phoneme tags

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            SynthesisProviderError: If API call fails
            ProviderAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        request_text = text.strip()
        if self.phoneme_tags and pronunciation:
            request_text = phoneme_markup(request_text, pronunciation)
        elif pronunciation:
            logger.debug(f"Pronunciation hint (not sent): {pronunciation}")

        model = model_id or profile.model_id

        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=request_text,
                voice_id=profile.voice_id,
                model_id=model,
                voice_settings=profile.settings.to_dict(speed),
                output_format=profile.output_format,
            )
            # Collect all audio chunks
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise _classify_error(e, "API call failed") from e

        if not audio_bytes:
            raise SynthesisProviderError("No audio data received from API")

        logger.debug(
            f"ElevenLabs returned {len(audio_bytes)} bytes "
            f"(voice={profile.voice_id}, model={model})"
        )
        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Returns:
            List of voice dictionaries with id, name, and provider fields

        Raises:
            SynthesisProviderError: If API call fails
            ProviderAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            return [
                {"id": voice.voice_id, "name": voice.name, "provider": "elevenlabs"}
                for voice in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _classify_error(e, "Failed to list voices") from e

        self._voices_cache = voices
        return voices
