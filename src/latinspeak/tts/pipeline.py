"""Synthesis orchestrator for latinspeak.

Coordinates the normalizer, fingerprinting, AudioCacheStore, the IPA
transducer, a TTSProvider and the item reference store into one
get-or-synthesize workflow.

Example:
    store = AudioCacheStore(cache_dir)
    orchestrator = SynthesisOrchestrator(store, ElevenLabsProvider())

    result = await orchestrator.get_or_synthesize("Puella amat", "classical")
    # SynthesisResult(url="file:///.../tts/classical/<sha256>.mp3", cached=False, duration_ms=800)

    result = await orchestrator.get_or_synthesize("Puella amat", "classical")
    # Same url, cached=True, no provider call
"""

import asyncio
import base64
import logging
import math
from dataclasses import dataclass
from typing import Any

from ..cache.fingerprint import fingerprint
from ..cache.models import AudioAsset, storage_path_for
from ..cache.storage import AudioCacheStore
from ..dialects import AssetKind, Dialect
from ..items.models import LessonItem
from ..items.store import ItemReferenceStore
from ..phonetics import normalize, transliterate
from ..providers.base import TTSProvider
from .errors import SynthesisProviderError, ValidationError
from .models import VOICE_PROFILES, VoiceProfile
from .singleflight import SingleFlight

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of a get-or-synthesize request.

    ``ephemeral`` marks an inline ``data:`` URL returned because caching
    failed; it is valid for this response only and is never propagated to
    lesson items.
    """

    url: str
    cached: bool
    duration_ms: int | None = None
    ephemeral: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "cached": self.cached, "duration_ms": self.duration_ms}


@dataclass(frozen=True)
class _Request:
    text: str
    text_original: str
    dialect: Dialect
    kind: AssetKind
    profile: VoiceProfile
    voice_model: str
    speed: float
    item_id: str | None


def estimate_duration_ms(text: str) -> int:
    """Estimate spoken duration from word count at a fixed Latin reading rate."""
    words = len(text.split(" "))
    return math.floor(words / WORDS_PER_MINUTE * 60_000 + 0.5)


def _data_url(audio: bytes) -> str:
    return "data:audio/mpeg;base64," + base64.b64encode(audio).decode("ascii")


class SynthesisOrchestrator:
    """Returns a playable URL for Latin text, synthesizing only on cache miss.

    Concurrent identical requests (same normalized text, dialect, model and
    speed) share one lookup-and-synthesis run. Cache-store and item-reference
    failures are logged and never fail a request; provider failures always do.
    """

    def __init__(
        self,
        store: AudioCacheStore,
        provider: TTSProvider,
        references: ItemReferenceStore | None = None,
        inflight: SingleFlight | None = None,
        voice_profiles: dict[Dialect, VoiceProfile] | None = None,
    ) -> None:
        """Initialize the orchestrator with its collaborators.

        Args:
            store: Audio cache store
            provider: Speech-synthesis provider
            references: Lesson item store for media URL propagation (optional)
            inflight: Deduplication group; a fresh one per orchestrator by default
            voice_profiles: Per-dialect voice profiles (defaults to VOICE_PROFILES)
        """
        self.store = store
        self.provider = provider
        self.references = references
        self.inflight = inflight or SingleFlight()
        self.voice_profiles = {**VOICE_PROFILES, **(voice_profiles or {})}
        self._background: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        """Number of distinct requests currently being resolved."""
        return len(self.inflight)

    async def get_or_synthesize(
        self,
        text: str | None,
        dialect: Dialect | str | None,
        kind: AssetKind | str = AssetKind.WORD,
        item_id: str | None = None,
        voice_model: str | None = None,
        speed: float | None = 1.0,
    ) -> SynthesisResult:
        """Return the URL of audio for text, synthesizing it if not cached.

        Args:
            text: Latin text to speak
            dialect: "classical" or "ecclesiastical"
            kind: "word" or "sentence"
            item_id: Lesson item whose media shortcut should point at the audio
            voice_model: Model override; the dialect profile's model when None
            speed: Speaking speed multiplier (1.0 when None)

        Returns:
            SynthesisResult with url, cached flag and estimated duration

        Raises:
            ValidationError: If required fields are missing or invalid
            SynthesisProviderError: If the provider could not synthesize audio
        """
        request = self._validate(text, dialect, kind, item_id, voice_model, speed)
        key = fingerprint(request.text, request.dialect, request.voice_model, request.speed)

        result = await self.inflight.do(key, lambda: self._resolve(key, request))

        if item_id and not result.ephemeral:
            self._propagate_later(item_id, request.dialect, result.url)
        return result

    async def get_item_audio(
        self, item: LessonItem, dialect: Dialect | str = Dialect.CLASSICAL
    ) -> str:
        """Return the item's audio URL, preferring its stored media shortcut.

        Vocabulary items are synthesized as words, all other items as sentences.

        Raises:
            ValidationError: If dialect is invalid or the item has no text
            SynthesisProviderError: If synthesis was needed and failed
        """
        resolved = self._parse_dialect(dialect)
        existing = item.audio_url(resolved)
        if existing:
            logger.debug(f"Item {item.id} already has {resolved.media_key}")
            return existing

        result = await self.get_or_synthesize(
            item.latin, resolved, kind=item.asset_kind, item_id=item.id
        )
        return result.url

    async def preload_item_audio(
        self, item: LessonItem, dialect: Dialect | str = Dialect.CLASSICAL
    ) -> None:
        """Warm the cache for an item; failures are logged, never raised."""
        try:
            await self.get_item_audio(item, dialect)
        except Exception as e:
            logger.warning(f"Failed to preload audio for item {item.id}: {e}")

    async def drain(self) -> None:
        """Wait for pending item reference updates to finish."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # --- internals ----------------------------------------------------------

    def _parse_dialect(self, dialect: Dialect | str) -> Dialect:
        try:
            return Dialect.parse(dialect)
        except ValueError as e:
            raise ValidationError(str(e)) from None

    def _validate(
        self,
        text: str | None,
        dialect: Dialect | str | None,
        kind: AssetKind | str,
        item_id: str | None,
        voice_model: str | None,
        speed: float | None,
    ) -> _Request:
        missing = [
            name
            for name, value in (("text", text), ("dialect", dialect))
            if value is None or not str(value).strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        resolved = self._parse_dialect(dialect)
        try:
            resolved_kind = AssetKind.parse(kind)
        except ValueError as e:
            raise ValidationError(str(e)) from None

        try:
            resolved_speed = 1.0 if speed is None else float(speed)
        except (TypeError, ValueError):
            raise ValidationError(f"speed must be a number, got {speed!r}") from None
        if not math.isfinite(resolved_speed) or resolved_speed <= 0:
            raise ValidationError(f"speed must be positive, got {speed!r}")

        normalized = normalize(text)
        if not normalized:
            raise ValidationError("Text contains no letters to synthesize")

        profile = self.voice_profiles[resolved]
        return _Request(
            text=normalized,
            text_original=text,
            dialect=resolved,
            kind=resolved_kind,
            profile=profile,
            voice_model=voice_model or profile.model_id,
            speed=resolved_speed,
            item_id=item_id,
        )

    async def _resolve(self, key: str, request: _Request) -> SynthesisResult:
        """Cache lookup, then synthesis and storage on a miss."""
        try:
            asset = await self.store.lookup(key)
        except Exception as e:
            logger.error(f"Cache lookup failed, treating as miss: {e}")
            asset = None

        if asset is not None:
            logger.info(
                f"Cache hit for '{request.text[:50]}' ({request.dialect.value}, {key[:12]})"
            )
            return SynthesisResult(
                url=self.store.resolve_public_url(asset),
                cached=True,
                duration_ms=asset.duration_ms,
            )

        logger.info(
            f"Cache miss for '{request.text[:50]}' ({request.dialect.value}, {key[:12]})"
        )
        transcript = transliterate(request.text, request.dialect)
        logger.info(f"Synthesizing '{request.text[:50]}' -> IPA '{transcript[:80]}'")

        try:
            audio = await self.provider.synthesize(
                request.text,
                request.profile,
                model_id=request.voice_model,
                speed=request.speed,
                pronunciation=transcript,
            )
        except SynthesisProviderError:
            raise
        except Exception as e:
            raise SynthesisProviderError(f"Speech synthesis failed: {e}", None, e) from e

        duration_ms = estimate_duration_ms(request.text)
        asset = AudioAsset(
            fingerprint=key,
            dialect=request.dialect,
            text=request.text,
            storage_path=storage_path_for(request.dialect, key),
            public_url="",
            voice_model=request.voice_model,
            speed=request.speed,
            duration_ms=duration_ms,
            kind=request.kind,
            item_id=request.item_id,
            text_original=request.text_original,
        )

        try:
            stored = await self.store.insert(asset, audio)
        except Exception as e:
            # Degraded: the caller still gets audio, later requests re-synthesize
            logger.error(f"Failed to cache audio {key[:12]}: {e}")
            return SynthesisResult(
                url=_data_url(audio),
                cached=False,
                duration_ms=duration_ms,
                ephemeral=True,
            )

        return SynthesisResult(
            url=self.store.resolve_public_url(stored),
            cached=False,
            duration_ms=duration_ms,
        )

    def _propagate_later(self, item_id: str, dialect: Dialect, url: str) -> None:
        if self.references is None:
            return
        task = asyncio.create_task(self._propagate(item_id, dialect, url))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _propagate(self, item_id: str, dialect: Dialect, url: str) -> None:
        """Point the item's media shortcut at url. Logs instead of raising."""
        key = dialect.media_key
        try:
            media = await self.references.get_media(item_id)
            if media is None:
                logger.warning(f"Cannot set {key}: item {item_id} not found")
                return
            if media.get(key) == url:
                return
            await self.references.set_media_field(item_id, key, url)
            logger.info(f"Updated item {item_id} {key}")
        except Exception as e:
            logger.warning(f"Failed to update {key} for item {item_id}: {e}")
