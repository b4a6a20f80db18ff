"""Integration tests for the audio cache store with real SQLite and files."""

import sqlite3
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from latinspeak.cache.models import AudioAsset, storage_path_for
from latinspeak.cache.storage import AudioCacheStore
from latinspeak.dialects import AssetKind, Dialect
from latinspeak.tts.errors import CacheStoreError

FP = "ab" * 32


def make_asset(fingerprint: str = FP, dialect: Dialect = Dialect.CLASSICAL) -> AudioAsset:
    return AudioAsset(
        fingerprint=fingerprint,
        dialect=dialect,
        text="puella amat",
        storage_path=storage_path_for(dialect, fingerprint),
        public_url="",
        voice_model="eleven_multilingual_v2",
        speed=1.0,
        duration_ms=800,
        kind=AssetKind.SENTENCE,
        item_id="item-1",
        text_original="Puella amat.",
    )


class TestAudioCacheStoreIntegration:
    """Test insert/lookup round trips against a real database."""

    @pytest.mark.asyncio
    async def test_insert_then_lookup(self, audio_store: AudioCacheStore) -> None:
        """
        INVARIANT: A found metadata row always has a readable blob
        BREAKS: Cache hits return URLs that 404
        """
        stored = await audio_store.insert(make_asset(), b"mp3-bytes")
        found = await audio_store.lookup(FP)

        assert found is not None
        assert found.fingerprint == FP
        assert found.dialect is Dialect.CLASSICAL
        assert found.kind is AssetKind.SENTENCE
        assert found.text == "puella amat"
        assert found.text_original == "Puella amat."
        assert found.item_id == "item-1"
        assert found.language_code == "la"
        assert found.duration_ms == 800
        assert found.public_url == stored.public_url

        blob = audio_store.audio_dir / found.storage_path
        assert blob.read_bytes() == b"mp3-bytes"

    @pytest.mark.asyncio
    async def test_lookup_miss(self, audio_store: AudioCacheStore) -> None:
        assert await audio_store.lookup("0" * 64) is None

    @pytest.mark.asyncio
    async def test_duplicate_insert_rejected_blob_kept(
        self, audio_store: AudioCacheStore
    ) -> None:
        await audio_store.insert(make_asset(), b"first")

        with pytest.raises(CacheStoreError, match="already cached"):
            await audio_store.insert(make_asset(), b"second")

        assert await audio_store.lookup(FP) is not None

    @pytest.mark.asyncio
    async def test_missing_blob_is_a_miss(self, audio_store: AudioCacheStore) -> None:
        stored = await audio_store.insert(make_asset(), b"mp3")
        (audio_store.audio_dir / stored.storage_path).unlink()

        assert await audio_store.lookup(FP) is None

    @pytest.mark.asyncio
    async def test_database_failure_removes_blob(
        self, audio_store: AudioCacheStore
    ) -> None:
        asset = make_asset()

        with patch.object(
            audio_store,
            "_get_connection",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            with pytest.raises(CacheStoreError, match="Failed to cache audio"):
                await audio_store.insert(asset, b"mp3")

        assert not (audio_store.audio_dir / asset.storage_path).exists()

    @pytest.mark.asyncio
    async def test_failed_blob_write_leaves_no_partial_file(
        self, audio_store: AudioCacheStore
    ) -> None:
        """
        INVARIANT: A failed insert leaves nothing behind in the audio root
        BREAKS: Disk-full errors accumulate orphaned .part files
        """
        asset = make_asset()

        def write_then_fail(path: Path, data: bytes) -> int:
            with open(path, "wb") as fh:
                fh.write(data[:2])
            raise OSError(28, "No space left on device")

        with patch.object(Path, "write_bytes", write_then_fail):
            with pytest.raises(CacheStoreError, match="No space left on device"):
                await audio_store.insert(asset, b"mp3-bytes")

        blob = audio_store.audio_dir / asset.storage_path
        assert not blob.exists()
        assert list(blob.parent.iterdir()) == []
        assert await audio_store.lookup(FP) is None

    @pytest.mark.asyncio
    async def test_rows_survive_reopen(self, tmp_path: Path) -> None:
        first = AudioCacheStore(tmp_path / "cache")
        await first.insert(make_asset(), b"mp3")

        reopened = AudioCacheStore(tmp_path / "cache")

        assert await reopened.lookup(FP) is not None


class TestPublicUrls:
    """Test URL derivation and blob path resolution."""

    def test_base_url_prefix(self, tmp_path: Path) -> None:
        store = AudioCacheStore(tmp_path, public_base_url="https://cdn.example/audio/")

        assert store.resolve_public_url(make_asset()) == (
            f"https://cdn.example/audio/tts/classical/{FP}.mp3"
        )

    def test_file_uri_without_base_url(self, audio_store: AudioCacheStore) -> None:
        url = audio_store.resolve_public_url(make_asset())

        assert url.startswith("file://")
        assert url.endswith(f"/tts/classical/{FP}.mp3")

    @pytest.mark.asyncio
    async def test_blob_path(self, audio_store: AudioCacheStore) -> None:
        stored = await audio_store.insert(make_asset(), b"mp3")

        assert audio_store.blob_path(stored.storage_path).read_bytes() == b"mp3"
        assert audio_store.blob_path("tts/classical/missing.mp3") is None
        assert audio_store.blob_path("../cache.db") is None
