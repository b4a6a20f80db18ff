"""SQLite + filesystem audio cache store."""

import asyncio
import logging
import os
import sqlite3
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from ..dialects import AssetKind, Dialect
from ..tts.errors import CacheStoreError
from .models import AudioAsset

logger = logging.getLogger(__name__)


class AudioCacheStore:
    """Append-only store of synthesized clips keyed by fingerprint.

    Audio bytes live on the filesystem under ``<cache_dir>/audio/`` and
    metadata rows live in ``<cache_dir>/cache.db``. The blob is written before
    its row, so a row that can be found always has a readable blob. Nothing is
    ever updated or evicted.
    """

    def __init__(self, cache_dir: Path, public_base_url: str | None = None):
        """Initialize the store, creating directories and schema as needed.

        Args:
            cache_dir: Directory holding the database and the audio root
            public_base_url: Prefix for public URLs. When empty, URLs are
                ``file://`` URIs of the stored blobs.
        """
        self.cache_dir = cache_dir
        cache_dir.mkdir(parents=True, exist_ok=True)

        self.audio_dir = cache_dir / "audio"
        self.audio_dir.mkdir(exist_ok=True)

        self.public_base_url = public_base_url or None
        self.db_path = cache_dir / "cache.db"

        self._init_db_with_wal()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection with WAL mode for concurrency."""
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=30.0,
            check_same_thread=False,  # used from worker threads
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    def _init_db_with_wal(self) -> None:
        """Initialize database with WAL mode and schema."""
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS audio_assets (
                    fingerprint TEXT PRIMARY KEY,
                    language_code TEXT NOT NULL,
                    dialect TEXT NOT NULL,
                    text TEXT NOT NULL,
                    text_original TEXT,
                    storage_path TEXT NOT NULL,
                    storage_url TEXT NOT NULL,
                    voice_model TEXT NOT NULL,
                    speed REAL NOT NULL,
                    duration_ms INTEGER NOT NULL,
                    item_id TEXT,
                    kind TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    # --- public API ---------------------------------------------------------

    async def lookup(self, fingerprint: str) -> AudioAsset | None:
        """Find the asset cached under fingerprint.

        Returns:
            The asset, or None on a miss. A row whose blob has gone missing
            counts as a miss.
        """
        return await asyncio.to_thread(self._lookup_sync, fingerprint)

    async def insert(self, asset: AudioAsset, audio_bytes: bytes) -> AudioAsset:
        """Persist audio bytes and the asset's metadata row.

        Args:
            asset: Metadata to store; its public_url is replaced by the URL
                resolved for its storage path
            audio_bytes: Encoded audio

        Returns:
            The stored asset

        Raises:
            CacheStoreError: If the blob or the row could not be written
        """
        return await asyncio.to_thread(self._insert_sync, asset, audio_bytes)

    def resolve_public_url(self, asset: AudioAsset) -> str:
        """Derive the public URL from the asset's storage path.

        Always recomputed, so a change of URL scheme never requires
        invalidating cached rows.
        """
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{asset.storage_path}"
        return (self.audio_dir / asset.storage_path).resolve().as_uri()

    def blob_path(self, storage_path: str) -> Path | None:
        """Resolve a storage path to a file inside the audio root.

        Returns:
            Absolute path of an existing blob, or None when the path is
            missing or escapes the audio root
        """
        root = self.audio_dir.resolve()
        candidate = (root / storage_path).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            return None
        return candidate

    # --- sync workers -------------------------------------------------------

    def _lookup_sync(self, fingerprint: str) -> AudioAsset | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM audio_assets WHERE fingerprint = ?", (fingerprint,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None

        asset = self._row_to_asset(row)
        if not (self.audio_dir / asset.storage_path).exists():
            logger.warning(
                f"Cache corruption: metadata exists but audio file missing: "
                f"{asset.storage_path}"
            )
            return None
        return asset

    def _insert_sync(self, asset: AudioAsset, audio_bytes: bytes) -> AudioAsset:
        blob = self.audio_dir / asset.storage_path
        partial = blob.with_name(blob.name + ".part")
        blob_written = False
        try:
            blob.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(audio_bytes)
            os.replace(partial, blob)
            blob_written = True

            stored = replace(asset, public_url=self.resolve_public_url(asset))

            conn = self._get_connection()
            try:
                conn.execute(
                    """
                    INSERT INTO audio_assets (
                        fingerprint, language_code, dialect, text, text_original,
                        storage_path, storage_url, voice_model, speed, duration_ms,
                        item_id, kind, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        stored.fingerprint,
                        stored.language_code,
                        stored.dialect.value,
                        stored.text,
                        stored.text_original,
                        stored.storage_path,
                        stored.public_url,
                        stored.voice_model,
                        stored.speed,
                        stored.duration_ms,
                        stored.item_id,
                        stored.kind.value,
                        stored.created_at.isoformat(),
                    ),
                )
                conn.commit()
            finally:
                conn.close()

        except sqlite3.IntegrityError as e:
            # Same fingerprint means same content; the blob we wrote is valid
            raise CacheStoreError(
                f"Audio asset {asset.fingerprint[:12]} is already cached", e
            ) from e
        except (OSError, sqlite3.Error) as e:
            leftovers = [partial, blob] if blob_written else [partial]
            for path in leftovers:
                if not path.exists():
                    continue
                try:
                    path.unlink()
                    logger.debug(f"Cleaned up partial audio file: {path}")
                except OSError as cleanup_error:
                    logger.warning(
                        f"Failed to clean up partial audio file: {cleanup_error}"
                    )
            raise CacheStoreError(f"Failed to cache audio: {e}", e) from e

        logger.info(
            f"Cached {stored.dialect.value} audio for '{stored.text[:50]}' "
            f"as {stored.storage_path}"
        )
        return stored

    @staticmethod
    def _row_to_asset(row: sqlite3.Row) -> AudioAsset:
        return AudioAsset(
            fingerprint=row["fingerprint"],
            dialect=Dialect(row["dialect"]),
            text=row["text"],
            storage_path=row["storage_path"],
            public_url=row["storage_url"],
            voice_model=row["voice_model"],
            speed=float(row["speed"]),
            duration_ms=int(row["duration_ms"]),
            kind=AssetKind(row["kind"]),
            item_id=row["item_id"],
            text_original=row["text_original"],
            language_code=row["language_code"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
