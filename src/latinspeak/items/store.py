"""Item reference store: the lesson-item media fields this subsystem may update."""

import asyncio
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path

from ..tts.errors import ReferencePropagationError
from .models import LessonItem

logger = logging.getLogger(__name__)


class ItemReferenceStore(ABC):
    """Access to the denormalized audio URLs stored on lesson items."""

    @abstractmethod
    async def get_media(self, item_id: str) -> dict | None:
        """Return the item's media mapping, or None if the item does not exist."""
        pass

    @abstractmethod
    async def set_media_field(self, item_id: str, key: str, url: str) -> None:
        """Set one media field, keeping the other fields.

        Raises:
            ReferencePropagationError: If the field could not be written
        """
        pass


class SQLiteItemStore(ItemReferenceStore):
    """SQLite-backed lesson items.

    Media is stored as a JSON object per item. Each field update is a
    read-merge-write inside one immediate transaction, so concurrent updates
    of different dialect keys do not overwrite each other.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=30.0,
            check_same_thread=False,
            isolation_level=None,  # explicit transactions
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=30000")
        return conn

    def _init_db(self) -> None:
        conn = self._get_connection()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS items (
                    id TEXT PRIMARY KEY,
                    latin TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    media TEXT NOT NULL DEFAULT '{}'
                )
            """)
        finally:
            conn.close()

    async def add_item(self, item: LessonItem) -> None:
        """Insert or replace a lesson item."""
        await asyncio.to_thread(self._add_item_sync, item)

    async def get_item(self, item_id: str) -> LessonItem | None:
        return await asyncio.to_thread(self._get_item_sync, item_id)

    async def get_media(self, item_id: str) -> dict | None:
        item = await self.get_item(item_id)
        return item.media if item else None

    async def set_media_field(self, item_id: str, key: str, url: str) -> None:
        await asyncio.to_thread(self._set_media_field_sync, item_id, key, url)

    def _add_item_sync(self, item: LessonItem) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO items (id, latin, kind, media) VALUES (?, ?, ?, ?)",
                (item.id, item.latin, item.kind, json.dumps(item.media)),
            )
        finally:
            conn.close()

    def _get_item_sync(self, item_id: str) -> LessonItem | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT id, latin, kind, media FROM items WHERE id = ?", (item_id,)
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        return LessonItem(
            id=row["id"],
            latin=row["latin"],
            kind=row["kind"],
            media=json.loads(row["media"] or "{}"),
        )

    def _set_media_field_sync(self, item_id: str, key: str, url: str) -> None:
        try:
            conn = self._get_connection()
        except sqlite3.Error as e:
            raise ReferencePropagationError(f"Item store unavailable: {e}", e) from e

        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT media FROM items WHERE id = ?", (item_id,)
            ).fetchone()
            if row is None:
                conn.execute("ROLLBACK")
                raise ReferencePropagationError(f"Item '{item_id}' not found")

            media = json.loads(row["media"] or "{}")
            media[key] = url
            conn.execute(
                "UPDATE items SET media = ? WHERE id = ?", (json.dumps(media), item_id)
            )
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise ReferencePropagationError(
                f"Failed to update media for item '{item_id}': {e}", e
            ) from e
        finally:
            conn.close()

        logger.debug(f"Set {key} on item {item_id}")
