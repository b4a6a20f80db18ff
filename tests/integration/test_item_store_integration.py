"""Integration tests for the SQLite lesson item store."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from latinspeak.items.models import LessonItem
from latinspeak.items.store import SQLiteItemStore
from latinspeak.tts.errors import ReferencePropagationError


class TestSQLiteItemStore:
    """Test media field reads and merges."""

    @pytest.mark.asyncio
    async def test_add_and_get(self, item_store: SQLiteItemStore) -> None:
        await item_store.add_item(
            LessonItem(id="v1", latin="rosa", media={"image": "rosa.png"})
        )

        item = await item_store.get_item("v1")

        assert item == LessonItem(id="v1", latin="rosa", kind="vocab", media={"image": "rosa.png"})
        assert await item_store.get_media("v1") == {"image": "rosa.png"}

    @pytest.mark.asyncio
    async def test_missing_item(self, item_store: SQLiteItemStore) -> None:
        assert await item_store.get_item("nope") is None
        assert await item_store.get_media("nope") is None

    @pytest.mark.asyncio
    async def test_set_media_field_keeps_other_fields(
        self, item_store: SQLiteItemStore
    ) -> None:
        await item_store.add_item(
            LessonItem(id="v1", latin="rosa", media={"audio_classical": "old", "image": "x"})
        )

        await item_store.set_media_field("v1", "audio_ecclesiastical", "new")

        assert await item_store.get_media("v1") == {
            "audio_classical": "old",
            "audio_ecclesiastical": "new",
            "image": "x",
        }

    @pytest.mark.asyncio
    async def test_set_media_field_missing_item_raises(
        self, item_store: SQLiteItemStore
    ) -> None:
        with pytest.raises(ReferencePropagationError, match="not found"):
            await item_store.set_media_field("nope", "audio_classical", "url")

    @pytest.mark.asyncio
    async def test_concurrent_updates_of_different_keys(
        self, item_store: SQLiteItemStore
    ) -> None:
        """
        INVARIANT: Concurrent dialect updates never overwrite each other
        BREAKS: One dialect's audio shortcut silently disappears
        """
        await item_store.add_item(LessonItem(id="v1", latin="rosa"))

        await asyncio.gather(
            item_store.set_media_field("v1", "audio_classical", "c"),
            item_store.set_media_field("v1", "audio_ecclesiastical", "e"),
        )

        assert await item_store.get_media("v1") == {
            "audio_classical": "c",
            "audio_ecclesiastical": "e",
        }
