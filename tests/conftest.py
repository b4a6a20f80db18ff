"""Pytest configuration and fixtures for latinspeak tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from latinspeak.cache.storage import AudioCacheStore
from latinspeak.items.store import SQLiteItemStore
from latinspeak.tts.pipeline import SynthesisOrchestrator
from test_helpers import FakeProvider


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def audio_store(tmp_path: Path) -> AudioCacheStore:
    return AudioCacheStore(tmp_path / "cache")


@pytest.fixture
def item_store(tmp_path: Path) -> SQLiteItemStore:
    return SQLiteItemStore(tmp_path / "items.db")


@pytest.fixture
def orchestrator(
    audio_store: AudioCacheStore,
    fake_provider: FakeProvider,
    item_store: SQLiteItemStore,
) -> SynthesisOrchestrator:
    return SynthesisOrchestrator(audio_store, fake_provider, references=item_store)
