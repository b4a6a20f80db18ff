"""Unit tests for per-key request deduplication."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from latinspeak.tts.singleflight import SingleFlight


class TestSingleFlight:
    """Test SingleFlight sharing and cleanup."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_run(self) -> None:
        """
        INVARIANT: Concurrent callers for one key run the work exactly once
        BREAKS: Duplicate paid synthesis calls for the same clip
        """
        group = SingleFlight()
        gate = asyncio.Event()
        runs = 0

        async def work() -> str:
            nonlocal runs
            runs += 1
            await gate.wait()
            return "result"

        first = asyncio.create_task(group.do("k", work))
        second = asyncio.create_task(group.do("k", work))
        await asyncio.sleep(0)

        assert "k" in group
        gate.set()

        assert await asyncio.gather(first, second) == ["result", "result"]
        assert runs == 1
        assert len(group) == 0

    @pytest.mark.asyncio
    async def test_different_keys_run_independently(self) -> None:
        group = SingleFlight()
        runs: list[str] = []

        async def work(key: str) -> str:
            runs.append(key)
            await asyncio.sleep(0)
            return key

        results = await asyncio.gather(
            group.do("a", lambda: work("a")),
            group.do("b", lambda: work("b")),
        )

        assert results == ["a", "b"]
        assert sorted(runs) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_failure_shared_and_entry_cleared(self) -> None:
        """
        INVARIANT: A failed run is seen by every waiter and leaves no entry
        BREAKS: Later retries join a dead operation forever
        """
        group = SingleFlight()
        gate = asyncio.Event()

        async def work() -> str:
            await gate.wait()
            raise RuntimeError("provider down")

        first = asyncio.create_task(group.do("k", work))
        second = asyncio.create_task(group.do("k", work))
        await asyncio.sleep(0)
        gate.set()

        results = await asyncio.gather(first, second, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(group) == 0
        assert "k" not in group

    @pytest.mark.asyncio
    async def test_settled_key_runs_again(self) -> None:
        group = SingleFlight()
        runs = 0

        async def work() -> int:
            nonlocal runs
            runs += 1
            return runs

        assert await group.do("k", work) == 1
        assert await group.do("k", work) == 2

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_run(self) -> None:
        group = SingleFlight()
        gate = asyncio.Event()
        runs = 0

        async def work() -> str:
            nonlocal runs
            runs += 1
            await gate.wait()
            return "done"

        first = asyncio.create_task(group.do("k", work))
        second = asyncio.create_task(group.do("k", work))
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        gate.set()
        assert await second == "done"
        assert runs == 1
