"""Tests for chunk session management."""

import asyncio

import pytest

from server.cleanup_task import SessionSweeper
from server.exceptions import IncompleteUploadError, InvalidChunkError, SessionNotFoundError
from server.sessions import ChunkSessionManager, InMemorySessionStore

MIB = 1024 * 1024


def split(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestReassembly:
    """Chunks are reassembled by index regardless of arrival order."""

    @pytest.mark.asyncio
    async def test_out_of_order_chunks_reassemble_exactly(self):
        manager = ChunkSessionManager()
        data = bytes(range(256)) * (12 * MIB // 256)
        chunks = split(data, 5 * MIB)
        assert len(chunks) == 3

        for index in [1, 0, 2]:
            await manager.begin_or_continue("upload-1", index, 3, "movie.mp4", chunks[index])

        assembled = await manager.finalize("upload-1")

        assert assembled.size == 12 * MIB
        assert assembled.data == data
        assert assembled.file_name == "movie.mp4"

    @pytest.mark.asyncio
    async def test_uneven_last_chunk(self):
        manager = ChunkSessionManager()
        data = b"abcdefghij"
        chunks = split(data, 4)

        for index, chunk in enumerate(chunks):
            await manager.begin_or_continue("upload-2", index, len(chunks), "letters.txt", chunk)

        assembled = await manager.finalize("upload-2")
        assert assembled.data == data

    @pytest.mark.asyncio
    async def test_progress_counts_filled_slots(self):
        manager = ChunkSessionManager()

        first = await manager.begin_or_continue("upload-3", 2, 3, "a.bin", b"c")
        second = await manager.begin_or_continue("upload-3", 0, 3, "a.bin", b"a")

        assert (first.received_chunks, first.total_chunks) == (1, 3)
        assert (second.received_chunks, second.total_chunks) == (2, 3)

    @pytest.mark.asyncio
    async def test_resent_chunk_overwrites_slot(self):
        manager = ChunkSessionManager()

        await manager.begin_or_continue("upload-4", 0, 2, "a.bin", b"old")
        progress = await manager.begin_or_continue("upload-4", 0, 2, "a.bin", b"new")
        await manager.begin_or_continue("upload-4", 1, 2, "a.bin", b"-tail")

        assert progress.received_chunks == 1
        assembled = await manager.finalize("upload-4")
        assert assembled.data == b"new-tail"

    @pytest.mark.asyncio
    async def test_initiated_session_accepts_chunks(self):
        manager = ChunkSessionManager()
        upload_id = await manager.initiate("clip.mov", 2, "video/quicktime")

        await manager.begin_or_continue(upload_id, 1, 2, "clip.mov", b"2")
        await manager.begin_or_continue(upload_id, 0, 2, "clip.mov", b"1")

        assembled = await manager.finalize(upload_id)
        assert assembled.data == b"12"
        assert assembled.mime_type == "video/quicktime"


class TestFinalize:

    @pytest.mark.asyncio
    async def test_incomplete_session_is_rejected_and_kept(self):
        manager = ChunkSessionManager()
        await manager.begin_or_continue("upload-5", 0, 3, "a.bin", b"a")
        await manager.begin_or_continue("upload-5", 2, 3, "a.bin", b"c")

        with pytest.raises(IncompleteUploadError) as exc_info:
            await manager.finalize("upload-5")
        assert exc_info.value.missing == [1]

        await manager.begin_or_continue("upload-5", 1, 3, "a.bin", b"b")
        assembled = await manager.finalize("upload-5")
        assert assembled.data == b"abc"

    @pytest.mark.asyncio
    async def test_unknown_session(self):
        manager = ChunkSessionManager()
        with pytest.raises(SessionNotFoundError):
            await manager.finalize("missing")

    @pytest.mark.asyncio
    async def test_session_removed_after_finalize(self):
        manager = ChunkSessionManager()
        await manager.begin_or_continue("upload-6", 0, 1, "a.bin", b"x")
        await manager.finalize("upload-6")

        assert await manager.active_count() == 0
        with pytest.raises(SessionNotFoundError):
            await manager.finalize("upload-6")

    @pytest.mark.asyncio
    async def test_unknown_ids_leave_no_locks_behind(self):
        manager = ChunkSessionManager()
        for n in range(100):
            with pytest.raises(SessionNotFoundError):
                await manager.finalize(f"bogus-{n}")

        assert manager._locks == {}


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_index,total_chunks", [(-1, 3), (3, 3), (0, 0)])
    async def test_rejects_out_of_range(self, chunk_index, total_chunks):
        manager = ChunkSessionManager()
        with pytest.raises(InvalidChunkError):
            await manager.begin_or_continue("upload-7", chunk_index, total_chunks, "a.bin", b"x")

    @pytest.mark.asyncio
    async def test_rejects_changed_chunk_count(self):
        manager = ChunkSessionManager()
        await manager.begin_or_continue("upload-8", 0, 3, "a.bin", b"x")
        with pytest.raises(InvalidChunkError):
            await manager.begin_or_continue("upload-8", 1, 4, "a.bin", b"y")

    @pytest.mark.asyncio
    async def test_initiate_rejects_zero_chunks(self):
        manager = ChunkSessionManager()
        with pytest.raises(InvalidChunkError):
            await manager.initiate("a.bin", 0)


class TestExpiry:

    @pytest.mark.asyncio
    async def test_idle_sessions_are_swept(self):
        clock = FakeClock()
        manager = ChunkSessionManager(ttl_seconds=60, clock=clock)
        await manager.begin_or_continue("stale", 0, 2, "a.bin", b"x")
        clock.now += 30
        await manager.begin_or_continue("fresh", 0, 2, "b.bin", b"y")

        clock.now += 45
        removed = await manager.sweep_expired()

        assert removed == 1
        with pytest.raises(SessionNotFoundError):
            await manager.finalize("stale")
        assert await manager.active_count() == 1

    @pytest.mark.asyncio
    async def test_sweep_drops_locks_without_sessions(self):
        manager = ChunkSessionManager()
        await manager.begin_or_continue("live", 0, 2, "a.bin", b"x")
        manager._lock_for("orphan")

        await manager.sweep_expired()

        assert set(manager._locks) == {"live"}

    @pytest.mark.asyncio
    async def test_activity_extends_lifetime(self):
        clock = FakeClock()
        manager = ChunkSessionManager(ttl_seconds=60, clock=clock)
        await manager.begin_or_continue("busy", 0, 3, "a.bin", b"x")
        clock.now += 50
        await manager.begin_or_continue("busy", 1, 3, "a.bin", b"y")
        clock.now += 50

        assert await manager.sweep_expired() == 0

    @pytest.mark.asyncio
    async def test_sweeper_runs_in_background(self):
        clock = FakeClock()
        manager = ChunkSessionManager(ttl_seconds=1, clock=clock)
        await manager.begin_or_continue("old", 0, 2, "a.bin", b"x")
        clock.now += 5

        sweeper = SessionSweeper(manager, interval_seconds=0.01)
        await sweeper.start()
        await asyncio.sleep(0.05)
        await sweeper.stop()

        assert await manager.active_count() == 0

    @pytest.mark.asyncio
    async def test_sweeper_lifecycle(self):
        sweeper = SessionSweeper(ChunkSessionManager(), interval_seconds=60)

        await sweeper.stop()
        await sweeper.start()
        assert sweeper.running

        await sweeper.stop()
        assert not sweeper.running


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_parallel_chunks_for_one_session(self):
        store = InMemorySessionStore()
        manager = ChunkSessionManager(store=store)
        chunks = [bytes([i]) * 10 for i in range(20)]

        await asyncio.gather(*[
            manager.begin_or_continue("shared", i, 20, "a.bin", chunk)
            for i, chunk in enumerate(chunks)
        ])

        assembled = await manager.finalize("shared")
        assert assembled.data == b"".join(chunks)

    @pytest.mark.asyncio
    async def test_independent_sessions(self):
        manager = ChunkSessionManager()

        await asyncio.gather(*[
            manager.begin_or_continue(f"upload-{n}", 0, 1, f"{n}.bin", str(n).encode())
            for n in range(10)
        ])

        results = await asyncio.gather(*[manager.finalize(f"upload-{n}") for n in range(10)])
        assert [r.data for r in results] == [str(n).encode() for n in range(10)]
