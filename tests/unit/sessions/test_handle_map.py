"""
Tests for ShardedHandleMap.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from langgraph_bridge.sessions.handle import LocalKey, SessionHandle
from langgraph_bridge.sessions.handle_map import ShardedHandleMap

T0 = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_handle(conversation_id: str, session_id: str, user_id: str = "alice") -> SessionHandle:
    return SessionHandle(
        local_key=LocalKey.of(conversation_id, user_id),
        remote_session_id=session_id,
        created_at=T0,
    )


@pytest.fixture
def handle_map() -> ShardedHandleMap:
    return ShardedHandleMap(shard_count=4)


class TestShardedHandleMap:
    """Tests for the per-key atomic primitives."""

    def test_rejects_zero_shards(self) -> None:
        with pytest.raises(ValueError):
            ShardedHandleMap(shard_count=0)

    def test_put_and_get(self, handle_map) -> None:
        handle = make_handle("conv-1", "sess-1")
        assert handle_map.put(handle.local_key, handle) is None
        assert handle_map.get(handle.local_key) is handle
        assert len(handle_map) == 1

    def test_put_returns_displaced(self, handle_map) -> None:
        first = make_handle("conv-1", "sess-1")
        second = make_handle("conv-1", "sess-2")
        handle_map.put(first.local_key, first)

        assert handle_map.put(second.local_key, second) is first
        assert handle_map.get(first.local_key) is second
        assert len(handle_map) == 1

    def test_insert_if_absent(self, handle_map) -> None:
        first = make_handle("conv-1", "sess-1")
        second = make_handle("conv-1", "sess-2")

        assert handle_map.insert_if_absent(first.local_key, first) is True
        assert handle_map.insert_if_absent(second.local_key, second) is False
        assert handle_map.get(first.local_key) is first

    def test_remove_if_respects_predicate(self, handle_map) -> None:
        handle = make_handle("conv-1", "sess-1")
        handle_map.put(handle.local_key, handle)

        assert handle_map.remove_if(handle.local_key, lambda h: False) is None
        assert len(handle_map) == 1
        assert handle_map.remove_if(handle.local_key, lambda h: True) is handle
        assert len(handle_map) == 0

    def test_remove_if_missing_key(self, handle_map) -> None:
        assert handle_map.remove_if(LocalKey.of("nope"), lambda h: True) is None

    def test_pop(self, handle_map) -> None:
        handle = make_handle("conv-1", "sess-1")
        handle_map.put(handle.local_key, handle)

        assert handle_map.pop(handle.local_key) is handle
        assert handle_map.pop(handle.local_key) is None

    def test_touch_if_bumps_activity(self, handle_map) -> None:
        handle = make_handle("conv-1", "sess-1")
        handle_map.put(handle.local_key, handle)
        later = T0 + timedelta(seconds=30)

        assert handle_map.touch_if(handle.local_key, lambda h: True, later) is handle
        assert handle.last_activity == later

    def test_touch_if_predicate_false_leaves_handle(self, handle_map) -> None:
        handle = make_handle("conv-1", "sess-1")
        handle_map.put(handle.local_key, handle)

        assert handle_map.touch_if(handle.local_key, lambda h: False, T0 + timedelta(seconds=30)) is None
        assert handle.last_activity == T0

    def test_keys_snapshot(self, handle_map) -> None:
        handles = [make_handle(f"conv-{i}", f"sess-{i}") for i in range(10)]
        for handle in handles:
            handle_map.put(handle.local_key, handle)

        keys = handle_map.keys()
        handle_map.pop(handles[0].local_key)

        assert set(keys) == {h.local_key for h in handles}
        assert len(handle_map) == 9

    def test_concurrent_inserts_from_threads(self, handle_map) -> None:
        """Exactly one of many racing inserts for a key wins."""
        key = LocalKey.of("conv-1", "alice")
        wins = []
        barrier = threading.Barrier(8)

        def worker(index: int) -> None:
            barrier.wait()
            if handle_map.insert_if_absent(key, make_handle("conv-1", f"sess-{index}")):
                wins.append(index)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(wins) == 1
        assert len(handle_map) == 1
