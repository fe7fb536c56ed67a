"""
Handle Map - concurrent mapping of local keys to session handles.

The map is the only shared mutable state of the session layer. It exposes
per-key atomic primitives (insert-if-absent, remove-if, touch-if) instead of
a global lock, so a sweep over a large map never stalls foreground lookups
of unrelated keys.

Pattern: Repository pattern (Percival & Gregory pp. 86)
Pattern: Lock striping - one lock per shard, held only for a dict operation
and never across an await.
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from langgraph_bridge.sessions.handle import LocalKey, SessionHandle

HandlePredicate = Callable[[SessionHandle], bool]

DEFAULT_SHARD_COUNT = 16


class HandleMap(ABC):
    """Abstract concurrent mapping of LocalKey -> SessionHandle."""

    @abstractmethod
    def get(self, key: LocalKey) -> Optional[SessionHandle]:
        """Return the handle for key, or None."""

    @abstractmethod
    def put(self, key: LocalKey, handle: SessionHandle) -> Optional[SessionHandle]:
        """Insert or replace (last writer wins). Returns the displaced handle."""

    @abstractmethod
    def insert_if_absent(self, key: LocalKey, handle: SessionHandle) -> bool:
        """Insert only if key is absent. Returns True if inserted."""

    @abstractmethod
    def remove_if(self, key: LocalKey, predicate: HandlePredicate) -> Optional[SessionHandle]:
        """Remove key only if its current handle satisfies predicate."""

    @abstractmethod
    def pop(self, key: LocalKey) -> Optional[SessionHandle]:
        """Remove key unconditionally. Returns the removed handle."""

    @abstractmethod
    def touch_if(
        self, key: LocalKey, predicate: HandlePredicate, now: datetime
    ) -> Optional[SessionHandle]:
        """Bump last_activity of key's handle if it satisfies predicate."""

    @abstractmethod
    def keys(self) -> list[LocalKey]:
        """Point-in-time snapshot of the keys."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of live handles."""


class ShardedHandleMap(HandleMap):
    """
    HandleMap striped over shards, each a dict with its own lock.

    Thread-safe as well as safe for any number of coroutines on one loop:
    every method is synchronous and holds exactly one shard lock.
    """

    def __init__(self, shard_count: int = DEFAULT_SHARD_COUNT) -> None:
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self._shards: list[dict[LocalKey, SessionHandle]] = [{} for _ in range(shard_count)]
        self._locks = [threading.Lock() for _ in range(shard_count)]

    def _shard(self, key: LocalKey) -> tuple[dict[LocalKey, SessionHandle], threading.Lock]:
        index = hash(key) % len(self._shards)
        return self._shards[index], self._locks[index]

    def get(self, key: LocalKey) -> Optional[SessionHandle]:
        shard, lock = self._shard(key)
        with lock:
            return shard.get(key)

    def put(self, key: LocalKey, handle: SessionHandle) -> Optional[SessionHandle]:
        shard, lock = self._shard(key)
        with lock:
            previous = shard.get(key)
            shard[key] = handle
            return previous

    def insert_if_absent(self, key: LocalKey, handle: SessionHandle) -> bool:
        shard, lock = self._shard(key)
        with lock:
            if key in shard:
                return False
            shard[key] = handle
            return True

    def remove_if(self, key: LocalKey, predicate: HandlePredicate) -> Optional[SessionHandle]:
        shard, lock = self._shard(key)
        with lock:
            handle = shard.get(key)
            if handle is None or not predicate(handle):
                return None
            del shard[key]
            return handle

    def pop(self, key: LocalKey) -> Optional[SessionHandle]:
        shard, lock = self._shard(key)
        with lock:
            return shard.pop(key, None)

    def touch_if(
        self, key: LocalKey, predicate: HandlePredicate, now: datetime
    ) -> Optional[SessionHandle]:
        shard, lock = self._shard(key)
        with lock:
            handle = shard.get(key)
            if handle is None or not predicate(handle):
                return None
            handle.touch(now)
            return handle

    def keys(self) -> list[LocalKey]:
        snapshot: list[LocalKey] = []
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                snapshot.extend(shard.keys())
        return snapshot

    def __len__(self) -> int:
        total = 0
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                total += len(shard)
        return total
