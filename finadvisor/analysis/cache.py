"""In-memory snapshot cache keyed by user and data version."""
import threading
from typing import Callable, Dict, Hashable, Optional, Tuple

from .models import AnalysisSnapshot
from finadvisor.utils.logger import get_logger

logger = get_logger()

CacheKey = Tuple[str, Hashable]


class SnapshotCache:
    """
    Memoizes analysis snapshots per (user_id, data_version).

    A per-key lock makes concurrent requests for the same key compute the
    snapshot once; requests for different keys do not block each other.
    Callers must bump data_version (or call invalidate) whenever the user's
    transactions change.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, AnalysisSnapshot] = {}
        self._key_locks: Dict[CacheKey, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_or_compute(
        self,
        user_id: str,
        data_version: Hashable,
        compute: Callable[[], AnalysisSnapshot]
    ) -> AnalysisSnapshot:
        """
        Return the cached snapshot or build it with compute().

        Args:
            user_id: User identifier
            data_version: Version of the user's transaction data
            compute: Zero-argument callable building the snapshot

        Returns:
            AnalysisSnapshot for this user and data version
        """
        key = (user_id, data_version)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                logger.debug(f"Snapshot cache hit for version {data_version}")
                return cached
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                cached = self._entries.get(key)
            if cached is not None:
                return cached

            try:
                snapshot = compute()
            except Exception:
                with self._lock:
                    if key not in self._entries:
                        self._key_locks.pop(key, None)
                raise

            with self._lock:
                # Drop older versions for this user
                for stale in [k for k in self._entries if k[0] == user_id and k != key]:
                    del self._entries[stale]
                    self._key_locks.pop(stale, None)
                self._entries[key] = snapshot
            logger.debug(f"Snapshot cached for version {data_version}")
            return snapshot

    def get(self, user_id: str, data_version: Hashable) -> Optional[AnalysisSnapshot]:
        with self._lock:
            return self._entries.get((user_id, data_version))

    def invalidate(self, user_id: str) -> int:
        """Drop every cached version for a user. Returns number removed."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == user_id]
            for key in stale:
                del self._entries[key]
                self._key_locks.pop(key, None)
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached snapshots")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
