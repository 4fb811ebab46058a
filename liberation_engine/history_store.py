# liberation_engine/history_store.py
# Per-user journey history.
# Bounded, consecutive-dedup, atomic per key.
#
# append_bounded(user, stage, cap):
#   - skip if the last entry already equals stage
#   - otherwise append, then keep only the newest `cap` entries
#
# InMemoryHistoryStore  single process, lock-guarded
# RedisHistoryStore     shared across instances, one Lua script per append

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from .feature_flags import get_flags
from .types import JourneyStage, parse_history

log = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 20
DEFAULT_KEY_PREFIX = "liberation:journey:"


class HistoryStore:
    """Keyed journey history. Implementations must make appends atomic per user."""

    def get(self, user_id: str) -> List[JourneyStage]:
        raise NotImplementedError

    def append_bounded(
        self, user_id: str, stage: JourneyStage, cap: int = DEFAULT_HISTORY_CAP
    ) -> List[JourneyStage]:
        raise NotImplementedError

    def clear(self, user_id: str) -> None:
        raise NotImplementedError


def _append(history: List[JourneyStage], stage: JourneyStage, cap: int) -> List[JourneyStage]:
    if history and history[-1] is stage:
        return history
    history.append(stage)
    if len(history) > cap:
        del history[: len(history) - cap]
    return history


class InMemoryHistoryStore(HistoryStore):
    """
    Process-local store.
    ttl_seconds > 0 drops a user's history after that long without an append.
    ttl_seconds == 0 keeps it for the life of the process.
    """

    def __init__(self, ttl_seconds: int = 0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = max(0, int(ttl_seconds or 0))
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[List[JourneyStage], float]] = {}

    def _live(self, user_id: str) -> Optional[List[JourneyStage]]:
        entry = self._data.get(user_id)
        if entry is None:
            return None
        history, touched = entry
        if self.ttl_seconds and self._clock() - touched > self.ttl_seconds:
            del self._data[user_id]
            log.debug("journey history expired user=%s", user_id)
            return None
        return history

    def get(self, user_id: str) -> List[JourneyStage]:
        with self._lock:
            return list(self._live(user_id) or [])

    def append_bounded(
        self, user_id: str, stage: JourneyStage, cap: int = DEFAULT_HISTORY_CAP
    ) -> List[JourneyStage]:
        cap = max(1, int(cap))
        with self._lock:
            history = self._live(user_id) or []
            _append(history, stage, cap)
            self._data[user_id] = (history, self._clock())
            return list(history)

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._data.pop(user_id, None)

    def evict_expired(self) -> int:
        """Drop every expired history. Returns how many were dropped."""
        if not self.ttl_seconds:
            return 0
        now = self._clock()
        with self._lock:
            stale = [u for u, (_, t) in self._data.items() if now - t > self.ttl_seconds]
            for u in stale:
                del self._data[u]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


# KEYS[1] history list, ARGV[1] stage, ARGV[2] cap, ARGV[3] ttl seconds (0 = none)
APPEND_BOUNDED_LUA = """
local last = redis.call('LINDEX', KEYS[1], -1)
if last ~= ARGV[1] then
  redis.call('RPUSH', KEYS[1], ARGV[1])
  redis.call('LTRIM', KEYS[1], -tonumber(ARGV[2]), -1)
end
if tonumber(ARGV[3]) > 0 then
  redis.call('EXPIRE', KEYS[1], tonumber(ARGV[3]))
end
return redis.call('LRANGE', KEYS[1], 0, -1)
"""


def _decode(items: Any) -> List[JourneyStage]:
    raw = [i.decode("utf-8") if isinstance(i, (bytes, bytearray)) else i for i in (items or [])]
    return parse_history(raw)


class RedisHistoryStore(HistoryStore):
    """
    Shared store for multi-instance deployments.
    The dedup-append-trim runs server-side in one script, so concurrent
    appends for the same user cannot lose updates.
    """

    def __init__(self, client: Any, key_prefix: str = DEFAULT_KEY_PREFIX, ttl_seconds: int = 0) -> None:
        self.client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = max(0, int(ttl_seconds or 0))

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}{user_id}"

    def get(self, user_id: str) -> List[JourneyStage]:
        return _decode(self.client.lrange(self._key(user_id), 0, -1))

    def append_bounded(
        self, user_id: str, stage: JourneyStage, cap: int = DEFAULT_HISTORY_CAP
    ) -> List[JourneyStage]:
        cap = max(1, int(cap))
        items = self.client.eval(
            APPEND_BOUNDED_LUA, 1, self._key(user_id), stage.value, cap, self.ttl_seconds
        )
        return _decode(items)

    def clear(self, user_id: str) -> None:
        self.client.delete(self._key(user_id))


def build_history_store(flags: Optional[dict] = None) -> HistoryStore:
    """Backend chosen by HISTORY_BACKEND (memory | redis)."""
    flags = flags or get_flags()
    ttl = flags.get("JOURNEY_HISTORY_TTL_SECONDS", 0)
    if flags.get("HISTORY_BACKEND") == "redis":
        import redis as redis_lib

        client = redis_lib.from_url(flags.get("REDIS_URL", "redis://localhost:6379"))
        log.info("journey history backend=redis")
        return RedisHistoryStore(client, ttl_seconds=ttl)
    log.info("journey history backend=memory ttl=%s", ttl)
    return InMemoryHistoryStore(ttl_seconds=ttl)
