from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class ResponseCache:
    """Thread-safe in-memory cache with per-entry time-to-live.

    Expired entries read as misses and are dropped on access; ``cleanup`` sweeps
    the rest.
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self._default_ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"[Cache] Swept {len(expired)} expired entr{'y' if len(expired) == 1 else 'ies'}")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def make_cache_key(operation: str, *args: str) -> str:
    return f"{operation}:{json.dumps(list(args), ensure_ascii=False)}"


def questions_cache_key(symptoms: str, appointment_type: str, concerns: str) -> str:
    return make_cache_key("questions", symptoms, appointment_type, concerns)


def talking_points_cache_key(symptoms: str, concerns: str) -> str:
    return make_cache_key("talking-points", symptoms, concerns)


def analysis_cache_key(note_text: str) -> str:
    # Notes can be long; fingerprint the full content rather than embedding it.
    digest = hashlib.sha256(note_text.encode("utf-8")).hexdigest()
    return make_cache_key("analysis", digest, str(len(note_text)))


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    "questions_cache_key",
    "talking_points_cache_key",
    "analysis_cache_key",
]
