from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable

from core.config import (
    DEFAULT_FAILURE_THRESHOLD,
    DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS,
    DEFAULT_TRANSIENT_COOLDOWN_SECONDS,
)

logger = logging.getLogger(__name__)

_RATE_LIMIT_MARKERS = (
    "rate limit",
    "ratelimit",
    "quota",
    "429",
    "resource_exhausted",
    "resource exhausted",
    "too many requests",
)


class FailureKind(str, Enum):
    RATE_LIMIT = "rate_limit"
    TRANSIENT = "transient"


def _status_code_of(error: BaseException) -> int | None:
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return int(value)
    return None


def classify_failure(error: BaseException) -> FailureKind:
    if _status_code_of(error) == 429:
        return FailureKind.RATE_LIMIT
    message = str(error).lower()
    if any(marker in message for marker in _RATE_LIMIT_MARKERS):
        return FailureKind.RATE_LIMIT
    return FailureKind.TRANSIENT


def _iso(timestamp: float | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


@dataclass
class BackendStatus:
    name: str
    available: bool = True
    consecutive_failures: int = 0
    last_error: str | None = None
    last_error_at: float | None = None
    cooldown_until: float | None = None
    last_failure_kind: FailureKind | None = None

    def in_cooldown(self, now: float) -> bool:
        return self.cooldown_until is not None and now < self.cooldown_until

    def recover(self) -> None:
        self.available = True
        self.consecutive_failures = 0
        self.last_error = None
        self.last_error_at = None
        self.cooldown_until = None
        self.last_failure_kind = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "consecutiveFailures": self.consecutive_failures,
            "lastError": self.last_error,
            "lastErrorAt": _iso(self.last_error_at),
            "cooldownUntil": _iso(self.cooldown_until),
            "lastFailureKind": self.last_failure_kind.value if self.last_failure_kind else None,
        }


class AvailabilityTracker:
    """Per-backend health records guarded by a single lock.

    A backend is eligible when it is not cooling down and is either marked
    available or has fewer than ``failure_threshold`` consecutive failures.
    An elapsed cooldown fully recovers the backend on the next evaluation.
    """

    def __init__(
        self,
        rate_limit_cooldown_seconds: float = DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS,
        transient_cooldown_seconds: float = DEFAULT_TRANSIENT_COOLDOWN_SECONDS,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rate_limit_cooldown_seconds = rate_limit_cooldown_seconds
        self._transient_cooldown_seconds = transient_cooldown_seconds
        self._failure_threshold = failure_threshold
        self._clock = clock
        self._statuses: dict[str, BackendStatus] = {}
        self._lock = threading.Lock()

    def register(self, name: str) -> None:
        with self._lock:
            self._statuses[name] = BackendStatus(name=name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._statuses

    def eligible(self, names: Iterable[str]) -> list[str]:
        with self._lock:
            now = self._clock()
            return [name for name in names if self._is_eligible_locked(name, now)]

    def is_eligible(self, name: str) -> bool:
        with self._lock:
            return self._is_eligible_locked(name, self._clock())

    def _is_eligible_locked(self, name: str, now: float) -> bool:
        status = self._statuses.get(name)
        if status is None:
            return False
        if status.in_cooldown(now):
            return False
        if status.cooldown_until is not None:
            status.recover()
            logger.info(f"[Availability] Cooldown elapsed for {name}, backend re-admitted")
        return status.available or status.consecutive_failures < self._failure_threshold

    def record_failure(self, name: str, error: BaseException) -> FailureKind:
        kind = classify_failure(error)
        cooldown = (
            self._rate_limit_cooldown_seconds
            if kind is FailureKind.RATE_LIMIT
            else self._transient_cooldown_seconds
        )
        with self._lock:
            status = self._statuses[name]
            now = self._clock()
            status.available = False
            status.consecutive_failures += 1
            status.last_error = str(error) or type(error).__name__
            status.last_error_at = now
            status.cooldown_until = now + cooldown
            status.last_failure_kind = kind
            failures = status.consecutive_failures
            cooldown_until = status.cooldown_until

        if kind is FailureKind.RATE_LIMIT:
            logger.warning(f"[Availability] Backend {name} rate limited. Will retry after {_iso(cooldown_until)}")
        else:
            logger.warning(f"[Availability] Backend {name} failed ({failures} consecutive), cooling down for {cooldown:.0f}s")
        return kind

    def record_success(self, name: str) -> None:
        with self._lock:
            status = self._statuses[name]
            recovered = status.consecutive_failures > 0
            status.recover()
        if recovered:
            logger.info(f"[Availability] Backend {name} recovered successfully")

    def snapshot(self) -> dict[str, BackendStatus]:
        with self._lock:
            return {name: replace(status) for name, status in self._statuses.items()}


__all__ = [
    "FailureKind",
    "BackendStatus",
    "AvailabilityTracker",
    "classify_failure",
]
