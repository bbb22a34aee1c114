from __future__ import annotations

from orchestration.availability import (
    AvailabilityTracker,
    BackendStatus,
    FailureKind,
    classify_failure,
)
from orchestration.cache import (
    CacheEntry,
    ResponseCache,
    analysis_cache_key,
    make_cache_key,
    questions_cache_key,
    talking_points_cache_key,
)
from orchestration.orchestrator import AdvocacyOrchestrator

__all__ = [
    "AdvocacyOrchestrator",
    "AvailabilityTracker",
    "BackendStatus",
    "FailureKind",
    "classify_failure",
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    "questions_cache_key",
    "talking_points_cache_key",
    "analysis_cache_key",
]
