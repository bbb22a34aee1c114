from __future__ import annotations

"""Unified type exports for public consumption.

Type ownership stays in the domain modules (`advocacy_types.py`, `model.py`,
`orchestration/`); this module only provides a stable import surface.
"""

from advocacy_types import NoteAnalysis, Priority, Question, TalkingPoint
from model import LLMRequest, LLMTask
from orchestration.availability import BackendStatus, FailureKind
from orchestration.cache import CacheEntry

__all__ = [
    "LLMTask",
    "LLMRequest",
    "Priority",
    "Question",
    "TalkingPoint",
    "NoteAnalysis",
    "BackendStatus",
    "FailureKind",
    "CacheEntry",
]
