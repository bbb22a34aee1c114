from __future__ import annotations

"""Unified protocol exports for public consumption."""

from model import AdvocacyBackend, LLMModel

__all__ = [
    "LLMModel",
    "AdvocacyBackend",
]
