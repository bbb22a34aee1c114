from __future__ import annotations

from backends.gemini import GeminiBackendConfig, GeminiLLMModel
from backends.openai import OpenAIBackendConfig, OpenAILLMModel
from backends.registry import (
    DEFAULT_BACKEND_PREFERENCE,
    DEFAULT_BACKEND_REGISTRY,
    BackendSpec,
)

__all__ = [
    "OpenAIBackendConfig",
    "OpenAILLMModel",
    "GeminiBackendConfig",
    "GeminiLLMModel",
    "BackendSpec",
    "DEFAULT_BACKEND_REGISTRY",
    "DEFAULT_BACKEND_PREFERENCE",
]
