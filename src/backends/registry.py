from __future__ import annotations

"""Static registry of known backend kinds.

Each entry names the credential that gates registration and a factory that
builds the backend from that credential. Factories import their SDK lazily,
so a missing package surfaces as a construction failure and the backend is
skipped during discovery.
"""

from dataclasses import dataclass
from typing import Callable, Mapping

from backends.gemini import GeminiBackendConfig, GeminiLLMModel
from backends.openai import OpenAIBackendConfig, OpenAILLMModel
from model import AdvocacyBackend, AdvocacyBackendFromLLM

BackendFactory = Callable[[str], AdvocacyBackend]


@dataclass(frozen=True)
class BackendSpec:
    name: str
    credential_env_var: str
    factory: BackendFactory


def _build_openai_backend(api_key: str) -> AdvocacyBackend:
    model = OpenAILLMModel(config=OpenAIBackendConfig(api_key=api_key))
    return AdvocacyBackendFromLLM(model, name="openai")


def _build_gemini_backend(api_key: str) -> AdvocacyBackend:
    model = GeminiLLMModel(config=GeminiBackendConfig(api_key=api_key))
    return AdvocacyBackendFromLLM(model, name="gemini")


DEFAULT_BACKEND_REGISTRY: Mapping[str, BackendSpec] = {
    "openai": BackendSpec("openai", "OPENAI_API_KEY", _build_openai_backend),
    "gemini": BackendSpec("gemini", "GEMINI_API_KEY", _build_gemini_backend),
}

# Applied when AI_PROVIDER_ORDER is not set.
DEFAULT_BACKEND_PREFERENCE: tuple[str, ...] = ("openai", "gemini")


__all__ = [
    "BackendFactory",
    "BackendSpec",
    "DEFAULT_BACKEND_REGISTRY",
    "DEFAULT_BACKEND_PREFERENCE",
]
