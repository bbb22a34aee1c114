from __future__ import annotations

"""Unified public API for the package layout."""

from advocacy_types import NoteAnalysis, Question, TalkingPoint
from backends import (
    DEFAULT_BACKEND_PREFERENCE,
    DEFAULT_BACKEND_REGISTRY,
    BackendSpec,
    GeminiBackendConfig,
    GeminiLLMModel,
    OpenAIBackendConfig,
    OpenAILLMModel,
)
from core import config, errors, protocols, types
from core.config import OrchestratorConfig
from core.errors import (
    AdvocacyError,
    AllBackendsFailedError,
    AllBackendsUnavailableError,
    BackendError,
    BackendsExhaustedError,
    ConfigurationError,
    OperationCancelledError,
)
from model import AdvocacyBackend, AdvocacyBackendFromLLM, LLMModel, LLMRequest, LLMTask
from orchestration import (
    AdvocacyOrchestrator,
    AvailabilityTracker,
    BackendStatus,
    FailureKind,
    ResponseCache,
    classify_failure,
)
from service import describe_failure, dispatch_task

__all__ = [
    "config",
    "errors",
    "protocols",
    "types",
    "Question",
    "TalkingPoint",
    "NoteAnalysis",
    "LLMTask",
    "LLMRequest",
    "LLMModel",
    "AdvocacyBackend",
    "AdvocacyBackendFromLLM",
    "OpenAIBackendConfig",
    "OpenAILLMModel",
    "GeminiBackendConfig",
    "GeminiLLMModel",
    "BackendSpec",
    "DEFAULT_BACKEND_REGISTRY",
    "DEFAULT_BACKEND_PREFERENCE",
    "OrchestratorConfig",
    "AdvocacyError",
    "ConfigurationError",
    "BackendError",
    "BackendsExhaustedError",
    "AllBackendsUnavailableError",
    "AllBackendsFailedError",
    "OperationCancelledError",
    "AdvocacyOrchestrator",
    "AvailabilityTracker",
    "BackendStatus",
    "FailureKind",
    "ResponseCache",
    "classify_failure",
    "dispatch_task",
    "describe_failure",
]
