from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from advocacy_types import NoteAnalysis, Question, TalkingPoint
from backends.registry import (
    DEFAULT_BACKEND_PREFERENCE,
    DEFAULT_BACKEND_REGISTRY,
    BackendSpec,
)
from core.config import OrchestratorConfig, resolve_backend_order
from core.errors import (
    AllBackendsFailedError,
    AllBackendsUnavailableError,
    ConfigurationError,
    OperationCancelledError,
)
from model import AdvocacyBackend
from orchestration.availability import AvailabilityTracker, BackendStatus
from orchestration.cache import (
    ResponseCache,
    analysis_cache_key,
    questions_cache_key,
    talking_points_cache_key,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class _Operation(Generic[T]):
    name: str
    cache_key: str
    ttl_seconds: float
    invoke: Callable[[AdvocacyBackend], T]


class AdvocacyOrchestrator:
    """Routes each operation to the first working backend.

    Backends are discovered on first use. Every operation checks the cache,
    then tries eligible backends strictly in order, recording each failure
    with a cooldown and caching the first success.
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        registry: Mapping[str, BackendSpec] | None = None,
        default_preference: Sequence[str] = DEFAULT_BACKEND_PREFERENCE,
        cache: ResponseCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or OrchestratorConfig()
        self._registry = dict(registry if registry is not None else DEFAULT_BACKEND_REGISTRY)
        self._default_preference = tuple(default_preference)
        self._cache = cache or ResponseCache(clock=clock)
        self._tracker = AvailabilityTracker(
            rate_limit_cooldown_seconds=self._config.rate_limit_cooldown_seconds,
            transient_cooldown_seconds=self._config.transient_cooldown_seconds,
            failure_threshold=self._config.failure_threshold,
            clock=clock,
        )
        self._backends: dict[str, AdvocacyBackend] = {}
        self._backend_order: list[str] = []
        self._initialized = False
        self._init_error: ConfigurationError | None = None
        self._init_lock = threading.Lock()

    @property
    def backend_order(self) -> list[str]:
        return list(self._backend_order)

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def generate_questions(
        self,
        symptoms: str,
        appointment_type: str,
        concerns: str,
        cancel_event: threading.Event | None = None,
    ) -> list[Question]:
        return self._execute(
            _Operation(
                name="questions",
                cache_key=questions_cache_key(symptoms, appointment_type, concerns),
                ttl_seconds=self._config.questions_ttl_seconds,
                invoke=lambda backend: backend.generate_questions(
                    symptoms, appointment_type, concerns
                ),
            ),
            cancel_event,
        )

    def generate_talking_points(
        self,
        symptoms: str,
        concerns: str,
        cancel_event: threading.Event | None = None,
    ) -> list[TalkingPoint]:
        return self._execute(
            _Operation(
                name="talking-points",
                cache_key=talking_points_cache_key(symptoms, concerns),
                ttl_seconds=self._config.talking_points_ttl_seconds,
                invoke=lambda backend: backend.generate_talking_points(symptoms, concerns),
            ),
            cancel_event,
        )

    def analyze_note(
        self,
        note_text: str,
        cancel_event: threading.Event | None = None,
    ) -> NoteAnalysis:
        return self._execute(
            _Operation(
                name="analysis",
                cache_key=analysis_cache_key(note_text),
                ttl_seconds=self._config.analysis_ttl_seconds,
                invoke=lambda backend: backend.analyze_note(note_text),
            ),
            cancel_event,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, BackendStatus]:
        return self._tracker.snapshot()

    def status_report(self) -> dict[str, Any]:
        return {
            "providers": {name: status.to_dict() for name, status in self.get_status().items()},
            "order": self.backend_order,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._init_error is not None:
                raise self._init_error
            if self._initialized:
                return
            try:
                self._initialize_backends()
            except ConfigurationError as exc:
                self._init_error = exc
                raise
            self._initialized = True

    def _initialize_backends(self) -> None:
        discovered: list[str] = []
        for name, spec in self._registry.items():
            api_key = os.getenv(spec.credential_env_var, "").strip()
            if not api_key:
                logger.debug(f"[Orchestrator] {spec.credential_env_var} not set, skipping {name}")
                continue
            try:
                backend = spec.factory(api_key)
            except ImportError as exc:
                logger.warning(f"[Orchestrator] {name} credentials found but its SDK is not installed, skipping {name}: {exc}")
                continue
            except Exception as exc:
                logger.warning(f"[Orchestrator] Failed to initialize {name}, skipping: {exc}")
                continue
            self._backends[name] = backend
            self._tracker.register(name)
            discovered.append(name)

        if not discovered:
            env_vars = " or ".join(spec.credential_env_var for spec in self._registry.values())
            raise ConfigurationError(
                f"No AI backends configured. Please set at least one API key ({env_vars})."
            )

        self._backend_order = self._resolve_order(discovered)
        logger.info(f"[Orchestrator] Initialized with {len(discovered)} backend(s): {', '.join(self._backend_order)}")

    def _resolve_order(self, discovered: list[str]) -> list[str]:
        preference = list(resolve_backend_order(self._config))
        if not preference:
            preference = list(self._default_preference)
        ordered = [name for name in preference if name in discovered]
        ordered.extend(name for name in discovered if name not in ordered)
        return ordered

    # ------------------------------------------------------------------
    # Failover
    # ------------------------------------------------------------------

    def _execute(self, operation: _Operation[T], cancel_event: threading.Event | None) -> T:
        self.ensure_initialized()

        cached = self._cache.get(operation.cache_key)
        if cached is not None:
            logger.debug(f"[Orchestrator] Cache hit for {operation.name}")
            return cached

        candidates = self._tracker.eligible(self._backend_order)
        if not candidates:
            raise AllBackendsUnavailableError(
                "All AI backends are currently unavailable. Please try again later."
            )

        last_error: Exception | None = None
        for name in candidates:
            self._raise_if_cancelled(cancel_event, operation)
            # a concurrent call may have cooled this backend down since selection
            if not self._tracker.is_eligible(name):
                logger.debug(f"[Orchestrator] {name} became ineligible, skipping")
                continue

            try:
                result = operation.invoke(self._backends[name])
            except Exception as exc:
                last_error = exc
                self._tracker.record_failure(name, exc)
                logger.warning(f"[Orchestrator] Backend {name} failed for {operation.name}, trying next... ({exc})")
                continue

            self._tracker.record_success(name)
            self._raise_if_cancelled(cancel_event, operation)
            self._cache.set(operation.cache_key, result, operation.ttl_seconds)
            logger.debug(f"[Orchestrator] {operation.name} served by {name}")
            return result

        self._raise_if_cancelled(cancel_event, operation)
        if last_error is None:
            raise AllBackendsUnavailableError(
                "All AI backends are currently unavailable. Please try again later."
            )
        raise AllBackendsFailedError(
            f"All backends failed. Last error: {last_error}",
            last_error=last_error,
        ) from last_error

    @staticmethod
    def _raise_if_cancelled(cancel_event: threading.Event | None, operation: _Operation[Any]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"[Orchestrator] {operation.name} cancelled by caller")
            raise OperationCancelledError(f"{operation.name} was cancelled")


__all__ = ["AdvocacyOrchestrator"]
