from __future__ import annotations

"""Orchestrator configuration with environment fallbacks."""

import os
from dataclasses import dataclass

BACKEND_ORDER_ENV_VAR = "AI_PROVIDER_ORDER"

DEFAULT_QUESTIONS_TTL_SECONDS = 60 * 60
DEFAULT_TALKING_POINTS_TTL_SECONDS = 60 * 60
DEFAULT_ANALYSIS_TTL_SECONDS = 2 * 60 * 60
DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS = 60 * 60
DEFAULT_TRANSIENT_COOLDOWN_SECONDS = 5 * 60
DEFAULT_FAILURE_THRESHOLD = 3


@dataclass(frozen=True)
class OrchestratorConfig:
    # None: read AI_PROVIDER_ORDER; empty tuple: no explicit preference
    backend_order: tuple[str, ...] | None = None
    questions_ttl_seconds: float = DEFAULT_QUESTIONS_TTL_SECONDS
    talking_points_ttl_seconds: float = DEFAULT_TALKING_POINTS_TTL_SECONDS
    analysis_ttl_seconds: float = DEFAULT_ANALYSIS_TTL_SECONDS
    rate_limit_cooldown_seconds: float = DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS
    transient_cooldown_seconds: float = DEFAULT_TRANSIENT_COOLDOWN_SECONDS
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD


def parse_backend_order(raw: str) -> tuple[str, ...]:
    names: list[str] = []
    for part in raw.split(","):
        name = part.strip().lower()
        if name and name not in names:
            names.append(name)
    return tuple(names)


def resolve_backend_order(config: OrchestratorConfig) -> tuple[str, ...]:
    if config.backend_order is not None:
        return parse_backend_order(",".join(config.backend_order))
    return parse_backend_order(os.getenv(BACKEND_ORDER_ENV_VAR, ""))


__all__ = [
    "BACKEND_ORDER_ENV_VAR",
    "DEFAULT_QUESTIONS_TTL_SECONDS",
    "DEFAULT_TALKING_POINTS_TTL_SECONDS",
    "DEFAULT_ANALYSIS_TTL_SECONDS",
    "DEFAULT_RATE_LIMIT_COOLDOWN_SECONDS",
    "DEFAULT_TRANSIENT_COOLDOWN_SECONDS",
    "DEFAULT_FAILURE_THRESHOLD",
    "OrchestratorConfig",
    "parse_backend_order",
    "resolve_backend_order",
]
