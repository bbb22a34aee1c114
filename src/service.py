"""Task dispatch for a hosting process.

Maps the three task names used by the application onto orchestrator calls and
turns failures into a status code plus a body the caller can render.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Literal, Mapping

from core.errors import (
    AllBackendsFailedError,
    AllBackendsUnavailableError,
    ConfigurationError,
    OperationCancelledError,
)
from orchestration.availability import FailureKind, classify_failure
from orchestration.orchestrator import AdvocacyOrchestrator

logger = logging.getLogger(__name__)

AdvocacyTask = Literal["questions", "talking-points", "analyze-note"]
TASKS: tuple[str, ...] = ("questions", "talking-points", "analyze-note")


def _context_value(context: Mapping[str, Any] | None, key: str) -> str:
    if not context:
        return ""
    value = context.get(key)
    return str(value) if value is not None else ""


def dispatch_task(
    orchestrator: AdvocacyOrchestrator,
    task: str,
    context: Mapping[str, Any] | None = None,
    prompt: str = "",
    cancel_event: threading.Event | None = None,
) -> tuple[int, dict[str, Any]]:
    if task not in TASKS:
        return 400, {"error": "Invalid task"}

    try:
        if task == "questions":
            questions = orchestrator.generate_questions(
                _context_value(context, "symptoms"),
                _context_value(context, "appointmentType"),
                _context_value(context, "concerns"),
                cancel_event=cancel_event,
            )
            data: Any = [question.to_dict() for question in questions]
        elif task == "talking-points":
            points = orchestrator.generate_talking_points(
                _context_value(context, "symptoms"),
                _context_value(context, "concerns"),
                cancel_event=cancel_event,
            )
            data = [point.to_dict() for point in points]
        else:
            data = orchestrator.analyze_note(prompt or "", cancel_event=cancel_event).to_dict()
    except Exception as exc:
        logger.error(f"[Service] {task} failed: {exc}")
        return describe_failure(exc)

    return 200, {"data": data}


def describe_failure(exc: Exception) -> tuple[int, dict[str, Any]]:
    if isinstance(exc, ConfigurationError):
        return 500, {
            "error": str(exc),
            "hint": "Please configure at least one AI provider (GEMINI_API_KEY or OPENAI_API_KEY) in your environment.",
        }
    if isinstance(exc, AllBackendsUnavailableError):
        return 503, {
            "error": str(exc),
            "hint": "All AI providers have hit rate limits or encountered errors. Please try again in a few minutes.",
        }
    if isinstance(exc, AllBackendsFailedError):
        if exc.last_error is not None and classify_failure(exc.last_error) is FailureKind.RATE_LIMIT:
            return 429, {
                "error": "AI provider quota exceeded",
                "message": str(exc),
                "hint": "The app will work again once the provider quota resets or credits are added.",
                "statusCode": 429,
            }
        return 500, {"error": str(exc)}
    if isinstance(exc, OperationCancelledError):
        return 499, {"error": str(exc)}
    return 500, {"error": str(exc) or "API error"}


__all__ = [
    "AdvocacyTask",
    "TASKS",
    "dispatch_task",
    "describe_failure",
]
