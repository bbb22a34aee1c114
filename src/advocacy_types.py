from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from typing import Any, Literal

QUESTION_CATEGORIES = ("Diagnosis", "Treatment", "Testing", "Follow-up", "Advocacy")
TALKING_POINT_CATEGORIES = (
    "Symptom Documentation",
    "Preventing Dismissal",
    "General Advocacy",
    "Test Results",
)
PRIORITIES = ("high", "medium", "low")

DEFAULT_QUESTION_CATEGORY = "Advocacy"
DEFAULT_TALKING_POINT_CATEGORY = "General Advocacy"
DEFAULT_PRIORITY = "medium"
DEFAULT_ANALYSIS_SUMMARY = "Analysis completed."

# Keys under which JSON-mode backends wrap the item list.
_LIST_WRAPPER_KEYS = ("questions", "talkingPoints", "talking_points", "items", "data")

_REASONING_TAGS = re.compile(r"<(think|thinking|reasoning)>.*?</\1>", flags=re.DOTALL)

Priority = Literal["high", "medium", "low"]


def _as_string_list(raw: Any) -> list[str]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raw = [raw]
    return [str(item).strip() for item in raw if str(item).strip()]


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def _match_label(raw: Any, allowed: tuple[str, ...], default: str) -> str:
    value = _as_text(raw).lower()
    for label in allowed:
        if label.lower() == value:
            return label
    return default


def _strip_wrappers(raw: str) -> str:
    raw = raw.strip()

    # ```json ... ``` or ``` ... ```
    if raw.startswith("```"):
        first_newline = raw.find("\n")
        if first_newline > 0:
            raw = raw[first_newline:].lstrip()
        else:
            raw = raw[3:]
        if raw.endswith("```"):
            raw = raw[:-3].rstrip()

    raw = _REASONING_TAGS.sub("", raw)
    return raw.strip()


def _balanced_span_at(raw: str, start: int) -> str | None:
    """Return the balanced JSON object or array opening at ``raw[start]``."""
    stack: list[str] = []
    in_string = False
    escape_next = False

    for i in range(start, len(raw)):
        char = raw[i]
        if escape_next:
            escape_next = False
            continue
        if in_string:
            if char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "{[":
            stack.append("}" if char == "{" else "]")
        elif char in "}]":
            if char != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return raw[start : i + 1]
    return None


def _looks_like_payload(value: Any) -> bool:
    if isinstance(value, dict):
        return True
    return isinstance(value, list) and any(isinstance(item, dict) for item in value)


def _find_embedded_json(raw: str) -> Any:
    """Decode the first bracketed span in prose that carries an object payload.

    Spans that do not decode are skipped. A decodable span without any object,
    such as a ``[1]`` footnote marker, is only used when nothing better follows.
    """
    fallback: list[Any] = []
    for start, char in enumerate(raw):
        if char not in "{[":
            continue
        candidate = _balanced_span_at(raw, start)
        if candidate is None:
            continue
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if _looks_like_payload(value):
            return value
        if not fallback:
            fallback.append(value)
    if fallback:
        return fallback[0]
    raise ValueError("no embedded JSON value")


def extract_json_payload(raw: str) -> Any:
    """Parse JSON from model output, handling code fences and reasoning content.

    Raises ``ValueError`` when no JSON value can be recovered.
    """
    cleaned = _strip_wrappers(raw)
    if not cleaned:
        raise ValueError("model output is empty")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    try:
        return _find_embedded_json(cleaned)
    except ValueError:
        pass

    raise ValueError(f"model output does not contain valid JSON. Raw output: {cleaned[:500]}")


def extract_item_list(payload: Any) -> list[dict[str, Any]]:
    if isinstance(payload, dict):
        for key in _LIST_WRAPPER_KEYS:
            if isinstance(payload.get(key), list):
                payload = payload[key]
                break
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


@dataclass(frozen=True)
class Question:
    text: str
    category: str
    priority: Priority
    id: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Question":
        return cls(
            text=_as_text(payload.get("text") or payload.get("question")),
            category=_match_label(
                payload.get("category"), QUESTION_CATEGORIES, DEFAULT_QUESTION_CATEGORY
            ),
            priority=_match_label(payload.get("priority"), PRIORITIES, DEFAULT_PRIORITY),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class TalkingPoint:
    point: str
    category: str
    context: str
    when_to_use: str
    id: str = ""

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TalkingPoint":
        return cls(
            point=_as_text(payload.get("point") or payload.get("text")),
            category=_match_label(
                payload.get("category"),
                TALKING_POINT_CATEGORIES,
                DEFAULT_TALKING_POINT_CATEGORY,
            ),
            context=_as_text(payload.get("context")),
            when_to_use=_as_text(payload.get("whenToUse") or payload.get("when_to_use")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "point": self.point,
            "category": self.category,
            "context": self.context,
            "whenToUse": self.when_to_use,
        }


@dataclass(frozen=True)
class NoteAnalysis:
    concerns: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    summary: str = DEFAULT_ANALYSIS_SUMMARY

    @classmethod
    def empty(cls) -> "NoteAnalysis":
        return cls()

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NoteAnalysis":
        return cls(
            concerns=_as_string_list(payload.get("concerns")),
            missing=_as_string_list(payload.get("missing")),
            recommendations=_as_string_list(payload.get("recommendations")),
            summary=_as_text(payload.get("summary")) or DEFAULT_ANALYSIS_SUMMARY,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "concerns": list(self.concerns),
            "missing": list(self.missing),
            "recommendations": list(self.recommendations),
            "summary": self.summary,
        }


def parse_questions(raw: str) -> list[Question]:
    items = extract_item_list(extract_json_payload(raw))
    questions = [Question.from_dict(item) for item in items]
    kept = [q for q in questions if q.text]
    return [replace(q, id=f"q-{i}") for i, q in enumerate(kept)]


def parse_talking_points(raw: str) -> list[TalkingPoint]:
    items = extract_item_list(extract_json_payload(raw))
    points = [TalkingPoint.from_dict(item) for item in items]
    kept = [p for p in points if p.point]
    return [replace(p, id=f"tp-{i}") for i, p in enumerate(kept)]


def parse_note_analysis(raw: str) -> NoteAnalysis:
    payload = extract_json_payload(raw)
    if not isinstance(payload, dict):
        raise ValueError(f"analysis payload must be an object, got {type(payload).__name__}")
    return NoteAnalysis.from_dict(payload)


__all__ = [
    "QUESTION_CATEGORIES",
    "TALKING_POINT_CATEGORIES",
    "PRIORITIES",
    "DEFAULT_ANALYSIS_SUMMARY",
    "Priority",
    "Question",
    "TalkingPoint",
    "NoteAnalysis",
    "extract_json_payload",
    "extract_item_list",
    "parse_questions",
    "parse_talking_points",
    "parse_note_analysis",
]
