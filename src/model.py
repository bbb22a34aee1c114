from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from advocacy_types import (
    NoteAnalysis,
    Question,
    TalkingPoint,
    parse_note_analysis,
    parse_questions,
    parse_talking_points,
)
from prompts import (
    render_note_analysis_prompt,
    render_questions_prompt,
    render_talking_points_prompt,
)

logger = logging.getLogger(__name__)


LLMTask = Literal[
    "generate_questions",
    "generate_talking_points",
    "analyze_note",
]


@dataclass(frozen=True)
class LLMRequest:
    task: LLMTask
    prompt: str
    expect_json: bool = False


class LLMModel(Protocol):
    def generate(self, request: LLMRequest) -> str:
        ...


@runtime_checkable
class AdvocacyBackend(Protocol):
    """Capability every backend provides to the orchestrator.

    Transport failures surface as exceptions carrying a message and, where
    known, a ``status_code``. Unparseable model output never raises: the
    backend returns an empty, structurally valid result instead.
    """

    def generate_questions(
        self, symptoms: str, appointment_type: str, concerns: str
    ) -> list[Question]:
        ...

    def generate_talking_points(self, symptoms: str, concerns: str) -> list[TalkingPoint]:
        ...

    def analyze_note(self, note_text: str) -> NoteAnalysis:
        ...


class AdvocacyBackendFromLLM:
    def __init__(self, llm_model: LLMModel, name: str = "llm") -> None:
        self._llm_model = llm_model
        self.name = name

    def generate_questions(
        self, symptoms: str, appointment_type: str, concerns: str
    ) -> list[Question]:
        raw = self._generate(
            "generate_questions",
            render_questions_prompt(symptoms, appointment_type, concerns),
        )
        try:
            return parse_questions(raw)
        except ValueError as exc:
            logger.warning(f"[{self.name}] Unparseable questions output, returning empty list: {exc}")
            return []

    def generate_talking_points(self, symptoms: str, concerns: str) -> list[TalkingPoint]:
        raw = self._generate(
            "generate_talking_points",
            render_talking_points_prompt(symptoms, concerns),
        )
        try:
            return parse_talking_points(raw)
        except ValueError as exc:
            logger.warning(f"[{self.name}] Unparseable talking points output, returning empty list: {exc}")
            return []

    def analyze_note(self, note_text: str) -> NoteAnalysis:
        raw = self._generate("analyze_note", render_note_analysis_prompt(note_text))
        try:
            return parse_note_analysis(raw)
        except ValueError as exc:
            logger.warning(f"[{self.name}] Unparseable note analysis output, returning empty analysis: {exc}")
            return NoteAnalysis.empty()

    def _generate(self, task: LLMTask, prompt: str) -> str:
        return self._llm_model.generate(LLMRequest(task=task, prompt=prompt, expect_json=True))
