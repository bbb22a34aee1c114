from __future__ import annotations

from advocacy_types import QUESTION_CATEGORIES, TALKING_POINT_CATEGORIES
from prompts.base import _or_placeholder


def _quoted_choices(choices: tuple[str, ...]) -> str:
    quoted = [f'"{choice}"' for choice in choices]
    return ", ".join(quoted[:-1]) + f", or {quoted[-1]}"


def render_questions_prompt(symptoms: str, appointment_type: str, concerns: str) -> str:
    return (
        "You are a medical advocacy assistant. "
        "Generate 8-10 questions for a patient to ask their doctor.\n\n"
        "Context:\n"
        f"- Symptoms: {_or_placeholder(symptoms, 'Not specified')}\n"
        f"- Appointment Type: {_or_placeholder(appointment_type, 'General')}\n"
        f"- Concerns: {_or_placeholder(concerns, 'None')}\n\n"
        'Return ONLY a JSON object with a "questions" array containing objects with:\n'
        '- "text": The question\n'
        f'- "category": {_quoted_choices(QUESTION_CATEGORIES)}\n'
        '- "priority": "high", "medium", or "low"\n\n'
        'Example: {"questions": [{"text":"What tests do you recommend?",'
        '"category":"Testing","priority":"high"}]}'
    )


def render_talking_points_prompt(symptoms: str, concerns: str) -> str:
    return (
        "You are a medical advocacy assistant. "
        "Generate 6-8 talking points for a patient.\n\n"
        "Context:\n"
        f"- Symptoms: {_or_placeholder(symptoms, 'Not specified')}\n"
        f"- Concerns: {_or_placeholder(concerns, 'None')}\n\n"
        'Return ONLY a JSON object with a "talkingPoints" array containing objects with:\n'
        '- "point": The statement to use\n'
        f'- "category": {_quoted_choices(TALKING_POINT_CATEGORIES)}\n'
        '- "context": Why this helps\n'
        '- "whenToUse": When to say this\n\n'
        'Example: {"talkingPoints": [{"point":"I need this documented in my chart.",'
        '"category":"General Advocacy","context":"Creates a record",'
        '"whenToUse":"After discussing concerns"}]}'
    )


def render_note_analysis_prompt(note_text: str) -> str:
    return (
        "Analyze this medical note and return a JSON object with:\n"
        '- "concerns": Array of potential issues\n'
        '- "missing": Array of missing information\n'
        '- "recommendations": Array of actions to take\n'
        '- "summary": Brief 2-sentence summary\n\n'
        f"Note: {note_text.strip()}\n\n"
        "Return ONLY valid JSON."
    )


__all__ = [
    "render_questions_prompt",
    "render_talking_points_prompt",
    "render_note_analysis_prompt",
]
