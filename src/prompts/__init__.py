from __future__ import annotations

from prompts.advocacy import (
    render_note_analysis_prompt,
    render_questions_prompt,
    render_talking_points_prompt,
)

__all__ = [
    "render_questions_prompt",
    "render_talking_points_prompt",
    "render_note_analysis_prompt",
]
