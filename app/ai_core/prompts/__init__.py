"""Prompts package."""

from app.ai_core.prompts.review import (
    QUESTION_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    create_review_prompt,
    select_system_prompt,
)

__all__ = [
    "QUESTION_SYSTEM_PROMPT",
    "REVIEW_SYSTEM_PROMPT",
    "create_review_prompt",
    "select_system_prompt",
]
