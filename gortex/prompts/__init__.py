"""Prompt Construction Package"""

from gortex.prompts.builder import (
    GenerationContext,
    PromptBuilder,
    RESPONSE_FIELDS,
    build_system_prompt,
    build_user_prompt,
)

__all__ = [
    "GenerationContext",
    "PromptBuilder",
    "RESPONSE_FIELDS",
    "build_system_prompt",
    "build_user_prompt",
]
