"""Prompt templates for the coding assistant."""

from __future__ import annotations

import enum


class PromptKind(enum.Enum):
    EXPLAIN = "explain"
    DEBUG = "debug"
    GENERATE = "generate"
    OPTIMIZE = "optimize"
    CUSTOM = "custom"


ASSISTANT_SYSTEM = (
    "You are a helpful AI coding assistant. Provide clear, concise, and accurate answers."
)


def assistant_user_prompt(kind: PromptKind, code: str, language: str, free_text: str = "") -> str:
    if kind is PromptKind.EXPLAIN:
        return f"Explain the following {language} code clearly:\n\n{code}"
    if kind is PromptKind.DEBUG:
        return f"Find bugs and fix the following {language} code:\n\n{code}"
    if kind is PromptKind.OPTIMIZE:
        return f"Optimize the following {language} code for performance and readability:\n\n{code}"
    if kind is PromptKind.GENERATE:
        request = free_text or code
        return f"Generate {language} code for the following request:\n\n{request}"
    # custom: free-form question, with the editor code attached when present
    if code:
        return f"{free_text}\n\nRelevant code ({language}):\n{code}"
    return free_text
