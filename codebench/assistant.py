"""AI coding assistant: explain, debug, generate and optimize code."""

from __future__ import annotations

import logging
import re

from openai import OpenAIError

from codebench.config import Config
from codebench.exceptions import AssistantError
from codebench.prompts import ASSISTANT_SYSTEM, PromptKind, assistant_user_prompt

logger = logging.getLogger(__name__)


class CodeAssistant:
    """Request/response wrapper around a chat-completions model.

    The execution engine does not depend on this; callers use it alongside.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._client = config.create_openai_client() if config.assistant_configured else None

    def ask(self, kind: PromptKind | str, code: str, language: str, free_text: str = "") -> str:
        kind = PromptKind(kind) if isinstance(kind, str) else kind
        if kind in (PromptKind.GENERATE, PromptKind.CUSTOM) and not (free_text or code).strip():
            raise AssistantError("A prompt is required")
        if kind in (PromptKind.EXPLAIN, PromptKind.DEBUG, PromptKind.OPTIMIZE) and not code.strip():
            raise AssistantError("No code provided")
        return self._call_llm(assistant_user_prompt(kind, code, language, free_text))

    def _call_llm(self, user: str) -> str:
        if self._client is None:
            raise AssistantError("OPENAI_API_KEY environment variable is required for AI features")
        try:
            response = self._client.chat.completions.create(
                model=self.config.assistant_model,
                messages=[
                    {"role": "system", "content": ASSISTANT_SYSTEM},
                    {"role": "user", "content": user},
                ],
                temperature=self.config.assistant_temperature,
                max_tokens=self.config.assistant_max_tokens,
            )
        except OpenAIError as e:
            logger.warning("Assistant request failed: %s", e)
            raise AssistantError(f"LLM call failed: {e}") from e
        return response.choices[0].message.content or ""


def extract_code_block(text: str) -> str:
    """Extract code from markdown fences, falling back to the full text."""
    match = re.search(r"```[\w+#-]*\s*\n(.*?)```", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text.strip()
