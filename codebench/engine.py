"""Public entry point: language -> strategy dispatch with input solicitation."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from codebench.config import Config
from codebench.executor_base import ExecutionStrategy
from codebench.executor_factory import create_strategies
from codebench.input_detector import needs_input
from codebench.models import ExecutionReport, ExecutionRequest, LanguageId

logger = logging.getLogger(__name__)

InputProvider = Callable[[LanguageId], Union[str, None, Awaitable[Union[str, None]]]]


class ExecutionEngine:
    """Resolves a language to its strategy and always returns a report.

    ``run`` never raises: unsupported languages, cancelled input, strategy
    failures and unexpected exceptions all become an ``ExecutionReport``.
    One run at a time; a second call while one is pending is rejected.
    """

    def __init__(
        self,
        config: Config | None = None,
        strategies: dict[LanguageId, ExecutionStrategy] | None = None,
        input_provider: InputProvider | None = None,
    ) -> None:
        self.config = config or Config.from_env()
        self._strategies = strategies if strategies is not None else create_strategies(self.config)
        self._input_provider = input_provider
        self._running = False

    @property
    def languages(self) -> list[LanguageId]:
        return list(self._strategies)

    @property
    def running(self) -> bool:
        return self._running

    def needs_input(self, source: str, language: LanguageId | str) -> bool:
        try:
            return needs_input(source, LanguageId.parse(language))
        except ValueError:
            return False

    async def run(
        self,
        source: str,
        language: LanguageId | str,
        stdin: str | None = None,
    ) -> ExecutionReport:
        if self._running:
            return ExecutionReport.warning(
                "An execution is already in progress", metadata={"error_kind": "busy"}
            )
        self._running = True
        try:
            return await self._dispatch(source, language, stdin)
        except Exception as e:
            logger.exception("Execution failed for %s", language)
            return ExecutionReport.error(
                f"Execution Error: {e}", metadata={"error_kind": "infrastructure"}
            )
        finally:
            self._running = False

    async def _dispatch(
        self,
        source: str,
        language: LanguageId | str,
        stdin: str | None,
    ) -> ExecutionReport:
        try:
            lang = LanguageId.parse(language)
        except ValueError:
            return _unsupported(language)
        strategy = self._strategies.get(lang)
        if strategy is None:
            return _unsupported(lang.value)

        if not source or not source.strip():
            return ExecutionReport.warning("No code to execute.")

        if stdin is None and self._input_provider is not None and needs_input(source, lang):
            stdin = await self._solicit_input(lang)
            if stdin is None:
                return ExecutionReport.warning(
                    "Execution cancelled: the program needs input and none was provided",
                    metadata={"error_kind": "cancelled"},
                )

        request = ExecutionRequest(source=source, language=lang, stdin=stdin)
        logger.info("Executing %s code via %s strategy", lang.value, strategy.kind.value)
        report = await strategy.execute(request)
        logger.debug("%s run finished with status %s", lang.value, report.status.value)
        return report

    async def _solicit_input(self, language: LanguageId) -> str | None:
        value = self._input_provider(language)
        if inspect.isawaitable(value):
            value = await value
        return value


def _unsupported(language: object) -> ExecutionReport:
    name = language.value if isinstance(language, LanguageId) else language
    return ExecutionReport.warning(
        f"Execution not supported for {name}", metadata={"error_kind": "unsupported"}
    )
