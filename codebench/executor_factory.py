"""Factory for building the language -> strategy table from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codebench.executor import DirectEvaluationStrategy, Prompt
from codebench.executor_base import ExecutionStrategy
from codebench.executor_compiled import HeuristicThenRemoteStrategy
from codebench.executor_embedded import EmbeddedRuntimeStrategy
from codebench.executor_passive import (
    MarkupStrategy,
    PresentationContext,
    QueryStrategy,
    StructuredDataStrategy,
    StylesheetStrategy,
)
from codebench.executor_remote import RemoteConfig, RemoteExecutionClient
from codebench.models import LanguageId
from codebench.runtime import EmbeddedRuntimeBootstrapper, shared_bootstrapper
from codebench.validator import HeuristicValidator

if TYPE_CHECKING:
    from codebench.config import Config


def create_remote_client(config: Config) -> RemoteExecutionClient:
    return RemoteExecutionClient(
        RemoteConfig(
            endpoint=config.remote_url,
            client_id=config.remote_client_id,
            client_secret=config.remote_client_secret,
            timeout=config.remote_timeout,
        )
    )


def create_strategies(
    config: Config,
    *,
    bootstrapper: EmbeddedRuntimeBootstrapper | None = None,
    remote: RemoteExecutionClient | None = None,
    presentation: PresentationContext | None = None,
    prompt: Prompt | None = None,
) -> dict[LanguageId, ExecutionStrategy]:
    """Create one strategy per supported language."""
    remote = remote or create_remote_client(config)
    bootstrapper = bootstrapper or shared_bootstrapper(config.runtime_bundle_url)
    presentation = presentation or PresentationContext(config.preview_dir or None)
    validator = HeuristicValidator()

    compiled = HeuristicThenRemoteStrategy(validator, remote)
    return {
        LanguageId.PYTHON: DirectEvaluationStrategy(prompt),
        LanguageId.LUA: EmbeddedRuntimeStrategy(
            bootstrapper, fallback=remote if config.remote_fallback else None
        ),
        LanguageId.JAVA: compiled,
        LanguageId.CPP: compiled,
        LanguageId.C: compiled,
        LanguageId.JAVASCRIPT: compiled,
        LanguageId.HTML: MarkupStrategy(presentation),
        LanguageId.CSS: StylesheetStrategy(presentation),
        LanguageId.JSON: StructuredDataStrategy(),
        LanguageId.SQL: QueryStrategy(),
    }
