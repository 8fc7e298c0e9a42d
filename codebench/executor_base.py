"""Common interface for every language-family execution strategy."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from codebench.models import ExecutionReport, ExecutionRequest, StrategyKind


@runtime_checkable
class ExecutionStrategy(Protocol):
    kind: StrategyKind

    async def execute(self, request: ExecutionRequest) -> ExecutionReport: ...
