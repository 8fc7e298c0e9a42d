"""Compiled languages: static checks first, remote run only if they pass."""

from __future__ import annotations

import logging

from codebench.executor_remote import RemoteExecutionClient
from codebench.models import (
    Diagnostic,
    ExecutionReport,
    ExecutionRequest,
    Severity,
    StrategyKind,
    issues_to_diagnostics,
)
from codebench.validator import HeuristicValidator

logger = logging.getLogger(__name__)


class HeuristicThenRemoteStrategy:
    """Any heuristic issue yields a Warning and the remote is never called."""

    kind = StrategyKind.HEURISTIC_REMOTE

    def __init__(
        self,
        validator: HeuristicValidator,
        remote: RemoteExecutionClient | None = None,
        version_hint: str | None = None,
    ) -> None:
        self._validator = validator
        self._remote = remote
        self._version_hint = version_hint

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        label = request.language.label
        issues = self._validator.validate(request.source, request.language)
        if issues:
            logger.debug("%d heuristic issue(s) for %s, skipping remote run", len(issues), label)
            details = "\n".join(issue.detail for issue in issues)
            return ExecutionReport.warning(
                f"{label} Code Issues:\n{details}\n\nFix these issues for successful compilation.",
                diagnostics=issues_to_diagnostics(issues),
                metadata={
                    "error_kind": "validation",
                    "issues": [issue.kind.value for issue in issues],
                },
            )

        summary = self._validator.summarize(request.source)
        if self._remote is None or not self._remote.configured:
            return ExecutionReport.warning(
                f"{label} code appears valid, but remote execution is not configured",
                diagnostics=summary
                + (Diagnostic(Severity.INFO, "Set JDOODLE_CLIENT_ID and JDOODLE_CLIENT_SECRET to run it"),),
                metadata={"error_kind": "unsupported"},
            )

        report = await self._remote.run(
            request.source, request.language, self._version_hint, stdin=request.stdin
        )
        return ExecutionReport(
            report.status,
            report.message,
            diagnostics=summary + report.diagnostics,
            metadata=report.metadata,
        )
