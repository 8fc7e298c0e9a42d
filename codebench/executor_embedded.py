"""Lua execution inside the embedded runtime."""

from __future__ import annotations

import logging

from codebench.exceptions import RuntimeLoadError
from codebench.executor_remote import RemoteExecutionClient
from codebench.models import ExecutionReport, ExecutionRequest, ReportStatus, StrategyKind
from codebench.output_sink import STDERR, STDOUT, OutputSink
from codebench.runtime import EmbeddedRuntimeBootstrapper

logger = logging.getLogger(__name__)

NO_OUTPUT_MESSAGE = "Lua executed successfully (no output)"


class EmbeddedRuntimeStrategy:
    """Waits for the shared runtime, then runs the guest under capture.

    Guest failures come back inside the captured stderr, never as a host
    exception. If the runtime cannot load and *fallback* is set, the source
    is sent to the remote service instead.
    """

    kind = StrategyKind.EMBEDDED

    def __init__(
        self,
        bootstrapper: EmbeddedRuntimeBootstrapper,
        fallback: RemoteExecutionClient | None = None,
    ) -> None:
        self._bootstrapper = bootstrapper
        self._fallback = fallback

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        try:
            handle = await self._bootstrapper.ensure_ready()
        except RuntimeLoadError as e:
            if self._fallback is not None and self._fallback.configured:
                logger.info("Runtime unavailable, running %s remotely", request.language.value)
                return await self._fallback.run(request.source, request.language, stdin=request.stdin)
            return ExecutionReport.error(str(e), metadata={"error_kind": "runtime-load"})

        result = await handle.run(request.source, request.stdin)

        sink = OutputSink()
        if result.stdout:
            sink.write(STDOUT, result.stdout)
        if result.stderr:
            sink.write(STDERR, result.stderr)
        if result.ok:
            return sink.to_report(ReportStatus.SUCCESS, NO_OUTPUT_MESSAGE)
        return sink.to_report(
            ReportStatus.ERROR, "Lua Error: program failed", error_kind="guest-error"
        )
