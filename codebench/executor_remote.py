"""JDoodle REST API client for remote compile-and-run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from codebench.config import DEFAULT_REMOTE_URL
from codebench.exceptions import RemoteServiceError, RemoteUnreachableError
from codebench.models import (
    Diagnostic,
    ExecutionReport,
    LanguageId,
    Severity,
)

logger = logging.getLogger(__name__)

# languageId -> (JDoodle language code, default versionIndex)
REMOTE_LANGUAGES: dict[LanguageId, tuple[str, str]] = {
    LanguageId.JAVA: ("java", "0"),
    LanguageId.CPP: ("cpp17", "0"),
    LanguageId.C: ("c", "0"),
    LanguageId.JAVASCRIPT: ("nodejs", "0"),
    LanguageId.PYTHON: ("python3", "0"),
    LanguageId.LUA: ("lua", "0"),
}

_HANDLED_FIELDS = {"output", "error", "cputime", "memory"}


@dataclass
class RemoteConfig:
    endpoint: str = DEFAULT_REMOTE_URL
    client_id: str = ""
    client_secret: str = ""
    timeout: float = 30.0

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self.client_id and self.client_secret)


class RemoteExecutionClient:
    """Submits source to the remote service and normalizes the reply.

    "Cannot reach the service" and "the service rejected the program" are
    reported with different wording and ``error_kind`` metadata.
    """

    def __init__(
        self,
        config: RemoteConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or RemoteConfig()
        self._transport = transport

    @property
    def configured(self) -> bool:
        return self._config.configured

    def supports(self, language: LanguageId) -> bool:
        return language in REMOTE_LANGUAGES

    async def run(
        self,
        source: str,
        language: LanguageId,
        version_hint: str | None = None,
        stdin: str | None = None,
    ) -> ExecutionReport:
        if language not in REMOTE_LANGUAGES:
            return ExecutionReport.error(
                f"Remote execution not supported for {language.value}",
                metadata={"error_kind": "unsupported"},
            )
        try:
            data = await self._submit(source, language, version_hint, stdin)
        except RemoteUnreachableError as exc:
            return ExecutionReport.error(
                f"Online Execution Failed: cannot reach the remote execution service ({exc})",
                diagnostics=(
                    Diagnostic(Severity.INFO, "Check your internet connection and try again"),
                ),
                metadata={"error_kind": "network-unreachable"},
            )
        except RemoteServiceError as exc:
            return ExecutionReport.error(
                f"Remote execution service rejected the request: {exc}",
                metadata={"error_kind": "remote-error", "status_code": exc.status_code},
            )
        return self._parse_response(data)

    async def _submit(
        self,
        source: str,
        language: LanguageId,
        version_hint: str | None,
        stdin: str | None,
    ) -> dict[str, Any]:
        code, default_version = REMOTE_LANGUAGES[language]
        payload: dict[str, Any] = {
            "clientId": self._config.client_id,
            "clientSecret": self._config.client_secret,
            "script": source,
            "language": code,
            "versionIndex": version_hint or default_version,
        }
        if stdin:
            payload["stdin"] = stdin

        logger.info("Submitting %s program to %s", code, self._config.endpoint)
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout, transport=self._transport
            ) as client:
                resp = await client.post(self._config.endpoint, json=payload)
        except httpx.TransportError as exc:
            logger.warning("Remote execution service unreachable: %s", exc)
            raise RemoteUnreachableError(str(exc) or type(exc).__name__) from exc

        if resp.is_error:
            raise RemoteServiceError(
                f"HTTP {resp.status_code}: {_error_text(resp)}", status_code=resp.status_code
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteServiceError(
                "response was not valid JSON", status_code=resp.status_code
            ) from exc
        if not isinstance(data, dict):
            raise RemoteServiceError("unexpected response shape", status_code=resp.status_code)
        return data

    def _parse_response(self, data: dict[str, Any]) -> ExecutionReport:
        passthrough = {k: v for k, v in data.items() if k not in _HANDLED_FIELDS}

        if data.get("error"):
            # Compile errors and service-side failures are preserved verbatim.
            return ExecutionReport.error(
                f"Compilation Error:\n{data['error']}",
                metadata={"error_kind": "remote-error", "remote": passthrough},
            )

        diagnostics = []
        if data.get("cputime") is not None:
            diagnostics.append(Diagnostic(Severity.INFO, f"CPU Time: {data['cputime']}s"))
        if data.get("memory") is not None:
            diagnostics.append(Diagnostic(Severity.INFO, f"Memory: {data['memory']}"))

        output = (data.get("output") or "").rstrip("\n")
        return ExecutionReport.success(
            output or "Code executed successfully (no output)",
            diagnostics=tuple(diagnostics),
            metadata={
                "remote": passthrough,
                "cputime": data.get("cputime"),
                "memory": data.get("memory"),
            },
        )


def _error_text(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or resp.text
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.reason_phrase or resp.text
