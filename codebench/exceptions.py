"""Exceptions raised inside the execution engine.

Strategies convert these into error reports before returning to the caller.
"""


class WorkbenchError(RuntimeError):
    """Base exception for engine failures."""


class RuntimeLoadError(WorkbenchError):
    """Raised when the embedded runtime cannot be loaded."""


class RemoteUnreachableError(WorkbenchError):
    """Raised when the remote execution service produced no response."""


class RemoteServiceError(WorkbenchError):
    """Raised when the remote execution service rejected the submission."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AssistantError(WorkbenchError):
    """Raised when the AI assistant cannot produce a response."""
