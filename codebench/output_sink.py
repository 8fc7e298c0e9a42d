"""Ordered capture of program output lines."""

from __future__ import annotations

import io
from typing import Any

from codebench.models import Diagnostic, ExecutionReport, ReportStatus

STDOUT = "stdout"
STDERR = "stderr"
WARNING = "warning"
RETURN = "return"

_PREFIXES = {
    STDOUT: "",
    STDERR: "ERROR: ",
    WARNING: "WARNING: ",
    RETURN: "Return: ",
}


class OutputSink:
    """Accumulates stdout/stderr/warning/return lines in arrival order.

    Partial writes are buffered per channel until a newline arrives or the
    sink is flushed, so interleaved ``print`` calls keep their order.
    """

    def __init__(self) -> None:
        self._lines: list[tuple[str, str]] = []
        self._partial: dict[str, str] = {}

    def write(self, channel: str, text: str) -> int:
        pending = self._partial.pop(channel, "") + text
        *complete, rest = pending.split("\n")
        for line in complete:
            self._lines.append((channel, line))
        if rest:
            self._partial[channel] = rest
        return len(text)

    def line(self, channel: str, text: str) -> None:
        self._flush_channel(channel)
        for part in str(text).split("\n"):
            self._lines.append((channel, part))

    def return_value(self, value: Any) -> None:
        self.line(RETURN, value if isinstance(value, str) else repr(value))

    def flush(self) -> None:
        for channel in list(self._partial):
            self._flush_channel(channel)

    def _flush_channel(self, channel: str) -> None:
        rest = self._partial.pop(channel, "")
        if rest:
            self._lines.append((channel, rest))

    def stream(self, channel: str) -> SinkStream:
        return SinkStream(self, channel)

    @property
    def lines(self) -> list[tuple[str, str]]:
        self.flush()
        return list(self._lines)

    @property
    def has_output(self) -> bool:
        return bool(self.lines)

    def text(self) -> str:
        return "\n".join(_PREFIXES[channel] + text for channel, text in self.lines)

    def to_report(
        self,
        status: ReportStatus,
        empty_message: str,
        diagnostics: tuple[Diagnostic, ...] = (),
        **metadata: Any,
    ) -> ExecutionReport:
        """Build a report; an empty sink yields *empty_message*, never ""."""
        return ExecutionReport(
            status,
            self.text() if self.has_output else empty_message,
            diagnostics=diagnostics,
            metadata=metadata,
        )


class SinkStream(io.TextIOBase):
    """File-like adapter so ``sys.stdout`` can be pointed at a sink channel."""

    def __init__(self, sink: OutputSink, channel: str) -> None:
        super().__init__()
        self._sink = sink
        self._channel = channel

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        return self._sink.write(self._channel, text)
