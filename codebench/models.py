"""Data models for Codebench."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any


class StrategyKind(enum.Enum):
    DIRECT = "direct"
    EMBEDDED = "embedded"
    HEURISTIC_REMOTE = "heuristic-remote"
    PASSIVE = "passive"


class LanguageId(enum.Enum):
    PYTHON = "python"
    LUA = "lua"
    JAVA = "java"
    CPP = "cpp"
    C = "c"
    JAVASCRIPT = "javascript"
    HTML = "html"
    CSS = "css"
    JSON = "json"
    SQL = "sql"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def strategy_kind(self) -> StrategyKind:
        return _STRATEGY_KINDS[self]

    @classmethod
    def parse(cls, value: LanguageId | str) -> LanguageId:
        """Resolve a language identifier, accepting common aliases.

        Raises ValueError for anything outside the supported set.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        key = _ALIASES.get(key, key)
        return cls(key)

    @classmethod
    def from_filename(cls, path: str) -> LanguageId | None:
        return _EXTENSIONS.get(PurePath(path).suffix.lower())


_LABELS = {
    LanguageId.PYTHON: "Python",
    LanguageId.LUA: "Lua",
    LanguageId.JAVA: "Java",
    LanguageId.CPP: "C++",
    LanguageId.C: "C",
    LanguageId.JAVASCRIPT: "JavaScript",
    LanguageId.HTML: "HTML",
    LanguageId.CSS: "CSS",
    LanguageId.JSON: "JSON",
    LanguageId.SQL: "SQL",
}

_STRATEGY_KINDS = {
    LanguageId.PYTHON: StrategyKind.DIRECT,
    LanguageId.LUA: StrategyKind.EMBEDDED,
    LanguageId.JAVA: StrategyKind.HEURISTIC_REMOTE,
    LanguageId.CPP: StrategyKind.HEURISTIC_REMOTE,
    LanguageId.C: StrategyKind.HEURISTIC_REMOTE,
    LanguageId.JAVASCRIPT: StrategyKind.HEURISTIC_REMOTE,
    LanguageId.HTML: StrategyKind.PASSIVE,
    LanguageId.CSS: StrategyKind.PASSIVE,
    LanguageId.JSON: StrategyKind.PASSIVE,
    LanguageId.SQL: StrategyKind.PASSIVE,
}

_ALIASES = {
    "py": "python",
    "python3": "python",
    "c++": "cpp",
    "js": "javascript",
    "node": "javascript",
    "nodejs": "javascript",
    "htm": "html",
}

_EXTENSIONS = {
    ".py": LanguageId.PYTHON,
    ".lua": LanguageId.LUA,
    ".java": LanguageId.JAVA,
    ".cpp": LanguageId.CPP,
    ".cc": LanguageId.CPP,
    ".cxx": LanguageId.CPP,
    ".c": LanguageId.C,
    ".js": LanguageId.JAVASCRIPT,
    ".html": LanguageId.HTML,
    ".htm": LanguageId.HTML,
    ".css": LanguageId.CSS,
    ".json": LanguageId.JSON,
    ".sql": LanguageId.SQL,
}


class ReportStatus(enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]


_GLYPHS = {
    ReportStatus.SUCCESS: "✓",
    ReportStatus.WARNING: "⚠",
    ReportStatus.ERROR: "✗",
}


class Severity(enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class IssueKind(enum.Enum):
    MISSING_ENTRY_POINT = "missing-entry-point"
    MISSING_DECLARATION = "missing-declaration"
    MISSING_INCLUDE = "missing-include"
    MISSING_SEMICOLON = "missing-semicolon"
    UNBALANCED_BRACES = "unbalanced-braces"
    UNBALANCED_PARENS = "unbalanced-parens"


@dataclass(frozen=True)
class HeuristicIssue:
    kind: IssueKind
    detail: str


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    text: str


@dataclass(frozen=True)
class ExecutionRequest:
    source: str
    language: LanguageId
    stdin: str | None = None


@dataclass(frozen=True)
class ExecutionReport:
    status: ReportStatus
    message: str
    diagnostics: tuple[Diagnostic, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, message: str, **kwargs: Any) -> ExecutionReport:
        return cls(ReportStatus.SUCCESS, message, **kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: Any) -> ExecutionReport:
        return cls(ReportStatus.WARNING, message, **kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: Any) -> ExecutionReport:
        return cls(ReportStatus.ERROR, message, **kwargs)

    @property
    def ok(self) -> bool:
        return self.status is ReportStatus.SUCCESS

    def render(self) -> str:
        """Terminal text: status glyph, message, then one line per diagnostic."""
        lines = [f"{self.status.glyph} {self.message}"]
        lines.extend(f"  [{d.severity.value}] {d.text}" for d in self.diagnostics)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "diagnostics": [
                {"severity": d.severity.value, "text": d.text} for d in self.diagnostics
            ],
            "metadata": dict(self.metadata),
            "rendered": self.render(),
        }


def issues_to_diagnostics(issues: list[HeuristicIssue]) -> tuple[Diagnostic, ...]:
    return tuple(Diagnostic(Severity.WARNING, issue.detail) for issue in issues)
