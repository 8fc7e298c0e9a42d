"""Markup, stylesheet, structured-data and query sources.

None of these are executed: markup is shown on the preview surface, a
stylesheet replaces the live one, JSON is parsed and re-printed, SQL is
classified and checked.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from codebench.models import (
    Diagnostic,
    ExecutionReport,
    ExecutionRequest,
    Severity,
    StrategyKind,
    issues_to_diagnostics,
)
from codebench.validator import check_braces

logger = logging.getLogger(__name__)


class PresentationContext:
    """The preview surface: the last rendered markup plus one live stylesheet."""

    def __init__(self, preview_dir: str | Path | None = None, location: str = "/preview") -> None:
        self.markup: str | None = None
        self.stylesheet: str | None = None
        self.revision = 0
        self._preview_dir = Path(preview_dir) if preview_dir else None
        self._location = location

    def show_markup(self, markup: str) -> str:
        self.markup = markup
        self.revision += 1
        if self._preview_dir is None:
            return self._location
        self._preview_dir.mkdir(parents=True, exist_ok=True)
        target = self._preview_dir / "index.html"
        target.write_text(markup, encoding="utf-8")
        return str(target)

    def apply_stylesheet(self, stylesheet: str) -> None:
        self.stylesheet = stylesheet
        self.revision += 1
        if self._preview_dir is not None:
            self._preview_dir.mkdir(parents=True, exist_ok=True)
            (self._preview_dir / "style.css").write_text(stylesheet, encoding="utf-8")

    def render_page(self) -> str:
        """Markup with the live stylesheet injected before ``</head>``."""
        markup = self.markup or ""
        if not self.stylesheet:
            return markup
        style = f'<style id="codebench-live-css">\n{self.stylesheet}\n</style>'
        if re.search(r"</head>", markup, re.IGNORECASE):
            return re.sub(r"</head>", lambda _: f"{style}\n</head>", markup, count=1, flags=re.IGNORECASE)
        return f"{style}\n{markup}"


class MarkupStrategy:
    kind = StrategyKind.PASSIVE

    def __init__(self, context: PresentationContext) -> None:
        self._context = context

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        try:
            location = self._context.show_markup(request.source)
        except OSError as e:
            return ExecutionReport.error(
                f"Could not open the preview surface: {e}",
                metadata={"error_kind": "runtime-load"},
            )
        return ExecutionReport.success(
            f"HTML opened in preview ({location})", metadata={"location": location}
        )


class StylesheetStrategy:
    kind = StrategyKind.PASSIVE

    def __init__(self, context: PresentationContext) -> None:
        self._context = context

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        try:
            self._context.apply_stylesheet(request.source)
        except OSError as e:
            return ExecutionReport.error(
                f"Could not apply stylesheet: {e}", metadata={"error_kind": "runtime-load"}
            )
        issues = check_braces(request.source)
        if issues:
            return ExecutionReport.warning(
                "CSS applied to current page, but the stylesheet looks malformed",
                diagnostics=issues_to_diagnostics(issues),
                metadata={"error_kind": "validation"},
            )
        return ExecutionReport.success("CSS applied to current page")


class StructuredDataStrategy:
    kind = StrategyKind.PASSIVE

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        return format_json(request.source)


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def format_json(source: str) -> ExecutionReport:
    try:
        parsed = json.loads(source, parse_constant=_reject_constant)
        pretty = json.dumps(parsed, indent=2, ensure_ascii=False, allow_nan=False)
    except json.JSONDecodeError as e:
        return ExecutionReport.error(
            f"Invalid JSON: {e}",
            diagnostics=(Diagnostic(Severity.ERROR, f"line {e.lineno}, column {e.colno}"),),
            metadata={"error_kind": "parse-error"},
        )
    except ValueError as e:
        return ExecutionReport.error(f"Invalid JSON: {e}", metadata={"error_kind": "parse-error"})
    return ExecutionReport.success(f"Valid JSON:\n{pretty}", metadata={"canonical": pretty})


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

SQL_OPERATIONS = {
    "SELECT": "SELECT - Query data",
    "INSERT": "INSERT - Add data",
    "UPDATE": "UPDATE - Modify data",
    "DELETE": "DELETE - Remove data",
    "CREATE": "CREATE - Create table/database",
    "DROP": "DROP - Delete table/database",
    "ALTER": "ALTER - Change table structure",
}

# statement keyword -> (required clause, issue text)
_SQL_REQUIREMENTS = {
    "SELECT": ("FROM", "SELECT statement missing FROM clause"),
    "INSERT": ("INTO", "INSERT statement missing INTO clause"),
    "UPDATE": ("SET", "UPDATE statement missing SET clause"),
    "DELETE": ("FROM", "DELETE statement missing FROM clause"),
}


def _strip_sql_comments(source: str) -> str:
    source = re.sub(r"/\*.*?\*/", " ", source, flags=re.DOTALL)
    return re.sub(r"--[^\n]*", " ", source)


def analyze_sql(source: str) -> tuple[str, list[str]]:
    """Return (leading keyword or "", issues) for a SQL script."""
    statements = [s.strip() for s in _strip_sql_comments(source).split(";") if s.strip()]
    leading = ""
    issues: list[str] = []
    for statement in statements:
        keyword = statement.split(None, 1)[0].upper()
        if keyword not in SQL_OPERATIONS:
            continue
        if not leading:
            leading = keyword
        required = _SQL_REQUIREMENTS.get(keyword)
        if required and not re.search(rf"\b{required[0]}\b", statement, re.IGNORECASE):
            issues.append(required[1])
    if not leading:
        issues.insert(0, "No valid SQL command detected")
    return leading, issues


class QueryStrategy:
    kind = StrategyKind.PASSIVE

    async def execute(self, request: ExecutionRequest) -> ExecutionReport:
        keyword, issues = analyze_sql(request.source)
        operation = SQL_OPERATIONS.get(keyword, "Unknown")
        metadata = {"operation": keyword or None}
        if issues:
            metadata["error_kind"] = "validation"
            return ExecutionReport.warning(
                "SQL Issues:\n" + "\n".join(issues) + f"\n\nOperation: {operation}",
                diagnostics=tuple(Diagnostic(Severity.WARNING, issue) for issue in issues),
                metadata=metadata,
            )
        return ExecutionReport.success(
            f"SQL syntax appears valid\n\nOperation: {operation}",
            diagnostics=(Diagnostic(Severity.INFO, "SQL execution requires database connection"),),
            metadata=metadata,
        )
