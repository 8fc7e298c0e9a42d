"""Pattern-based static checks for languages without a local interpreter.

These checks approximate what a compiler would reject. An empty issue list
means only that no checked pattern failed; the program *appears* valid.
"""

from __future__ import annotations

import re
from typing import Callable

from codebench.models import Diagnostic, HeuristicIssue, IssueKind, LanguageId, Severity

Check = Callable[[str], list[HeuristicIssue]]

_JAVA_STATEMENT_HINT = re.compile(r"\b(System|int|String|double|boolean|long|char|float|return)\b")
_JAVA_CONTROL = re.compile(r"\b(if|else|for|while|do|switch|try|catch|finally|case|default)\b")
_JAVA_SIGNATURE = re.compile(r"^(public|private|protected|static|final|abstract)\b.*\)\s*(throws\s+[\w.,\s]+)?$")


def count_balance(source: str, open_token: str, close_token: str) -> tuple[int, int]:
    return source.count(open_token), source.count(close_token)


def check_braces(source: str) -> list[HeuristicIssue]:
    """Count check, not a parser: equal totals pass regardless of nesting."""
    opened, closed = count_balance(source, "{", "}")
    if opened != closed:
        return [
            HeuristicIssue(
                IssueKind.UNBALANCED_BRACES,
                f"Unbalanced braces: {opened} open, {closed} close",
            )
        ]
    return []


def check_parens(source: str) -> list[HeuristicIssue]:
    opened, closed = count_balance(source, "(", ")")
    if opened != closed:
        return [
            HeuristicIssue(
                IssueKind.UNBALANCED_PARENS,
                f"Unbalanced parentheses: {opened} open, {closed} close",
            )
        ]
    return []


def _check_java_declaration(source: str) -> list[HeuristicIssue]:
    if not re.search(r"\b(class|interface|enum|record)\s+\w+", source):
        return [HeuristicIssue(IssueKind.MISSING_DECLARATION, "Missing class or interface declaration")]
    return []


def _check_java_main(source: str) -> list[HeuristicIssue]:
    if not re.search(r"\bpublic\s+static\s+void\s+main\s*\(", source):
        return [HeuristicIssue(IssueKind.MISSING_ENTRY_POINT, "Missing main method")]
    return []


def _check_java_semicolons(source: str) -> list[HeuristicIssue]:
    issues = []
    for number, line in enumerate(source.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(("//", "/*", "*", "@")):
            continue
        if stripped.endswith((";", "{", "}", ":", ",", "(", "+", "&&", "||")):
            continue
        if _JAVA_CONTROL.search(stripped) or _JAVA_SIGNATURE.match(stripped):
            continue
        if _JAVA_STATEMENT_HINT.search(stripped):
            issues.append(
                HeuristicIssue(
                    IssueKind.MISSING_SEMICOLON,
                    f"Missing semicolon at line {number}: {stripped}",
                )
            )
    return issues


def _check_c_family_main(source: str) -> list[HeuristicIssue]:
    if not re.search(r"\bmain\s*\(", source):
        return [HeuristicIssue(IssueKind.MISSING_ENTRY_POINT, "Missing main function")]
    return []


def _check_cpp_includes(source: str) -> list[HeuristicIssue]:
    issues = []
    if "#include" not in source:
        issues.append(HeuristicIssue(IssueKind.MISSING_INCLUDE, "Missing #include directives"))
    if re.search(r"\b(cout|cin|cerr)\b", source) and not re.search(r"#include\s*<iostream>", source):
        issues.append(
            HeuristicIssue(IssueKind.MISSING_INCLUDE, "Using cout/cin but missing #include <iostream>")
        )
    return issues


def _check_c_includes(source: str) -> list[HeuristicIssue]:
    issues = []
    if "#include" not in source:
        issues.append(HeuristicIssue(IssueKind.MISSING_INCLUDE, "Missing #include directives"))
    if re.search(r"\b(printf|scanf|puts|fgets)\s*\(", source) and not re.search(
        r"#include\s*<(stdio\.h|cstdio)>", source
    ):
        issues.append(
            HeuristicIssue(IssueKind.MISSING_INCLUDE, "Using printf/scanf but missing #include <stdio.h>")
        )
    return issues


_CHECKS: dict[LanguageId, tuple[Check, ...]] = {
    LanguageId.JAVA: (
        _check_java_declaration,
        _check_java_main,
        check_braces,
        check_parens,
        _check_java_semicolons,
    ),
    LanguageId.CPP: (_check_c_family_main, _check_cpp_includes, check_braces, check_parens),
    LanguageId.C: (_check_c_family_main, _check_c_includes, check_braces, check_parens),
    LanguageId.JAVASCRIPT: (check_braces, check_parens),
}


class HeuristicValidator:
    """Runs the fixed battery of structural checks for a language family."""

    def supports(self, language: LanguageId) -> bool:
        return language in _CHECKS

    def validate(self, source: str, language: LanguageId) -> list[HeuristicIssue]:
        issues: list[HeuristicIssue] = []
        for check in _CHECKS.get(language, ()):
            issues.extend(check(source))
        return issues

    def summarize(self, source: str) -> tuple[Diagnostic, ...]:
        """Info lines attached to a passing validation."""
        opened, _ = count_balance(source, "{", "}")
        return (
            Diagnostic(Severity.INFO, "Syntax checks passed"),
            Diagnostic(Severity.INFO, f"Found {len(source.splitlines())} lines of code"),
            Diagnostic(Severity.INFO, f"Brace balance: {opened} pairs"),
        )
