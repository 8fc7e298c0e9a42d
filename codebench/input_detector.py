"""Detect programs that block on standard input before they are run."""

from __future__ import annotations

import re

from codebench.models import LanguageId

_INPUT_PATTERNS: dict[LanguageId, re.Pattern[str]] = {
    LanguageId.PYTHON: re.compile(r"\binput\s*\(|\bsys\.stdin\b"),
    LanguageId.LUA: re.compile(r"\bio\.read\b|\bio\.lines\s*\(\s*\)|\bio\.stdin\b"),
    LanguageId.JAVASCRIPT: re.compile(r"\b(prompt|readline|input)\s*\(|\bprocess\.stdin\b"),
    LanguageId.JAVA: re.compile(
        r"\bnew\s+Scanner\s*\(|\.(nextInt|nextDouble|nextLong|nextLine|next)\s*\(|\bBufferedReader\b"
    ),
    LanguageId.CPP: re.compile(r"\b(scanf|cin|getline|getchar)\b"),
    LanguageId.C: re.compile(r"\b(scanf|fgets|getchar|gets)\s*\("),
}


def needs_input(source: str, language: LanguageId) -> bool:
    """Return True when *source* appears to read interactive input.

    Heuristic only: a miss means no prompt is shown, a false hit means an
    unnecessary one. Languages without a pattern never need input.
    """
    pattern = _INPUT_PATTERNS.get(language)
    return bool(pattern and pattern.search(source))
