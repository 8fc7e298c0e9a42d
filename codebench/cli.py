"""CLI interface for Codebench."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from codebench.assistant import CodeAssistant, extract_code_block
from codebench.config import Config
from codebench.engine import ExecutionEngine
from codebench.exceptions import AssistantError
from codebench.models import LanguageId, ReportStatus
from codebench.prompts import PromptKind
from codebench.templates import default_template


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def resolve_language(path: str, language: str | None) -> str | None:
    if language:
        return language
    detected = LanguageId.from_filename(path)
    return detected.value if detected else None


def terminal_input(language: LanguageId) -> str | None:
    """Collect program input from the terminal; None means cancelled."""
    if not sys.stdin.isatty():
        return sys.stdin.read()
    print(
        f"This {language.label} program reads input. Enter values one per line, "
        "then Ctrl-D (Ctrl-Z on Windows) to run:",
        file=sys.stderr,
    )
    try:
        return sys.stdin.read()
    except KeyboardInterrupt:
        return None


def _run(args: argparse.Namespace, config: Config) -> int:
    language = resolve_language(args.file, args.language)
    if language is None:
        print(f"Error: cannot infer language of {args.file}; pass --language", file=sys.stderr)
        return 1
    source = read_source(args.file)
    stdin = args.stdin
    if args.stdin_file:
        stdin = read_source(args.stdin_file)

    engine = ExecutionEngine(config, input_provider=terminal_input)
    report = asyncio.run(engine.run(source, language, stdin))
    print(report.render())
    return 1 if report.status is ReportStatus.ERROR else 0


def _ask(args: argparse.Namespace, config: Config) -> int:
    code = read_source(args.file) if args.file else ""
    language = resolve_language(args.file or "", args.language) or "python"
    try:
        answer = CodeAssistant(config).ask(args.kind, code, language, args.prompt or "")
    except AssistantError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(extract_code_block(answer) if args.code_only else answer)
    return 0


def _serve(args: argparse.Namespace) -> int:
    from codebench.web.app import app

    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="codebench",
        description="Codebench: multi-language coding workbench",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a source file")
    run_parser.add_argument("file", help="Path to the source file, or - for stdin")
    run_parser.add_argument("-l", "--language", type=str, default=None)
    run_parser.add_argument("--stdin", type=str, default=None, help="Program input text")
    run_parser.add_argument("--stdin-file", type=str, default=None, help="Read program input from a file")
    run_parser.add_argument(
        "--remote-fallback", action="store_true", default=False,
        help="Run embedded-runtime code remotely if the runtime cannot load",
    )

    ask_parser = subparsers.add_parser("ask", help="Ask the AI assistant about code")
    ask_parser.add_argument("kind", choices=[k.value for k in PromptKind])
    ask_parser.add_argument("file", nargs="?", default=None, help="Source file to send")
    ask_parser.add_argument("-l", "--language", type=str, default=None)
    ask_parser.add_argument("-p", "--prompt", type=str, default=None, help="Free-text request")
    ask_parser.add_argument("--model", type=str, default=None)
    ask_parser.add_argument("--code-only", action="store_true", default=False)

    template_parser = subparsers.add_parser("template", help="Print a starter program")
    template_parser.add_argument("language")

    serve_parser = subparsers.add_parser("serve", help="Start the web API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=5001)
    serve_parser.add_argument("--debug", action="store_true", default=False)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    overrides = {}
    if getattr(args, "remote_fallback", False):
        overrides["remote_fallback"] = True
    if getattr(args, "model", None):
        overrides["model"] = args.model
    if args.log_level:
        overrides["log_level"] = args.log_level
    config = Config.from_env(**overrides)

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=config.log_level.upper(), format="%(levelname)s %(name)s: %(message)s"
        )

    if args.command == "template":
        print(default_template(args.language), end="")
        sys.exit(0)
    if args.command == "run":
        sys.exit(_run(args, config))
    if args.command == "ask":
        sys.exit(_ask(args, config))
    sys.exit(_serve(args))
