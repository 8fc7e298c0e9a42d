"""Flask JSON API for Codebench."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Coroutine

from flask import Flask, Response, jsonify, request

from codebench.assistant import CodeAssistant
from codebench.config import Config
from codebench.engine import ExecutionEngine
from codebench.exceptions import AssistantError
from codebench.executor_factory import create_strategies
from codebench.executor_passive import PresentationContext
from codebench.prompts import PromptKind
from codebench.templates import default_template

logger = logging.getLogger(__name__)

app = Flask(__name__)
config = Config.from_env()


def _no_more_input(message: str) -> str:
    raise EOFError("no more program input")


class EngineLoop:
    """One long-lived event loop thread that every request submits to.

    The runtime load latch and the runtime's run lock belong to this loop.
    """

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever, name="codebench-engine", daemon=True
        )
        self._thread.start()

    def call(self, coro: Coroutine[Any, Any, Any]) -> Any:
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()


presentation = PresentationContext(config.preview_dir or None)
engine = ExecutionEngine(
    config,
    strategies=create_strategies(config, presentation=presentation, prompt=_no_more_input),
)
engine_loop = EngineLoop()


# ---------------------------------------------------------------------------
# Languages and templates
# ---------------------------------------------------------------------------

@app.route("/api/languages")
def list_languages():
    return jsonify([
        {"id": lang.value, "label": lang.label, "strategy": lang.strategy_kind.value}
        for lang in engine.languages
    ])


@app.route("/api/templates/<language>")
def get_template(language: str):
    return jsonify({"language": language, "template": default_template(language)})


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _is_text(*values: object) -> bool:
    return all(isinstance(v, str) for v in values)


@app.route("/api/needs-input", methods=["POST"])
def needs_input():
    data = _json_body()
    code, language = data.get("code", ""), data.get("language", "")
    if not _is_text(code, language):
        return jsonify({"error": "code and language must be strings"}), 400
    return jsonify({"needs_input": engine.needs_input(code, language)})


@app.route("/api/run", methods=["POST"])
def run_code():
    data = _json_body()
    code = data.get("code", "")
    language = data.get("language", "")
    stdin = data.get("stdin")

    if not _is_text(code, language) or not (stdin is None or _is_text(stdin)):
        return jsonify({"error": "code, language and stdin must be strings"}), 400
    if not code.strip():
        return jsonify({"error": "No code provided"}), 400
    if not language:
        return jsonify({"error": "language is required"}), 400

    logger.info("Running %s snippet (%d chars)", language, len(code))
    report = engine_loop.call(engine.run(code, language, stdin))
    payload = report.to_dict()
    payload["needs_input"] = stdin is None and engine.needs_input(code, language)
    return jsonify(payload)


# ---------------------------------------------------------------------------
# AI assistant
# ---------------------------------------------------------------------------

@app.route("/api/ai/<kind>", methods=["POST"])
def ask_assistant(kind: str):
    try:
        prompt_kind = PromptKind(kind)
    except ValueError:
        return jsonify({"error": f"Unknown request kind: {kind}"}), 404

    data = _json_body()
    fields = (data.get("code", ""), data.get("language", "python"), data.get("prompt", ""))
    if not _is_text(*fields):
        return jsonify({"error": "code, language and prompt must be strings"}), 400
    try:
        result = CodeAssistant(config).ask(prompt_kind, *fields)
    except AssistantError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"result": result})


# ---------------------------------------------------------------------------
# Preview surface
# ---------------------------------------------------------------------------

@app.route("/preview")
def preview():
    if presentation.markup is None:
        return "Nothing to preview yet. Run some HTML first.", 404
    return Response(presentation.render_page(), mimetype="text/html")


@app.route("/preview/style.css")
def preview_stylesheet():
    return Response(presentation.stylesheet or "", mimetype="text/css")


if __name__ == "__main__":
    app.run(debug=True, port=5001)
