"""Tests for the execution engine's dispatch and failure handling."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from codebench.config import Config
from codebench.engine import ExecutionEngine
from codebench.executor import DirectEvaluationStrategy
from codebench.executor_factory import create_strategies
from codebench.executor_passive import QueryStrategy, StructuredDataStrategy
from codebench.models import ExecutionReport, LanguageId, ReportStatus, StrategyKind


def _engine(strategies=None, input_provider=None) -> ExecutionEngine:
    if strategies is None:
        strategies = {
            LanguageId.PYTHON: DirectEvaluationStrategy(),
            LanguageId.JSON: StructuredDataStrategy(),
            LanguageId.SQL: QueryStrategy(),
        }
    return ExecutionEngine(Config(), strategies=strategies, input_provider=input_provider)


def _stub(report=None, kind=StrategyKind.DIRECT):
    strategy = MagicMock()
    strategy.kind = kind
    strategy.execute = AsyncMock(return_value=report or ExecutionReport.success("ok"))
    return strategy


@pytest.mark.asyncio
async def test_python_end_to_end():
    report = await _engine().run("print(1 + 1)", "python")
    assert report.status is ReportStatus.SUCCESS
    assert report.message == "2"


@pytest.mark.asyncio
async def test_language_aliases():
    report = await _engine().run("print('x')", "py")
    assert report.message == "x"


@pytest.mark.asyncio
async def test_unsupported_language():
    report = await _engine().run("x", "cobol")
    assert report.status is ReportStatus.WARNING
    assert report.message == "Execution not supported for cobol"
    assert report.metadata["error_kind"] == "unsupported"


@pytest.mark.asyncio
async def test_known_language_without_strategy():
    report = await _engine().run("print 1", "lua")
    assert report.message == "Execution not supported for lua"


@pytest.mark.asyncio
async def test_empty_source():
    strategy = _stub()
    report = await _engine({LanguageId.PYTHON: strategy}).run("   \n", "python")
    assert report.status is ReportStatus.WARNING
    assert report.message == "No code to execute."
    strategy.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_strategy_exception_becomes_error():
    strategy = _stub()
    strategy.execute.side_effect = RuntimeError("kaboom")
    engine = _engine({LanguageId.PYTHON: strategy})
    report = await engine.run("print(1)", "python")
    assert report.status is ReportStatus.ERROR
    assert report.message == "Execution Error: kaboom"
    assert report.metadata["error_kind"] == "infrastructure"
    assert not engine.running


class TestInputSolicitation:
    @pytest.mark.asyncio
    async def test_provider_supplies_stdin(self):
        provider = MagicMock(return_value="Ada\n")
        report = await _engine(input_provider=provider).run("print('hi', input())", "python")
        provider.assert_called_once_with(LanguageId.PYTHON)
        assert report.message == "hi Ada"

    @pytest.mark.asyncio
    async def test_async_provider(self):
        provider = AsyncMock(return_value="3\n")
        report = await _engine(input_provider=provider).run("print(int(input()) * 2)", "python")
        assert report.message == "6"

    @pytest.mark.asyncio
    async def test_cancelled_input(self):
        strategy = _stub()
        engine = _engine({LanguageId.PYTHON: strategy}, input_provider=lambda lang: None)
        report = await engine.run("x = input()", "python")
        assert report.status is ReportStatus.WARNING
        assert report.message.startswith("Execution cancelled")
        assert report.metadata["error_kind"] == "cancelled"
        strategy.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_explicit_stdin_skips_provider(self):
        provider = MagicMock()
        report = await _engine(input_provider=provider).run("print(input())", "python", stdin="given\n")
        provider.assert_not_called()
        assert report.message == "given"

    @pytest.mark.asyncio
    async def test_no_provider_for_programs_without_input(self):
        provider = MagicMock()
        await _engine(input_provider=provider).run("print(1)", "python")
        provider.assert_not_called()


@pytest.mark.asyncio
async def test_second_run_while_busy_is_rejected():
    release = asyncio.Event()

    class SlowStrategy:
        kind = StrategyKind.DIRECT

        async def execute(self, request):
            await release.wait()
            return ExecutionReport.success("first")

    engine = _engine({LanguageId.PYTHON: SlowStrategy()})
    first = asyncio.ensure_future(engine.run("print(1)", "python"))
    await asyncio.sleep(0)
    assert engine.running

    second = await engine.run("print(2)", "python")
    assert second.status is ReportStatus.WARNING
    assert second.metadata["error_kind"] == "busy"

    release.set()
    assert (await first).message == "first"
    assert not engine.running


def test_needs_input():
    engine = _engine()
    assert engine.needs_input("input()", "python")
    assert not engine.needs_input("input()", "cobol")


def test_factory_covers_every_language():
    strategies = create_strategies(Config())
    assert set(strategies) == set(LanguageId)
    for language, strategy in strategies.items():
        assert strategy.kind is language.strategy_kind
