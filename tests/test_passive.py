"""Tests for markup, stylesheet, JSON and SQL handling."""

import json

import pytest

from codebench.executor_passive import (
    MarkupStrategy,
    PresentationContext,
    QueryStrategy,
    StructuredDataStrategy,
    StylesheetStrategy,
    analyze_sql,
    format_json,
)
from codebench.models import ExecutionRequest, LanguageId, ReportStatus


class TestJson:
    def test_valid_json_is_reindented(self):
        report = format_json('{"b": [1, 2], "a": "x"}')
        assert report.status is ReportStatus.SUCCESS
        assert report.message == 'Valid JSON:\n{\n  "b": [\n    1,\n    2\n  ],\n  "a": "x"\n}'

    def test_canonical_form_parses_back(self):
        source = '{"name": "Codebench", "tags": ["a", "b"], "n": 1.5, "ok": true, "none": null}'
        report = format_json(source)
        assert json.loads(report.metadata["canonical"]) == json.loads(source)

    def test_invalid_json(self):
        report = format_json('{"a": }')
        assert report.status is ReportStatus.ERROR
        assert report.message.startswith("Invalid JSON: ")
        assert report.metadata["error_kind"] == "parse-error"

    def test_non_finite_constants_are_rejected(self):
        for source in ('{"a": NaN}', "[Infinity]", "-Infinity"):
            report = format_json(source)
            assert report.status is ReportStatus.ERROR, source
            assert report.metadata["error_kind"] == "parse-error"
        assert "NaN is not valid JSON" in format_json('{"a": NaN}').message

    def test_out_of_range_number_is_rejected(self):
        report = format_json("1e400")
        assert report.status is ReportStatus.ERROR

    @pytest.mark.asyncio
    async def test_strategy(self):
        report = await StructuredDataStrategy().execute(ExecutionRequest("[1]", LanguageId.JSON))
        assert report.message == "Valid JSON:\n[\n  1\n]"


class TestSql:
    def test_analyze_select(self):
        assert analyze_sql("SELECT * FROM users;") == ("SELECT", [])

    def test_select_without_from(self):
        keyword, issues = analyze_sql("SELECT 1")
        assert keyword == "SELECT"
        assert issues == ["SELECT statement missing FROM clause"]

    def test_comments_are_ignored(self):
        keyword, issues = analyze_sql("-- SELECT x\n/* DELETE */\nUPDATE users SET name = 'a';")
        assert keyword == "UPDATE"
        assert issues == []

    def test_no_command(self):
        keyword, issues = analyze_sql("hello world")
        assert keyword == ""
        assert issues == ["No valid SQL command detected"]

    def test_script_leading_keyword_is_first_statement(self):
        keyword, issues = analyze_sql("CREATE TABLE t (id INT);\nINSERT t VALUES (1);")
        assert keyword == "CREATE"
        assert issues == ["INSERT statement missing INTO clause"]

    @pytest.mark.asyncio
    async def test_valid_query_report(self):
        report = await QueryStrategy().execute(ExecutionRequest("select * from t", LanguageId.SQL))
        assert report.status is ReportStatus.SUCCESS
        assert report.message == "SQL syntax appears valid\n\nOperation: SELECT - Query data"
        assert report.diagnostics[0].text == "SQL execution requires database connection"
        assert report.metadata["operation"] == "SELECT"

    @pytest.mark.asyncio
    async def test_invalid_query_report(self):
        report = await QueryStrategy().execute(ExecutionRequest("DELETE users", LanguageId.SQL))
        assert report.status is ReportStatus.WARNING
        assert report.message == (
            "SQL Issues:\nDELETE statement missing FROM clause\n\nOperation: DELETE - Remove data"
        )
        assert report.metadata["error_kind"] == "validation"


class TestPresentation:
    @pytest.mark.asyncio
    async def test_markup_is_shown(self):
        context = PresentationContext()
        report = await MarkupStrategy(context).execute(
            ExecutionRequest("<h1>Hi</h1>", LanguageId.HTML)
        )
        assert report.status is ReportStatus.SUCCESS
        assert report.message == "HTML opened in preview (/preview)"
        assert context.markup == "<h1>Hi</h1>"
        assert context.revision == 1

    @pytest.mark.asyncio
    async def test_markup_written_to_preview_dir(self, tmp_path):
        context = PresentationContext(tmp_path)
        report = await MarkupStrategy(context).execute(ExecutionRequest("<p>x</p>", LanguageId.HTML))
        assert (tmp_path / "index.html").read_text() == "<p>x</p>"
        assert report.metadata["location"] == str(tmp_path / "index.html")

    @pytest.mark.asyncio
    async def test_stylesheet_replaces_previous(self, tmp_path):
        context = PresentationContext(tmp_path)
        strategy = StylesheetStrategy(context)
        await strategy.execute(ExecutionRequest("body { color: red; }", LanguageId.CSS))
        report = await strategy.execute(ExecutionRequest("body { color: blue; }", LanguageId.CSS))
        assert report.status is ReportStatus.SUCCESS
        assert report.message == "CSS applied to current page"
        assert context.stylesheet == "body { color: blue; }"
        assert (tmp_path / "style.css").read_text() == "body { color: blue; }"

    @pytest.mark.asyncio
    async def test_malformed_stylesheet_warns(self):
        context = PresentationContext()
        report = await StylesheetStrategy(context).execute(ExecutionRequest("body { color: red;", LanguageId.CSS))
        assert report.status is ReportStatus.WARNING
        assert context.stylesheet == "body { color: red;"

    def test_render_page_injects_style(self):
        context = PresentationContext()
        context.show_markup("<html><head><title>t</title></head><body></body></html>")
        context.apply_stylesheet("h1 { color: red; }")
        page = context.render_page()
        assert '<style id="codebench-live-css">\nh1 { color: red; }\n</style>\n</head>' in page

    def test_render_page_without_head(self):
        context = PresentationContext()
        context.show_markup("<p>x</p>")
        context.apply_stylesheet("p {}")
        assert context.render_page().endswith("</style>\n<p>x</p>")
