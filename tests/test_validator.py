"""Tests for the heuristic validator and input detection."""

from codebench.input_detector import needs_input
from codebench.models import IssueKind, LanguageId, Severity
from codebench.validator import HeuristicValidator, check_braces, check_parens

JAVA_OK = """\
public class Main {
    public static void main(String[] args) {
        int x = 5;
        System.out.println(x);
    }
}
"""

CPP_OK = """\
#include <iostream>
int main() {
    std::cout << "hi" << std::endl;
    return 0;
}
"""

C_OK = """\
#include <stdio.h>
int main(void) {
    printf("hi\\n");
    return 0;
}
"""


def _kinds(issues):
    return [issue.kind for issue in issues]


def test_brace_count_is_not_a_parser():
    # equal totals pass even when misnested
    assert check_braces("} {") == []
    issues = check_braces("{ { }")
    assert _kinds(issues) == [IssueKind.UNBALANCED_BRACES]
    assert issues[0].detail == "Unbalanced braces: 2 open, 1 close"


def test_parens():
    assert check_parens("f(g(x))") == []
    assert _kinds(check_parens("f(g(x)")) == [IssueKind.UNBALANCED_PARENS]


def test_java_valid():
    assert HeuristicValidator().validate(JAVA_OK, LanguageId.JAVA) == []


def test_java_missing_main():
    source = "public class Main {\n    void run() {\n    }\n}\n"
    issues = HeuristicValidator().validate(source, LanguageId.JAVA)
    assert IssueKind.MISSING_ENTRY_POINT in _kinds(issues)


def test_java_missing_class():
    issues = HeuristicValidator().validate("int x = 1;", LanguageId.JAVA)
    assert IssueKind.MISSING_DECLARATION in _kinds(issues)


def test_java_missing_semicolon():
    source = JAVA_OK.replace("int x = 5;", "int x = 5")
    issues = HeuristicValidator().validate(source, LanguageId.JAVA)
    assert _kinds(issues) == [IssueKind.MISSING_SEMICOLON]
    assert "line 3" in issues[0].detail


def test_java_unbalanced_braces():
    source = JAVA_OK.rstrip().rstrip("}")
    issues = HeuristicValidator().validate(source, LanguageId.JAVA)
    assert IssueKind.UNBALANCED_BRACES in _kinds(issues)


def test_cpp_valid():
    assert HeuristicValidator().validate(CPP_OK, LanguageId.CPP) == []


def test_cpp_missing_iostream():
    source = CPP_OK.replace("#include <iostream>", "#include <vector>")
    issues = HeuristicValidator().validate(source, LanguageId.CPP)
    assert _kinds(issues) == [IssueKind.MISSING_INCLUDE]


def test_cpp_missing_main():
    issues = HeuristicValidator().validate("#include <iostream>\nint helper() { return 1; }", LanguageId.CPP)
    assert IssueKind.MISSING_ENTRY_POINT in _kinds(issues)


def test_c_valid():
    assert HeuristicValidator().validate(C_OK, LanguageId.C) == []


def test_c_missing_stdio():
    source = C_OK.replace("#include <stdio.h>", "#include <stdlib.h>")
    issues = HeuristicValidator().validate(source, LanguageId.C)
    assert _kinds(issues) == [IssueKind.MISSING_INCLUDE]


def test_javascript_only_checks_balance():
    validator = HeuristicValidator()
    assert validator.validate("console.log('hi')", LanguageId.JAVASCRIPT) == []
    assert _kinds(validator.validate("function f() {", LanguageId.JAVASCRIPT)) == [
        IssueKind.UNBALANCED_BRACES
    ]


def test_supports():
    validator = HeuristicValidator()
    assert validator.supports(LanguageId.JAVA)
    assert not validator.supports(LanguageId.PYTHON)


def test_summarize():
    summary = HeuristicValidator().summarize(CPP_OK)
    assert all(d.severity is Severity.INFO for d in summary)
    assert [d.text for d in summary] == [
        "Syntax checks passed",
        "Found 5 lines of code",
        "Brace balance: 1 pairs",
    ]


class TestNeedsInput:
    def test_python(self):
        assert needs_input("name = input('Name: ')", LanguageId.PYTHON)
        assert needs_input("import sys\ndata = sys.stdin.read()", LanguageId.PYTHON)
        assert not needs_input("print('hi')", LanguageId.PYTHON)

    def test_lua(self):
        assert needs_input("local n = io.read('n')", LanguageId.LUA)
        assert not needs_input("print(1 + 1)", LanguageId.LUA)

    def test_java(self):
        assert needs_input("Scanner sc = new Scanner(System.in);", LanguageId.JAVA)
        assert not needs_input(JAVA_OK, LanguageId.JAVA)

    def test_c_family(self):
        assert needs_input("int x; std::cin >> x;", LanguageId.CPP)
        assert needs_input('scanf("%d", &x);', LanguageId.C)
        assert not needs_input(C_OK, LanguageId.C)

    def test_javascript(self):
        assert needs_input("const x = prompt('x?')", LanguageId.JAVASCRIPT)

    def test_passive_languages_never_need_input(self):
        assert not needs_input("SELECT input(1) FROM t", LanguageId.SQL)
        assert not needs_input('{"input": "x"}', LanguageId.JSON)
