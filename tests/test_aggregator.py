"""Tests for code_guardian/aggregator.py"""

from code_guardian.aggregator import IssueCounter, aggregate_file, structural_issues
from code_guardian.models import (
    Category,
    ClassInfo,
    CommentInfo,
    CommentKind,
    DeclarationKind,
    FunctionInfo,
    FunctionKind,
    ImportInfo,
    ImportKind,
    Language,
    ParameterInfo,
    ParsedFile,
    Severity,
    VariableInfo,
)
from code_guardian.rules import RuleEngine


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_parsed(**overrides) -> ParsedFile:
    values = dict(path="src/a.ts", language=Language.TYPESCRIPT, content="", lines_of_code=10)
    values.update(overrides)
    return ParsedFile(**values)


def make_function(name="fn", kind=FunctionKind.FUNCTION, line=3, complexity=1,
                  has_return=True, params=0, is_constructor=False) -> FunctionInfo:
    return FunctionInfo(
        name=name,
        kind=kind,
        start_line=line,
        end_line=line + 2,
        parameters=tuple(ParameterInfo(f"p{i}") for i in range(params)),
        complexity=complexity,
        has_return=has_return,
        is_constructor=is_constructor,
    )


def titles(issues):
    return [i.title for i in issues]


# ---------------------------------------------------------------------------
# IssueCounter
# ---------------------------------------------------------------------------

def test_issue_counter_is_sequential():
    counter = IssueCounter()
    assert [counter(), counter(), counter()] == ["issue-1", "issue-2", "issue-3"]


# ---------------------------------------------------------------------------
# structural_issues()
# ---------------------------------------------------------------------------

def test_clean_file_has_no_issues():
    parsed = make_parsed(functions=(make_function(),))
    assert structural_issues(parsed, IssueCounter()) == []


def test_large_file():
    (issue,) = structural_issues(make_parsed(lines_of_code=501), IssueCounter())
    assert issue.title == "Large file detected"
    assert issue.line == 500
    assert issue.severity is Severity.IMPROVEMENT
    assert issue.description == "File has 501 lines of code"


def test_large_file_threshold_is_exclusive():
    assert structural_issues(make_parsed(lines_of_code=500), IssueCounter()) == []


def test_high_complexity_function():
    parsed = make_parsed(functions=(make_function(name="tangle", line=7, complexity=11),))
    (issue,) = structural_issues(parsed, IssueCounter())
    assert issue.title == "High complexity function detected"
    assert issue.severity is Severity.WARNING
    assert issue.category is Category.PERFORMANCE
    assert issue.line == 7
    assert issue.description == "Function tangle has a complexity score of 11"


def test_function_without_return():
    parsed = make_parsed(functions=(make_function(name="log", has_return=False),))
    (issue,) = structural_issues(parsed, IssueCounter())
    assert issue.title == "Function without return statement"
    assert issue.description == "Function log doesn't have a return statement"


def test_return_exemptions():
    parsed = make_parsed(functions=(
        make_function(name="cb", kind=FunctionKind.ARROW, has_return=False),
        make_function(name="renderList", has_return=False),
        make_function(name="Render", kind=FunctionKind.METHOD, has_return=False),
        make_function(name="constructor", kind=FunctionKind.METHOD, has_return=False, is_constructor=True),
    ))
    assert structural_issues(parsed, IssueCounter()) == []


def test_too_many_parameters():
    parsed = make_parsed(functions=(
        make_function(name="five", params=5),
        make_function(name="six", params=6, line=20),
    ))
    (issue,) = structural_issues(parsed, IssueCounter())
    assert issue.title == "Function with too many parameters"
    assert issue.category is Category.ARCHITECTURE
    assert issue.line == 20


def test_per_function_issue_order():
    parsed = make_parsed(functions=(
        make_function(name="bad", complexity=12, has_return=False, params=7),
    ))
    assert titles(structural_issues(parsed, IssueCounter())) == [
        "High complexity function detected",
        "Function without return statement",
        "Function with too many parameters",
    ]


def test_large_class_and_class_without_methods():
    big = ClassInfo(name="God", start_line=4, methods=tuple(f"m{i}" for i in range(16)), properties=())
    record = ClassInfo(name="Point", start_line=30, methods=(), properties=("x", "y"))
    empty = ClassInfo(name="Marker", start_line=40, methods=(), properties=())
    issues = structural_issues(make_parsed(classes=(big, record, empty)), IssueCounter())
    assert [(i.title, i.line, i.severity) for i in issues] == [
        ("Large class detected",   4,  Severity.WARNING),
        ("Class without methods",  30, Severity.IMPROVEMENT),
    ]


def test_too_many_external_imports():
    imports = tuple(
        ImportInfo(module=f"pkg{i}", imported_names=(), kind=ImportKind.DEFAULT, line=i + 1, is_external=True)
        for i in range(21)
    )
    internal = ImportInfo(module="./x", imported_names=(), kind=ImportKind.DEFAULT, line=30, is_external=False)
    (issue,) = structural_issues(make_parsed(imports=imports + (internal,)), IssueCounter())
    assert issue.title == "Too many external dependencies"
    assert issue.line == 1
    assert issue.description == "File has 21 external imports"


def test_commented_code_needs_more_than_three():
    def comment(line, code=True):
        return CommentInfo(kind=CommentKind.SINGLE, text="x", line=line, contains_code_like_tokens=code)

    three = (comment(2), comment(5), comment(9), comment(1, code=False))
    assert structural_issues(make_parsed(comments=three), IssueCounter()) == []

    four = (comment(12), comment(2), comment(5), comment(9))
    (issue,) = structural_issues(make_parsed(comments=four), IssueCounter())
    assert issue.title == "Commented code detected"
    assert issue.line == 12
    assert issue.description == "Found 4 instances of commented code"


def test_var_declarations_reported_once():
    variables = (
        VariableInfo("a", DeclarationKind.CONST, 1, True),
        VariableInfo("b", DeclarationKind.VAR, 6, True),
        VariableInfo("c", DeclarationKind.VAR, 9, True),
    )
    (issue,) = structural_issues(make_parsed(variables=variables), IssueCounter())
    assert issue.title == "var keyword usage detected"
    assert issue.line == 6
    assert issue.description == "Found 2 variables declared with var"


def test_high_file_complexity():
    (issue,) = structural_issues(make_parsed(complexity=51), IssueCounter())
    assert issue.title == "High file complexity"
    assert issue.line == 1
    assert structural_issues(make_parsed(complexity=50), IssueCounter()) == []


def test_all_structural_checks_in_order():
    parsed = make_parsed(
        lines_of_code=600,
        functions=(make_function(complexity=20),),
        classes=(ClassInfo(name="Bag", start_line=2, methods=(), properties=("x",)),),
        variables=(VariableInfo("v", DeclarationKind.VAR, 3, True),),
        complexity=80,
    )
    issues = structural_issues(parsed, IssueCounter())
    assert titles(issues) == [
        "Large file detected",
        "High complexity function detected",
        "Class without methods",
        "var keyword usage detected",
        "High file complexity",
    ]
    assert [i.id for i in issues] == [f"issue-{n}" for n in range(1, 6)]
    assert all(i.file == "src/a.ts" for i in issues)


# ---------------------------------------------------------------------------
# aggregate_file()
# ---------------------------------------------------------------------------

def test_aggregate_structural_then_rules():
    parsed = make_parsed(
        path="src/a.js",
        language=Language.JAVASCRIPT,
        content="var x = 1;\n",
        variables=(VariableInfo("x", DeclarationKind.VAR, 1, True),),
    )
    issues = aggregate_file(parsed, RuleEngine(), IssueCounter())
    assert titles(issues) == [
        "var keyword usage detected",
        "var keyword used - prefer const or let",
    ]
    assert [i.id for i in issues] == ["issue-1", "issue-2"]
