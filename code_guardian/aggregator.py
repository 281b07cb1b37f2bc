"""Turns a file's structural model into review issues.

Functions:
    structural_issues(parsed, next_id)          -> list[ReviewIssue]
    aggregate_file(parsed, engine, next_id)     -> list[ReviewIssue]

Structural issues come first, then rule-engine matches, with no
deduplication between the two.
"""

from typing import Callable

from code_guardian.models import (
    Category,
    DeclarationKind,
    FunctionKind,
    ParsedFile,
    ReviewIssue,
    Severity,
)
from code_guardian.rules import RuleEngine

MAX_LINES_OF_CODE       = 500
MAX_FUNCTION_COMPLEXITY = 10
MAX_PARAMETERS          = 5
MAX_CLASS_METHODS       = 15
MAX_EXTERNAL_IMPORTS    = 20
MAX_CODE_COMMENTS       = 3
MAX_FILE_COMPLEXITY     = 50


class IssueCounter:
    """Hands out ``issue-<n>`` ids, sequential within one analysis run."""

    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"issue-{self.count}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def structural_issues(parsed: ParsedFile, next_id: Callable[[], str]) -> list[ReviewIssue]:
    issues: list[ReviewIssue] = []

    def add(severity, category, line, title, description, suggestion):
        issues.append(ReviewIssue(
            id=next_id(),
            severity=severity,
            category=category,
            file=parsed.path,
            line=line,
            title=title,
            description=description,
            suggestion=suggestion,
        ))

    if parsed.lines_of_code > MAX_LINES_OF_CODE:
        add(
            Severity.IMPROVEMENT, Category.CODE_QUALITY, MAX_LINES_OF_CODE,
            "Large file detected",
            f"File has {parsed.lines_of_code} lines of code",
            "Consider splitting this file into smaller, more focused modules.",
        )

    for func in parsed.functions:
        if func.complexity > MAX_FUNCTION_COMPLEXITY:
            add(
                Severity.WARNING, Category.PERFORMANCE, func.start_line,
                "High complexity function detected",
                f"Function {func.name} has a complexity score of {func.complexity}",
                "Consider breaking down this function into smaller, more focused functions.",
            )
        if _expects_return(func):
            add(
                Severity.IMPROVEMENT, Category.CODE_QUALITY, func.start_line,
                "Function without return statement",
                f"Function {func.name} doesn't have a return statement",
                "Add a return statement or make the function void if no return is needed.",
            )
        if len(func.parameters) > MAX_PARAMETERS:
            add(
                Severity.IMPROVEMENT, Category.ARCHITECTURE, func.start_line,
                "Function with too many parameters",
                f"Function {func.name} has {len(func.parameters)} parameters",
                "Consider using an object parameter or configuration object.",
            )

    for cls in parsed.classes:
        if len(cls.methods) > MAX_CLASS_METHODS:
            add(
                Severity.WARNING, Category.ARCHITECTURE, cls.start_line,
                "Large class detected",
                f"Class {cls.name} has {len(cls.methods)} methods",
                "Consider splitting this class into smaller, more focused classes.",
            )
        if not cls.methods and cls.properties:
            add(
                Severity.IMPROVEMENT, Category.ARCHITECTURE, cls.start_line,
                "Class without methods",
                f"Class {cls.name} has no methods but has properties",
                "Consider using an interface or type instead of a class.",
            )

    external = [i for i in parsed.imports if i.is_external]
    if len(external) > MAX_EXTERNAL_IMPORTS:
        add(
            Severity.IMPROVEMENT, Category.ARCHITECTURE, 1,
            "Too many external dependencies",
            f"File has {len(external)} external imports",
            "Consider reducing dependencies or using lazy loading.",
        )

    code_comments = [c for c in parsed.comments if c.contains_code_like_tokens]
    if len(code_comments) > MAX_CODE_COMMENTS:
        add(
            Severity.IMPROVEMENT, Category.CODE_QUALITY, code_comments[0].line,
            "Commented code detected",
            f"Found {len(code_comments)} instances of commented code",
            "Remove commented code or use proper documentation.",
        )

    var_declarations = [v for v in parsed.variables if v.declaration_kind is DeclarationKind.VAR]
    if var_declarations:
        add(
            Severity.IMPROVEMENT, Category.CODE_QUALITY, var_declarations[0].line,
            "var keyword usage detected",
            f"Found {len(var_declarations)} variables declared with var",
            "Replace var with const or let for better scoping.",
        )

    if parsed.complexity > MAX_FILE_COMPLEXITY:
        add(
            Severity.WARNING, Category.ARCHITECTURE, 1,
            "High file complexity",
            f"File has a complexity score of {parsed.complexity}",
            "Consider breaking down this file into smaller modules.",
        )

    return issues


def aggregate_file(
    parsed: ParsedFile, engine: RuleEngine, next_id: Callable[[], str]
) -> list[ReviewIssue]:
    """Structural issues for *parsed* followed by its rule-engine matches."""
    return structural_issues(parsed, next_id) + engine.scan(parsed.path, parsed.content, next_id)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _expects_return(func) -> bool:
    # render functions and constructors are exempt
    return (
        not func.has_return
        and func.kind is not FunctionKind.ARROW
        and "render" not in func.name.lower()
        and not func.is_constructor
    )
