"""Shared machinery for the per-language structural extractors.

Each language family subclasses StructuralExtractor and overrides the
``extract_*`` hooks it supports. The helpers below are plain functions so
the subclasses can share them without inheritance tricks:
    - line_number / count_lines_of_code
    - heuristic_complexity / file_complexity
    - match_delimiter / body_span / top_level_lines
    - split_parameters
"""

import logging
import re
from typing import Iterable

from code_guardian.models import (
    ClassInfo,
    CommentInfo,
    CommentKind,
    DeclarationKind,
    FunctionInfo,
    FunctionKind,
    ImportInfo,
    Language,
    ParameterInfo,
    ParsedFile,
    VariableInfo,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MissingContentError(Exception):
    """Raised when a source file has no content to extract from."""


# ---------------------------------------------------------------------------
# Line and complexity helpers
# ---------------------------------------------------------------------------

BRANCH_RE = re.compile(r"\b(?:if|else|for|while|switch|case|catch|try)\b", re.IGNORECASE)
LOGIC_RE  = re.compile(r"&&|\|\||\band\b|\bor\b", re.IGNORECASE)

# Variables declared before this line are treated as globals.
GLOBAL_LINE_LIMIT = 20

# Imports beyond this count add to the file complexity.
IMPORT_ALLOWANCE = 10

_COMMENT_PREFIXES = ("//", "#", "/*")


def line_number(content: str, offset: int) -> int:
    """Return the 1-based line number of *offset* in *content*."""
    return content.count("\n", 0, offset) + 1


def count_lines_of_code(content: str) -> int:
    """Count lines that are neither blank nor comment-only."""
    count = 0
    for line in content.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(_COMMENT_PREFIXES):
            count += 1
    return count


def heuristic_complexity(code: str) -> int:
    """1 + branch keywords + short-circuit operators found in *code*."""
    return 1 + len(BRANCH_RE.findall(code)) + len(LOGIC_RE.findall(code))


def file_complexity(
    functions: Iterable[FunctionInfo],
    classes: Iterable[ClassInfo],
    imports: Iterable[ImportInfo],
) -> int:
    total = sum(f.complexity for f in functions)
    total += sum(2 * len(c.methods) + len(c.properties) for c in classes)
    total += max(0, len(tuple(imports)) - IMPORT_ALLOWANCE)
    return total


# ---------------------------------------------------------------------------
# Delimiter matching
# ---------------------------------------------------------------------------

_CHAR_LITERAL_RE = re.compile(r"'(?:\\.[^'\n]{0,8}|[^'\\\n])'")


def match_delimiter(
    content: str,
    open_idx: int,
    opener: str = "{",
    closer: str = "}",
    line_comment: str = "//",
    block_comments: bool = True,
    quotes: str = "\"'`",
) -> int | None:
    """Return the index of the delimiter closing the one at *open_idx*.

    String literals and comments are skipped. A single quote that is not in
    *quotes* is only skipped when it forms a character literal, so Rust
    lifetimes do not swallow the rest of a line. Returns None when the
    delimiter is never closed.
    """
    depth = 0
    i = open_idx
    n = len(content)
    quote = None

    while i < n:
        ch = content[i]

        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if line_comment and content.startswith(line_comment, i):
            newline = content.find("\n", i)
            if newline == -1:
                return None
            i = newline + 1
            continue

        if block_comments and content.startswith("/*", i):
            end = content.find("*/", i + 2)
            if end == -1:
                return None
            i = end + 2
            continue

        if ch in quotes:
            quote = ch
        elif ch == "'":
            literal = _CHAR_LITERAL_RE.match(content, i)
            if literal:
                i = literal.end()
                continue
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1

    return None


def body_span(
    content: str,
    start: int,
    trailer: re.Pattern | None = None,
    **delimiter_options,
) -> tuple[int, int] | None:
    """Locate the ``{ ... }`` body that follows a declaration.

    Returns (open_idx, close_idx), or None when a ``;`` terminates the
    declaration first or the text between *start* and the brace does not
    match *trailer*. An unbalanced body runs to the end of the content.
    """
    brace = content.find("{", start)
    if brace == -1:
        return None
    semicolon = content.find(";", start, brace)
    if semicolon != -1:
        return None
    if trailer is not None and not trailer.match(content[start:brace]):
        return None
    close = match_delimiter(content, brace, **delimiter_options)
    if close is None:
        close = len(content) - 1
    return brace, close


_LITERAL_STRIP_RE = re.compile(
    r'"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'|`(?:\\.|[^`\\])*`|//[^\n]*'
)


def top_level_lines(content: str, open_idx: int, close_idx: int) -> list[tuple[int, str]]:
    """Return (offset, line) for each line sitting directly inside a body."""
    result = []
    depth = 0
    offset = open_idx + 1
    for raw in content[offset:close_idx].splitlines(keepends=True):
        if depth == 0:
            result.append((offset, raw))
        code = _LITERAL_STRIP_RE.sub("", raw)
        depth += code.count("{") - code.count("}")
        offset += len(raw)
    return result


# ---------------------------------------------------------------------------
# Parameter helpers
# ---------------------------------------------------------------------------

_PAIRS = {"(": ")", "[": "]", "{": "}", "<": ">"}


def split_parameters(text: str) -> list[str]:
    """Split a parameter list on top-level commas."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in _PAIRS:
            depth += 1
        elif ch in _PAIRS.values() and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


# ---------------------------------------------------------------------------
# Comment extraction for C-style languages
# ---------------------------------------------------------------------------

C_COMMENT_RE = re.compile(
    r'(?P<string>"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`|\'(?:\\.|[^\'\\\n])*\')'
    r"|(?P<doc>/\*\*(?!/).*?\*/)"
    r"|(?P<block>/\*.*?\*/)"
    r"|(?P<line>//[^\n]*)",
    re.DOTALL,
)

C_CODE_STRIP_RE = re.compile(
    r'/\*.*?\*/|//[^\n]*|"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\'|`(?:\\.|[^`\\])*`',
    re.DOTALL,
)

VALUE_RETURN_RE = re.compile(r"\breturn\b[ \t]*[^\s;}]")


# ---------------------------------------------------------------------------
# Extractor base
# ---------------------------------------------------------------------------

class StructuralExtractor:
    """Builds a ParsedFile from raw text for one language family.

    Subclasses set ``code_tokens`` (words that make a comment look like
    commented-out code) and override the ``extract_*`` hooks.
    """

    language: Language = Language.UNKNOWN
    code_tokens: tuple[str, ...] = ()
    code_strip_re: re.Pattern = C_CODE_STRIP_RE

    def __init__(self) -> None:
        pattern = r"\b(?:" + "|".join(self.code_tokens) + r")\b" if self.code_tokens else None
        self._code_token_re = re.compile(pattern) if pattern else None

    def extract(self, path: str, content: str | None) -> ParsedFile:
        """Return the structural model of *content*.

        Raises:
            MissingContentError: if *content* is None.
        """
        if content is None:
            raise MissingContentError(f"No content available for '{path}'")

        functions = tuple(sorted(self.extract_functions(content), key=lambda f: f.start_line))
        classes   = tuple(self.extract_classes(content, functions))
        imports   = tuple(self.extract_imports(content))
        variables = tuple(self.extract_variables(content))
        comments  = tuple(self.extract_comments(content))

        parsed = ParsedFile(
            path=path,
            language=self.language,
            content=content,
            lines_of_code=count_lines_of_code(content),
            functions=functions,
            classes=classes,
            imports=imports,
            variables=variables,
            comments=comments,
            complexity=file_complexity(functions, classes, imports),
        )
        logger.debug(
            "Extracted %s: %d functions, %d classes, %d imports",
            path, len(functions), len(classes), len(imports),
        )
        return parsed

    # -- hooks --------------------------------------------------------------

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        return []

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        return []

    def extract_imports(self, content: str) -> list[ImportInfo]:
        return []

    def extract_variables(self, content: str) -> list[VariableInfo]:
        return []

    def extract_comments(self, content: str) -> list[CommentInfo]:
        comments = []
        for match in C_COMMENT_RE.finditer(content):
            group = match.lastgroup
            if group == "string":
                continue
            raw = match.group(group)
            if group == "line":
                kind = CommentKind.DOC if raw.startswith(("///", "//!")) else CommentKind.SINGLE
                text = raw.lstrip("/!").strip()
            else:
                kind = CommentKind.DOC if group == "doc" else CommentKind.BLOCK
                text = raw[2:-2].strip("*").strip()
            comments.append(self.make_comment(kind, text, line_number(content, match.start())))
        return comments

    # -- builders -----------------------------------------------------------

    def strip_literals(self, text: str) -> str:
        """Drop comments and empty out string literals, keeping the code."""
        return self.code_strip_re.sub(_blank_literal, text)

    def mask_comments(self, text: str) -> str:
        """Blank out comments in place, keeping offsets and line breaks."""
        return self.code_strip_re.sub(_mask_comment, text)

    def make_comment(self, kind: CommentKind, text: str, line: int) -> CommentInfo:
        looks_like_code = (
            kind is not CommentKind.DOC
            and self._code_token_re is not None
            and self._code_token_re.search(text) is not None
        )
        return CommentInfo(kind=kind, text=text, line=line, contains_code_like_tokens=looks_like_code)

    def make_function(
        self,
        content: str,
        name: str,
        kind: FunctionKind,
        start: int,
        end: int,
        parameters: list[ParameterInfo],
        declares_return: bool = False,
        is_exported: bool = False,
        is_constructor: bool = False,
    ) -> FunctionInfo:
        """Build a FunctionInfo from the span ``content[start:end + 1]``."""
        code = self.strip_literals(content[start:end + 1])
        return FunctionInfo(
            name=name,
            kind=kind,
            start_line=line_number(content, start),
            end_line=line_number(content, end),
            parameters=tuple(parameters),
            complexity=heuristic_complexity(code),
            has_return=declares_return or VALUE_RETURN_RE.search(code) is not None,
            is_exported=is_exported,
            is_constructor=is_constructor,
        )

    @staticmethod
    def make_variable(name: str, kind: DeclarationKind, line: int) -> VariableInfo:
        return VariableInfo(
            name=name,
            declaration_kind=kind,
            line=line,
            is_global=line < GLOBAL_LINE_LIMIT,
        )


def _blank_literal(match: re.Match) -> str:
    return "" if match.group(0).startswith(("/", "#")) else '""'


def _mask_comment(match: re.Match) -> str:
    text = match.group(0)
    if not text.startswith(("/", "#")):
        return text
    return re.sub(r"[^\n]", " ", text)


def is_external_module(module: str) -> bool:
    """Anything not addressed relative to the importing file is external."""
    return not module.startswith(".")
