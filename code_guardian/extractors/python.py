"""Extractor for Python sources.

Python bodies are delimited by indentation, so spans are computed from the
leading whitespace of the declaration line instead of brace matching.
"""

import re

from code_guardian.extractors.base import (
    StructuralExtractor,
    is_external_module,
    line_number,
    match_delimiter,
    split_parameters,
)
from code_guardian.models import (
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
    VariableInfo,
)

DEF_RE    = re.compile(r"^(?P<indent>[ \t]*)(?P<async>async\s+)?def\s+(?P<name>\w+)\s*\(", re.MULTILINE)
LAMBDA_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<name>\w+)\s*=\s*lambda\b(?P<params>[^:\n]*):", re.MULTILINE)
CLASS_RE  = re.compile(r"^(?P<indent>[ \t]*)class\s+(?P<name>\w+)\s*(?:\((?P<bases>[^)]*)\))?\s*:", re.MULTILINE)

IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?P<modules>[\w.]+(?:\s+as\s+\w+)?(?:[ \t]*,[ \t]*[\w.]+(?:\s+as\s+\w+)?)*)",
    re.MULTILINE,
)
FROM_IMPORT_RE = re.compile(
    r"^[ \t]*from\s+(?P<module>\.*[\w.]*)\s+import\s+(?P<names>\([^)]*\)|[^\n#]+)",
    re.MULTILINE,
)

ASSIGN_RE      = re.compile(r"^[ \t]*(?P<name>[A-Za-z_]\w*)[ \t]*(?::[^=\n]+)?=(?!=)(?P<value>[^\n]*)$", re.MULTILINE)
SELF_ATTR_RE   = re.compile(r"\bself\.(?P<name>\w+)\s*(?::[^=\n]+)?=(?!=)")
CLASS_FIELD_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*(?::[^=\n]+(?:=(?!=).*)?|=(?!=).*)$")
YIELD_RE       = re.compile(r"\byield\b")

LITERAL_RE = re.compile(
    r"(?P<string>[rRbBuUfF]{0,2}(?:\"\"\".*?\"\"\"|'''.*?'''|\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*'))"
    r"|(?P<comment>#[^\n]*)",
    re.DOTALL,
)

CODE_STRIP_RE = re.compile(
    r"\"\"\".*?\"\"\"|'''.*?'''|\"(?:\\.|[^\"\\\n])*\"|'(?:\\.|[^'\\\n])*'|#[^\n]*",
    re.DOTALL,
)

_RECEIVERS = frozenset({"self", "cls"})
_CONSTRUCTORS = frozenset({"__init__", "__new__", "__post_init__"})


class PythonExtractor(StructuralExtractor):
    language = Language.PYTHON
    code_tokens = ("def", "class", "var", "let", "const")
    code_strip_re = CODE_STRIP_RE

    # -- functions ----------------------------------------------------------

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        lines = content.split("\n")
        class_ranges = [_class_range(content, lines, m) for m in CLASS_RE.finditer(content)]
        functions = []

        for m in DEF_RE.finditer(content):
            paren = m.end() - 1
            close = match_delimiter(
                content, paren, "(", ")", line_comment="#", block_comments=False, quotes="\"'",
            )
            if close is None:
                continue
            start_line = line_number(content, m.start())
            end_line = _block_end(lines, line_number(content, close) - 1, len(m.group("indent")))
            end = _line_end_offset(content, end_line)

            name = m.group("name")
            if m.group("async"):
                kind = FunctionKind.ASYNC
            elif any(first < start_line <= last for first, last in class_ranges):
                kind = FunctionKind.METHOD
            else:
                kind = FunctionKind.FUNCTION

            body = self.strip_literals(content[m.start():end + 1])
            functions.append(self.make_function(
                content, name, kind, m.start(), end,
                [p for p in _parameters(content[paren + 1:close]) if p.name not in _RECEIVERS],
                declares_return=YIELD_RE.search(body) is not None,
                is_exported=not name.startswith("_") and not m.group("indent"),
                is_constructor=name in _CONSTRUCTORS,
            ))

        for m in LAMBDA_RE.finditer(content):
            newline = content.find("\n", m.end())
            end = newline - 1 if newline != -1 else len(content) - 1
            functions.append(self.make_function(
                content, m.group("name"), FunctionKind.ARROW, m.start(), end,
                _parameters(m.group("params")),
                declares_return=True,
                is_exported=not m.group("name").startswith("_") and not m.group("indent"),
            ))

        return functions

    # -- classes ------------------------------------------------------------

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        lines = content.split("\n")
        classes = []
        for m in CLASS_RE.finditer(content):
            first, last = _class_range(content, lines, m)
            body_indent = _body_indent(lines, first, last)
            methods = tuple(
                f.name for f in functions
                if first < f.start_line <= last
                and f.kind is not FunctionKind.ARROW
                and _indent_of(lines, f.start_line) == body_indent
            )
            bases = [b.strip() for b in (m.group("bases") or "").split(",") if b.strip() and "=" not in b]
            classes.append(ClassInfo(
                name=m.group("name"),
                start_line=first,
                methods=methods,
                properties=tuple(_properties(lines, first, last, body_indent)),
                extends=bases[0] if bases else None,
                is_exported=not m.group("name").startswith("_") and not m.group("indent"),
            ))
        return classes

    # -- imports ------------------------------------------------------------

    def extract_imports(self, content: str) -> list[ImportInfo]:
        found: list[tuple[int, ImportInfo]] = []

        for m in IMPORT_RE.finditer(content):
            line = line_number(content, m.start())
            for part in m.group("modules").split(","):
                module, _, alias = part.strip().partition(" as ")
                module = module.strip()
                found.append((m.start(), ImportInfo(
                    module=module,
                    imported_names=(alias.strip() or module.split(".")[0],),
                    kind=ImportKind.NAMESPACE,
                    line=line,
                    is_external=is_external_module(module),
                )))

        for m in FROM_IMPORT_RE.finditer(content):
            module = m.group("module")
            raw_names = m.group("names").strip().strip("()")
            names = tuple(
                n.split(" as ")[-1].strip()
                for n in raw_names.replace("\n", " ").split(",")
                if n.strip()
            )
            found.append((m.start(), ImportInfo(
                module=module,
                imported_names=names,
                kind=ImportKind.NAMESPACE if names == ("*",) else ImportKind.NAMED,
                line=line_number(content, m.start()),
                is_external=is_external_module(module),
            )))

        return [info for _, info in sorted(found, key=lambda pair: pair[0])]

    # -- variables ----------------------------------------------------------

    def extract_variables(self, content: str) -> list[VariableInfo]:
        variables = []
        for m in ASSIGN_RE.finditer(content):
            value = m.group("value").strip()
            # keyword arguments and lambdas are not variables
            if value.startswith("lambda") or value.endswith(","):
                continue
            name = m.group("name")
            kind = DeclarationKind.CONST if name.isupper() else DeclarationKind.LET
            variables.append(self.make_variable(name, kind, line_number(content, m.start())))
        return variables

    # -- comments -----------------------------------------------------------

    def extract_comments(self, content: str) -> list[CommentInfo]:
        comments = []
        for m in LITERAL_RE.finditer(content):
            line = line_number(content, m.start())
            if m.lastgroup == "comment":
                text = m.group("comment").lstrip("#").strip()
                comments.append(self.make_comment(CommentKind.SINGLE, text, line))
                continue
            literal = m.group("string")
            line_start = content.rfind("\n", 0, m.start()) + 1
            standalone = not content[line_start:m.start()].strip()
            if standalone and literal.lstrip("rRbBuUfF")[:3] in ('"""', "'''"):
                text = literal.lstrip("rRbBuUfF")[3:-3].strip()
                comments.append(self.make_comment(CommentKind.DOC, text, line))
        return comments


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _indent_of(lines: list[str], number: int) -> int:
    line = lines[number - 1]
    return len(line) - len(line.lstrip())


def _block_end(lines: list[str], header_index: int, indent: int) -> int:
    """Return the 1-based last line of the block whose header ends at *header_index*."""
    end = header_index + 1
    for index in range(header_index + 1, len(lines)):
        stripped = lines[index].strip()
        if not stripped or stripped.startswith("#"):
            continue
        if _indent_of(lines, index + 1) <= indent:
            break
        end = index + 1
    return end


def _class_range(content: str, lines: list[str], m: re.Match) -> tuple[int, int]:
    first = line_number(content, m.start())
    return first, _block_end(lines, line_number(content, m.end()) - 1, len(m.group("indent")))


def _body_indent(lines: list[str], first: int, last: int) -> int | None:
    for number in range(first + 1, last + 1):
        if lines[number - 1].strip():
            return _indent_of(lines, number)
    return None


def _line_end_offset(content: str, number: int) -> int:
    """Return the offset of the last character on line *number*."""
    offset = 0
    for _ in range(number):
        newline = content.find("\n", offset)
        if newline == -1:
            return len(content) - 1
        offset = newline + 1
    return max(offset - 2, 0)


def _properties(lines: list[str], first: int, last: int, body_indent: int | None) -> list[str]:
    names: list[str] = []
    for number in range(first + 1, last + 1):
        line = lines[number - 1]
        if body_indent is not None and _indent_of(lines, number) == body_indent:
            field = CLASS_FIELD_RE.match(line.strip())
            if field:
                if field.group("name") not in names:
                    names.append(field.group("name"))
                continue
        for attr in SELF_ATTR_RE.finditer(line):
            if attr.group("name") not in names:
                names.append(attr.group("name"))
    return names


def _parameters(text: str) -> list[ParameterInfo]:
    params = []
    for raw in split_parameters(text):
        if raw in ("*", "/"):
            continue
        default = None
        if "=" in raw:
            raw, default = (part.strip() for part in raw.split("=", 1))
        type_hint = None
        name = raw
        if ":" in raw:
            name, type_hint = (part.strip() for part in raw.split(":", 1))
        params.append(ParameterInfo(
            name=name.lstrip("*"),
            type_hint=type_hint,
            default=default,
            is_optional=default is not None or name.startswith("*"),
        ))
    return params
