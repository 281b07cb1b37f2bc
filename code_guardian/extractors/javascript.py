"""Extractor for JavaScript and TypeScript sources."""

import re

from code_guardian.extractors.base import (
    StructuralExtractor,
    body_span,
    is_external_module,
    line_number,
    match_delimiter,
    split_parameters,
    top_level_lines,
)
from code_guardian.models import (
    ClassInfo,
    DeclarationKind,
    FunctionInfo,
    FunctionKind,
    ImportInfo,
    ImportKind,
    Language,
    ParameterInfo,
    VariableInfo,
)

_IDENT = r"[A-Za-z_$][\w$]*"

FUNCTION_RE = re.compile(
    rf"^[ \t]*(?P<export>export\s+(?:default\s+)?)?(?P<async>async\s+)?function\b\s*\*?\s*"
    rf"(?P<name>{_IDENT})\s*(?:<[^>(]*>)?\s*\(",
    re.MULTILINE,
)

FUNCTION_EXPRESSION_RE = re.compile(
    rf"^[ \t]*(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::[^=\n]+)?=\s*"
    rf"(?P<async>async\s+)?function\b\s*\*?\s*(?:{_IDENT})?\s*\(",
    re.MULTILINE,
)

ARROW_RE = re.compile(
    rf"^[ \t]*(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::[^=\n]+)?=\s*"
    rf"(?P<async>async\s+)?(?:\((?P<params>[^()]*(?:\([^()]*\)[^()]*)*)\)|(?P<single>{_IDENT}))"
    rf"\s*(?::[^=\n]*)?=>",
    re.MULTILINE,
)

CLASS_RE = re.compile(
    rf"^[ \t]*(?P<export>export\s+(?:default\s+)?)?(?:abstract\s+)?class\s+(?P<name>{_IDENT})"
    rf"(?:\s*<[^>{{]*>)?(?:\s+extends\s+(?P<extends>[\w$.]+))?",
    re.MULTILINE,
)

_MODIFIERS = r"(?P<mods>(?:(?:public|private|protected|static|readonly|abstract|override|async|get|set|declare)\s+)*)"

METHOD_RE = re.compile(rf"^[ \t]*{_MODIFIERS}\*?(?P<name>#?{_IDENT})\s*(?:<[^>(]*>)?\s*\(")

PROPERTY_ARROW_RE = re.compile(
    rf"^[ \t]*{_MODIFIERS}(?P<name>#?{_IDENT})\s*(?::[^=\n]+)?=\s*(?P<async>async\s+)?"
    rf"(?:\((?P<params>[^()]*)\)|(?P<single>{_IDENT}))\s*(?::[^=\n]*)?=>"
)

PROPERTY_RE = re.compile(
    rf"^[ \t]*{_MODIFIERS}(?P<name>#?{_IDENT})\s*[?!]?\s*(?::[^=;(]+)?(?:=(?!>)[^;]*)?;?\s*$"
)

IMPORT_FROM_RE = re.compile(
    r"""^[ \t]*import\s+(?:type\s+)?(?P<clause>[^'";]*?)\s*from\s*['"](?P<module>[^'"]+)['"]""",
    re.MULTILINE,
)
IMPORT_BARE_RE = re.compile(r"""^[ \t]*import\s+['"](?P<module>[^'"]+)['"]""", re.MULTILINE)
REQUIRE_RE = re.compile(
    rf"""(?:const|let|var)\s+(?P<target>\{{[^}}]*\}}|{_IDENT})\s*=\s*require\(\s*['"](?P<module>[^'"]+)['"]\s*\)"""
)
REEXPORT_RE = re.compile(
    r"""^[ \t]*export\s+(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s*['"](?P<module>[^'"]+)['"]""",
    re.MULTILINE,
)

VARIABLE_RE = re.compile(rf"^[ \t]*(?:export\s+)?(?P<kind>const|let|var)\s+(?P<name>{_IDENT})", re.MULTILINE)

_NOT_METHODS = frozenset({
    "if", "for", "while", "switch", "catch", "return", "function", "new", "super", "typeof", "await",
})


class JavaScriptExtractor(StructuralExtractor):
    language = Language.JAVASCRIPT
    code_tokens = ("code", "function", "class", "var", "let", "const")

    # -- functions ----------------------------------------------------------

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        functions = []

        for regex in (FUNCTION_RE, FUNCTION_EXPRESSION_RE):
            for m in regex.finditer(content):
                info = self._declared_function(content, m)
                if info:
                    functions.append(info)

        for m in ARROW_RE.finditer(content):
            params = m.group("params") if m.group("single") is None else m.group("single")
            end = self._arrow_end(content, m.end())
            functions.append(self.make_function(
                content, m.group("name"), FunctionKind.ARROW, m.start(), end,
                _parameters(params or ""), is_exported=bool(m.group("export")),
            ))

        for m in CLASS_RE.finditer(content):
            span = body_span(content, m.end())
            if span:
                functions.extend(self._methods(content, *span))

        return functions

    def _declared_function(self, content: str, m: re.Match) -> FunctionInfo | None:
        paren = m.end() - 1
        close = match_delimiter(content, paren, "(", ")")
        if close is None:
            return None
        span = body_span(content, close + 1)
        if span is None:
            return None
        kind = FunctionKind.ASYNC if m.group("async") else FunctionKind.FUNCTION
        return self.make_function(
            content, m.group("name"), kind, m.start(), span[1],
            _parameters(content[paren + 1:close]), is_exported=bool(m.group("export")),
        )

    def _arrow_end(self, content: str, after_arrow: int) -> int:
        rest = content[after_arrow:]
        stripped = rest.lstrip()
        if stripped.startswith("{"):
            brace = after_arrow + len(rest) - len(stripped)
            close = match_delimiter(content, brace)
            return close if close is not None else len(content) - 1
        newline = content.find("\n", after_arrow)
        return newline - 1 if newline != -1 else len(content) - 1

    def _methods(self, content: str, open_idx: int, close_idx: int) -> list[FunctionInfo]:
        methods = []
        for offset, line in top_level_lines(content, open_idx, close_idx):
            arrow = PROPERTY_ARROW_RE.match(line)
            if arrow:
                start = offset + arrow.start("mods")
                end = self._arrow_end(content, offset + arrow.end())
                params = arrow.group("params") if arrow.group("single") is None else arrow.group("single")
                methods.append(self.make_function(
                    content, arrow.group("name"), FunctionKind.ARROW, start, end, _parameters(params or ""),
                ))
                continue

            m = METHOD_RE.match(line)
            if not m or m.group("name") in _NOT_METHODS:
                continue
            paren = offset + m.end() - 1
            close = match_delimiter(content, paren, "(", ")")
            if close is None:
                continue
            span = body_span(content, close + 1)
            if span is None:
                continue
            name = m.group("name")
            kind = FunctionKind.ASYNC if "async" in m.group("mods").split() else FunctionKind.METHOD
            methods.append(self.make_function(
                content, name, kind, offset + m.start("name"), span[1],
                _parameters(content[paren + 1:close]),
                is_constructor=name == "constructor",
            ))
        return methods

    # -- classes ------------------------------------------------------------

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        classes = []
        for m in CLASS_RE.finditer(content):
            span = body_span(content, m.end())
            if span is None:
                continue
            methods = tuple(f.name for f in self._methods(content, *span))
            classes.append(ClassInfo(
                name=m.group("name"),
                start_line=line_number(content, m.start()),
                methods=methods,
                properties=tuple(self._properties(content, *span)),
                extends=m.group("extends"),
                is_exported=bool(m.group("export")),
            ))
        return classes

    def _properties(self, content: str, open_idx: int, close_idx: int) -> list[str]:
        properties = []
        for _, line in top_level_lines(content, open_idx, close_idx):
            if not line.strip() or PROPERTY_ARROW_RE.match(line) or METHOD_RE.match(line):
                continue
            m = PROPERTY_RE.match(line)
            if m and m.group("name") not in _NOT_METHODS:
                properties.append(m.group("name"))
        return properties

    # -- imports ------------------------------------------------------------

    def extract_imports(self, content: str) -> list[ImportInfo]:
        found: list[tuple[int, ImportInfo]] = []

        for m in IMPORT_FROM_RE.finditer(content):
            kind, names = _import_clause(m.group("clause"))
            found.append((m.start(), self._import(content, m, kind, names)))

        for m in IMPORT_BARE_RE.finditer(content):
            found.append((m.start(), self._import(content, m, ImportKind.DEFAULT, ())))

        for m in REQUIRE_RE.finditer(content):
            target = m.group("target")
            if target.startswith("{"):
                found.append((m.start(), self._import(content, m, ImportKind.NAMED, _names(target))))
            else:
                found.append((m.start(), self._import(content, m, ImportKind.DEFAULT, (target,))))

        for m in REEXPORT_RE.finditer(content):
            clause = m.group("clause")
            if clause.startswith("*"):
                found.append((m.start(), self._import(content, m, ImportKind.NAMESPACE, ())))
            else:
                found.append((m.start(), self._import(content, m, ImportKind.NAMED, _names(clause))))

        return [info for _, info in sorted(found, key=lambda pair: pair[0])]

    @staticmethod
    def _import(content: str, m: re.Match, kind: ImportKind, names: tuple[str, ...]) -> ImportInfo:
        module = m.group("module")
        return ImportInfo(
            module=module,
            imported_names=names,
            kind=kind,
            line=line_number(content, m.start()),
            is_external=is_external_module(module),
        )

    # -- variables ----------------------------------------------------------

    def extract_variables(self, content: str) -> list[VariableInfo]:
        return [
            self.make_variable(m.group("name"), DeclarationKind(m.group("kind")), line_number(content, m.start()))
            for m in VARIABLE_RE.finditer(content)
        ]


class TypeScriptExtractor(JavaScriptExtractor):
    language = Language.TYPESCRIPT


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parameters(text: str) -> list[ParameterInfo]:
    params = []
    for raw in split_parameters(text):
        raw = re.sub(r"^(?:public|private|protected|readonly)\s+", "", raw)
        default = None
        if "=" in raw and not raw.startswith(("{", "[")):
            raw, default = (part.strip() for part in raw.split("=", 1))
        type_hint = None
        name = raw
        if ":" in raw and not raw.startswith(("{", "[")):
            name, type_hint = (part.strip() for part in raw.split(":", 1))
        optional = name.endswith("?") or default is not None
        params.append(ParameterInfo(
            name=name.rstrip("?").lstrip("."),
            type_hint=type_hint,
            default=default,
            is_optional=optional,
        ))
    return params


def _names(braced: str) -> tuple[str, ...]:
    names = []
    for part in braced.strip("{} \n").split(","):
        part = part.strip()
        if part:
            names.append(re.split(r"\s+as\s+|\s*:\s*", part)[-1].strip())
    return tuple(names)


def _import_clause(clause: str) -> tuple[ImportKind, tuple[str, ...]]:
    clause = clause.strip()
    if clause.startswith("*"):
        return ImportKind.NAMESPACE, (clause.split()[-1],)
    if clause.startswith("{"):
        return ImportKind.NAMED, _names(clause)
    default, _, rest = clause.partition(",")
    names = (default.strip(),) + (_names(rest) if rest.strip().startswith("{") else ())
    return ImportKind.DEFAULT, names
