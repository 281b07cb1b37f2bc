"""Extractor for Go sources."""

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

FUNC_RE = re.compile(
    r"^func\s*(?:\((?P<receiver>[^)]*)\)\s*)?(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\(",
    re.MULTILINE,
)
STRUCT_RE = re.compile(r"^type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+struct\s*\{", re.MULTILINE)
FIELD_RE = re.compile(r"^[ \t]*(?P<names>\w+(?:\s*,\s*\w+)*)\s+[^\s/]")

IMPORT_SINGLE_RE = re.compile(r"^import\s+(?:(?P<alias>[\w.]+)\s+)?\"(?P<module>[^\"]+)\"", re.MULTILINE)
IMPORT_BLOCK_RE = re.compile(r"^import\s*\((?P<body>[^)]*)\)", re.MULTILINE)
IMPORT_LINE_RE = re.compile(r"^[ \t]*(?:(?P<alias>[\w.]+)\s+)?\"(?P<module>[^\"]+)\"", re.MULTILINE)

DECLARATION_RE = re.compile(r"^[ \t]*(?P<kind>var|const)\s+(?P<name>\w+)", re.MULTILINE)
SHORT_DECLARATION_RE = re.compile(r"^[ \t]*(?P<names>\w+(?:\s*,\s*\w+)*)\s*:=", re.MULTILINE)

_QUOTES = "\"`"


class GoExtractor(StructuralExtractor):
    language = Language.GO
    code_tokens = ("func", "var", "const")

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        functions = []
        for m in FUNC_RE.finditer(content):
            paren = m.end() - 1
            close = match_delimiter(content, paren, "(", ")", quotes=_QUOTES)
            if close is None:
                continue
            span = body_span(content, close + 1, quotes=_QUOTES)
            if span is None:
                continue
            results = content[close + 1:span[0]].strip()
            name = m.group("name")
            functions.append(self.make_function(
                content, name,
                FunctionKind.METHOD if m.group("receiver") else FunctionKind.FUNCTION,
                m.start(), span[1], _parameters(content[paren + 1:close]),
                declares_return=bool(results),
                is_exported=name[:1].isupper(),
            ))
        return functions

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        receivers = {}
        for m in FUNC_RE.finditer(content):
            if m.group("receiver"):
                receiver_type = m.group("receiver").split()[-1].lstrip("*").split("[")[0]
                receivers.setdefault(receiver_type, []).append(m.group("name"))

        classes = []
        for m in STRUCT_RE.finditer(content):
            open_idx = m.end() - 1
            close_idx = match_delimiter(content, open_idx, quotes=_QUOTES)
            if close_idx is None:
                close_idx = len(content) - 1
            properties = []
            for _, line in top_level_lines(content, open_idx, close_idx):
                field = FIELD_RE.match(line)
                if field:
                    properties.extend(n.strip() for n in field.group("names").split(","))
                elif line.strip() and not line.strip().startswith("//"):
                    # embedded type
                    properties.append(line.strip().lstrip("*").split()[0])
            name = m.group("name")
            classes.append(ClassInfo(
                name=name,
                start_line=line_number(content, m.start()),
                methods=tuple(receivers.get(name, ())),
                properties=tuple(properties),
                is_exported=name[:1].isupper(),
            ))
        return classes

    def extract_imports(self, content: str) -> list[ImportInfo]:
        found = []
        for m in IMPORT_SINGLE_RE.finditer(content):
            found.append((m.start(), self._import(content, m.start(), m)))
        for block in IMPORT_BLOCK_RE.finditer(content):
            body_start = block.start("body")
            for m in IMPORT_LINE_RE.finditer(block.group("body")):
                found.append((body_start + m.start(), self._import(content, body_start + m.start("module"), m)))
        return [info for _, info in sorted(found, key=lambda pair: pair[0])]

    @staticmethod
    def _import(content: str, offset: int, m: re.Match) -> ImportInfo:
        module = m.group("module")
        alias = m.group("alias")
        return ImportInfo(
            module=module,
            imported_names=(alias or module.rsplit("/", 1)[-1],),
            kind=ImportKind.DEFAULT if alias else ImportKind.NAMESPACE,
            line=line_number(content, offset),
            is_external=is_external_module(module),
        )

    def extract_variables(self, content: str) -> list[VariableInfo]:
        found = []
        for m in DECLARATION_RE.finditer(content):
            kind = DeclarationKind.CONST if m.group("kind") == "const" else DeclarationKind.LET
            found.append((m.start(), self.make_variable(m.group("name"), kind, line_number(content, m.start()))))
        for m in SHORT_DECLARATION_RE.finditer(content):
            line = line_number(content, m.start())
            for name in m.group("names").split(","):
                name = name.strip()
                if name != "_":
                    found.append((m.start(), self.make_variable(name, DeclarationKind.LET, line)))
        return [v for _, v in sorted(found, key=lambda pair: pair[0])]


def _parameters(text: str) -> list[ParameterInfo]:
    params = []
    for raw in split_parameters(text):
        name, _, type_hint = raw.partition(" ")
        params.append(ParameterInfo(
            name=name,
            type_hint=type_hint.strip() or None,
            is_optional=type_hint.strip().startswith("..."),
        ))
    return params
