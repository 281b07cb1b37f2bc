"""Extractor for Java sources."""

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

_MODS = r"(?P<mods>(?:(?:public|private|protected|static|final|abstract|synchronized|native|default|strictfp|transient|volatile|sealed)\s+)*)"
_ANNOTATIONS = r"(?:@\w+(?:\([^)]*\))?\s+)*"

IMPORT_RE = re.compile(r"^[ \t]*import\s+(?:static\s+)?(?P<module>[\w.]+(?:\.\*)?)\s*;", re.MULTILINE)
CLASS_RE = re.compile(
    rf"^[ \t]*{_MODS}(?:class|interface|enum|record)\s+(?P<name>\w+)(?:\s*<[^>{{]*>)?(?:\s*\([^)]*\))?"
    r"(?:\s+extends\s+(?P<extends>[\w.]+))?",
    re.MULTILINE,
)
METHOD_RE = re.compile(rf"^[ \t]*{_ANNOTATIONS}{_MODS}(?:<[^>]+>\s+)?(?P<ret>[\w.<>\[\],? ]+?)\s+(?P<name>\w+)\s*\(")
CONSTRUCTOR_RE = re.compile(rf"^[ \t]*{_ANNOTATIONS}{_MODS}(?P<name>[A-Z]\w*)\s*\(")
FIELD_RE = re.compile(rf"^[ \t]*{_ANNOTATIONS}{_MODS}(?P<type>[\w.<>\[\],? ]+?)\s+(?P<name>\w+)\s*(?:=[^;]*)?;")
LOCAL_RE = re.compile(
    r"^[ \t]*(?P<final>final\s+)?(?:var|int|long|short|byte|char|float|double|boolean|[A-Z]\w*(?:<[^;=()]*>)?(?:\[\])*)"
    r"\s+(?P<name>[a-z_]\w*)\s*=(?!=)",
    re.MULTILINE,
)

_NOT_TYPES = frozenset({"return", "new", "else", "throw", "case", "import", "package"})


class JavaExtractor(StructuralExtractor):
    language = Language.JAVA
    code_tokens = ("class", "void", "public", "private", "static")

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        functions = []
        for m in CLASS_RE.finditer(content):
            span = body_span(content, m.end())
            if span:
                functions.extend(
                    info for info, _ in self._members(content, m.group("name"), *span) if info
                )
        return functions

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        classes = []
        for m in CLASS_RE.finditer(content):
            span = body_span(content, m.end())
            if span is None:
                continue
            members = self._members(content, m.group("name"), *span)
            classes.append(ClassInfo(
                name=m.group("name"),
                start_line=line_number(content, m.start()),
                methods=tuple(name for _, name in members),
                properties=tuple(self._fields(content, *span)),
                extends=m.group("extends"),
                is_exported="public" in m.group("mods").split(),
            ))
        return classes

    def _members(
        self, content: str, class_name: str, open_idx: int, close_idx: int
    ) -> list[tuple[FunctionInfo | None, str]]:
        """Return (function, name) per method; bodiless methods have no function."""
        members = []
        for offset, line in top_level_lines(content, open_idx, close_idx):
            ctor = CONSTRUCTOR_RE.match(line)
            method = METHOD_RE.match(line)
            if ctor and ctor.group("name") == class_name:
                m, declared, is_ctor = ctor, False, True
            elif method and method.group("ret").split()[-1] not in _NOT_TYPES and method.group("name") not in _NOT_TYPES:
                m, declared, is_ctor = method, method.group("ret").strip() != "void", False
            else:
                continue

            paren = offset + m.end() - 1
            close = match_delimiter(content, paren, "(", ")")
            if close is None:
                continue
            span = body_span(content, close + 1)
            info = None
            if span:
                info = self.make_function(
                    content, m.group("name"), FunctionKind.METHOD, offset + m.start("mods"), span[1],
                    _parameters(content[paren + 1:close]),
                    declares_return=declared,
                    is_exported="public" in m.group("mods").split(),
                    is_constructor=is_ctor,
                )
            members.append((info, m.group("name")))
        return members

    def _fields(self, content: str, open_idx: int, close_idx: int) -> list[str]:
        fields = []
        for _, line in top_level_lines(content, open_idx, close_idx):
            m = FIELD_RE.match(line)
            if m and m.group("type").split()[-1] not in _NOT_TYPES and "(" not in line.split("=")[0]:
                fields.append(m.group("name"))
        return fields

    def extract_imports(self, content: str) -> list[ImportInfo]:
        imports = []
        for m in IMPORT_RE.finditer(content):
            module = m.group("module")
            wildcard = module.endswith(".*")
            imports.append(ImportInfo(
                module=module[:-2] if wildcard else module,
                imported_names=() if wildcard else (module.rsplit(".", 1)[-1],),
                kind=ImportKind.NAMESPACE if wildcard else ImportKind.NAMED,
                line=line_number(content, m.start()),
                is_external=is_external_module(module),
            ))
        return imports

    def extract_variables(self, content: str) -> list[VariableInfo]:
        return [
            self.make_variable(
                m.group("name"),
                DeclarationKind.CONST if m.group("final") else DeclarationKind.LET,
                line_number(content, m.start()),
            )
            for m in LOCAL_RE.finditer(content)
        ]


def _parameters(text: str) -> list[ParameterInfo]:
    params = []
    for raw in split_parameters(text):
        raw = re.sub(r"@\w+(?:\([^)]*\))?\s*|\bfinal\s+", "", raw).strip()
        type_hint, _, name = raw.rpartition(" ")
        params.append(ParameterInfo(name=name, type_hint=type_hint or None))
    return params
