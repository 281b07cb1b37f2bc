"""Extractor for C and C++ sources.

C shares the C++ function, include and variable handling; only C++ gets
class extraction, since a plain C struct is a record rather than a class.
"""

import re

from code_guardian.extractors.base import (
    StructuralExtractor,
    body_span,
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

INCLUDE_RE = re.compile(r"^[ \t]*#[ \t]*include\s*(?P<open>[<\"])(?P<module>[^>\"]+)[>\"]", re.MULTILINE)

FUNCTION_RE = re.compile(
    r"^(?P<indent>[ \t]*)(?!(?:if|for|while|switch|return|else|do|case|sizeof|delete|new|throw|goto|catch|try)\b)"
    # each return-type token ends in exactly one separator: pointer/reference marks or blanks
    r"(?P<ret>(?:[\w:<>,~]+(?:[ \t]*[*&][ \t*&]*|[ \t]+))*?)"
    r"(?P<name>~?[A-Za-z_]\w*(?:::~?[A-Za-z_]\w*)*)\s*\(",
    re.MULTILINE,
)

# text allowed between a parameter list and the opening brace
TRAILER_RE = re.compile(
    r"^\s*(?:(?:const|noexcept|override|final|volatile|mutable)\s*)*"
    r"(?:->\s*[\w:<>*&\s]+?)?\s*(?::[^;{]*)?$"
)

CLASS_RE = re.compile(
    r"^[ \t]*(?:template\s*<[^>]*>\s*)?(?P<kind>class|struct)\s+(?P<name>\w+)(?:\s+final)?"
    r"(?:\s*:\s*(?:(?:public|private|protected|virtual)\s+)*(?P<extends>[\w:<>]+)[^{;]*)?\s*\{",
    re.MULTILINE,
)
MEMBER_RE = re.compile(
    r"^[ \t]*(?:(?:static|const|mutable|inline|constexpr|volatile)\s+)*[\w:<>,]+(?:\s*[*&]+\s*|\s+)"
    r"(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*(?:=[^;]*|\{[^}]*\})?;"
)
ACCESS_RE = re.compile(r"^\s*(?:public|private|protected)\s*:")

VARIABLE_RE = re.compile(
    r"^[ \t]*(?P<prefix>(?:(?:static|const|extern|volatile|unsigned|signed|constexpr)\s+)*)"
    r"(?:int|char|float|double|long|short|bool|auto|size_t|u?int\d+_t|std::\w+(?:<[^;=]*>)?|[A-Z]\w*)"
    r"\s*[*&]*\s*(?P<name>[A-Za-z_]\w*)\s*(?:\[[^\]]*\])?\s*=(?!=)",
    re.MULTILINE,
)
DEFINE_RE = re.compile(r"^[ \t]*#[ \t]*define\s+(?P<name>\w+)(?!\()", re.MULTILINE)

_QUALIFIERS = frozenset({"static", "inline", "virtual", "extern", "constexpr", "explicit", "friend"})


class CppExtractor(StructuralExtractor):
    language = Language.CPP
    code_tokens = ("void", "struct", "class", "int", "include")
    extracts_classes = True

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        functions = []
        code = self.mask_comments(content)
        for m in FUNCTION_RE.finditer(code):
            name = m.group("name")
            ret = [w for w in m.group("ret").replace("*", " ").replace("&", " ").split() if w not in _QUALIFIERS]
            paren = m.end() - 1
            close = match_delimiter(code, paren, "(", ")", quotes="\"")
            if close is None:
                continue
            span = body_span(code, close + 1, TRAILER_RE, quotes="\"")
            if span is None:
                continue
            short_name = name.rsplit("::", 1)[-1]
            owner = name.rsplit("::", 2)[-2] if "::" in name else None
            is_ctor = short_name.startswith("~") or (owner is not None and short_name == owner)
            if not ret and not is_ctor and not m.group("indent"):
                # a bare call such as ``FOO(x) {`` at file scope is a macro
                continue
            functions.append(self.make_function(
                content, name, FunctionKind.METHOD if "::" in name or m.group("indent") else FunctionKind.FUNCTION,
                m.start("ret"), span[1], _parameters(content[paren + 1:close]),
                declares_return=bool(ret) and ret != ["void"],
                is_exported="static" not in m.group("ret").split(),
                is_constructor=is_ctor or not ret,
            ))
        return functions

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        if not self.extracts_classes:
            return []
        classes = []
        code = self.mask_comments(content)
        for m in CLASS_RE.finditer(code):
            open_idx = m.end() - 1
            close_idx = match_delimiter(code, open_idx, quotes="\"")
            if close_idx is None:
                close_idx = len(code) - 1
            methods: list[str] = []
            properties: list[str] = []
            for _, line in top_level_lines(code, open_idx, close_idx):
                if ACCESS_RE.match(line):
                    continue
                func = FUNCTION_RE.match(line)
                if func and "(" in line:
                    methods.append(func.group("name"))
                    continue
                member = MEMBER_RE.match(line)
                if member:
                    properties.append(member.group("name"))
            methods.extend(
                f.name.rsplit("::", 1)[-1] for f in functions
                if f.name.startswith(m.group("name") + "::")
                and f.name.rsplit("::", 1)[-1] not in methods
            )
            classes.append(ClassInfo(
                name=m.group("name"),
                start_line=line_number(content, m.start()),
                methods=tuple(methods),
                properties=tuple(properties),
                extends=m.group("extends"),
                is_exported=True,
            ))
        return classes

    def extract_imports(self, content: str) -> list[ImportInfo]:
        return [
            ImportInfo(
                module=m.group("module"),
                imported_names=(),
                kind=ImportKind.NAMESPACE,
                line=line_number(content, m.start()),
                is_external=m.group("open") == "<",
            )
            for m in INCLUDE_RE.finditer(content)
        ]

    def extract_variables(self, content: str) -> list[VariableInfo]:
        found = []
        for m in VARIABLE_RE.finditer(content):
            kind = DeclarationKind.CONST if "const" in m.group("prefix") else DeclarationKind.LET
            found.append((m.start(), self.make_variable(m.group("name"), kind, line_number(content, m.start()))))
        for m in DEFINE_RE.finditer(content):
            found.append((m.start(), self.make_variable(m.group("name"), DeclarationKind.CONST, line_number(content, m.start()))))
        return [v for _, v in sorted(found, key=lambda pair: pair[0])]


class CExtractor(CppExtractor):
    language = Language.C
    extracts_classes = False


def _parameters(text: str) -> list[ParameterInfo]:
    parts = split_parameters(text)
    if parts in ([], ["void"]):
        return []
    params = []
    for raw in parts:
        default = None
        if "=" in raw:
            raw, default = (part.strip() for part in raw.split("=", 1))
        if raw == "...":
            params.append(ParameterInfo(name="...", is_optional=True))
            continue
        name_match = re.search(r"(\w+)\s*(?:\[[^\]]*\])?$", raw)
        name = name_match.group(1) if name_match else raw
        type_hint = raw[:name_match.start()].strip() if name_match else None
        params.append(ParameterInfo(
            name=name,
            type_hint=type_hint or None,
            default=default,
            is_optional=default is not None,
        ))
    return params
