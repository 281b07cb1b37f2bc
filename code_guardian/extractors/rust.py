"""Extractor for Rust sources."""

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

FN_RE = re.compile(
    r"^[ \t]*(?P<pub>pub(?:\([^)]*\))?\s+)?(?:const\s+)?(?P<async>async\s+)?(?:unsafe\s+)?"
    r"(?:extern\s+\"[^\"]*\"\s+)?fn\s+(?P<name>\w+)\s*(?:<[^(]*>)?\s*\(",
    re.MULTILINE,
)
STRUCT_RE = re.compile(r"^[ \t]*(?P<pub>pub(?:\([^)]*\))?\s+)?struct\s+(?P<name>\w+)(?:<[^{;(]*>)?\s*(?:where[^{;]*)?\{", re.MULTILINE)
IMPL_RE = re.compile(
    r"^[ \t]*impl(?:\s*<[^{]*?>)?\s+(?:(?P<trait>[\w:]+(?:<[^{]*?>)?)\s+for\s+)?(?P<name>\w+)",
    re.MULTILINE,
)
FIELD_RE = re.compile(r"^[ \t]*(?:pub(?:\([^)]*\))?\s+)?(?P<name>\w+)\s*:")
USE_RE = re.compile(r"^[ \t]*(?:pub(?:\([^)]*\))?\s+)?use\s+(?P<path>[^;]+);", re.MULTILINE)
LET_RE = re.compile(r"^[ \t]*let\s+(?P<mut>mut\s+)?(?P<name>[A-Za-z_]\w*)", re.MULTILINE)
ITEM_RE = re.compile(r"^[ \t]*(?:pub(?:\([^)]*\))?\s+)?(?:const|static)\s+(?:mut\s+)?(?P<name>[A-Za-z_]\w*)\s*:", re.MULTILINE)

_INTERNAL_PREFIXES = ("crate::", "self::", "super::")
_QUOTES = "\""


class RustExtractor(StructuralExtractor):
    language = Language.RUST
    code_tokens = ("fn", "struct", "let", "const")

    def extract_functions(self, content: str) -> list[FunctionInfo]:
        impl_ranges = self._impl_ranges(content)
        functions = []
        for m in FN_RE.finditer(content):
            paren = m.end() - 1
            close = match_delimiter(content, paren, "(", ")", quotes=_QUOTES)
            if close is None:
                continue
            span = body_span(content, close + 1, quotes=_QUOTES)
            if span is None:
                continue
            in_impl = any(first <= m.start() <= last for _, first, last in impl_ranges)
            if m.group("async"):
                kind = FunctionKind.ASYNC
            elif in_impl:
                kind = FunctionKind.METHOD
            else:
                kind = FunctionKind.FUNCTION
            functions.append(self.make_function(
                content, m.group("name"), kind, m.start(), span[1],
                _parameters(content[paren + 1:close]),
                declares_return="->" in content[close + 1:span[0]],
                is_exported=bool(m.group("pub")),
            ))
        return functions

    def extract_classes(self, content: str, functions: tuple[FunctionInfo, ...]) -> list[ClassInfo]:
        methods: dict[str, list[str]] = {}
        traits: dict[str, str] = {}
        for name, first, last in self._impl_ranges(content):
            for m in FN_RE.finditer(content, first, last):
                if not _nested_deeper(content, first, m.start()):
                    methods.setdefault(name, []).append(m.group("name"))

        for m in IMPL_RE.finditer(content):
            if m.group("trait"):
                traits.setdefault(m.group("name"), m.group("trait"))

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
                    properties.append(field.group("name"))
            name = m.group("name")
            classes.append(ClassInfo(
                name=name,
                start_line=line_number(content, m.start()),
                methods=tuple(methods.get(name, ())),
                properties=tuple(properties),
                extends=traits.get(name),
                is_exported=bool(m.group("pub")),
            ))
        return classes

    def _impl_ranges(self, content: str) -> list[tuple[str, int, int]]:
        ranges = []
        for m in IMPL_RE.finditer(content):
            span = body_span(content, m.end(), quotes=_QUOTES)
            if span:
                ranges.append((m.group("name"), span[0], span[1]))
        return ranges

    def extract_imports(self, content: str) -> list[ImportInfo]:
        imports = []
        for m in USE_RE.finditer(content):
            path = " ".join(m.group("path").split())
            if "{" in path:
                module, _, group = path.partition("{")
                module = module.rstrip(":")
                names = tuple(n.strip().split(" as ")[-1] for n in group.rstrip("}").split(",") if n.strip())
                kind = ImportKind.NAMED
            elif path.endswith("*"):
                module, names, kind = path[:-1].rstrip(":"), (), ImportKind.NAMESPACE
            else:
                module = path.split(" as ")[0]
                names = (path.split(" as ")[-1].rsplit("::", 1)[-1],)
                kind = ImportKind.DEFAULT
            imports.append(ImportInfo(
                module=module,
                imported_names=names,
                kind=kind,
                line=line_number(content, m.start()),
                is_external=not module.startswith(_INTERNAL_PREFIXES) and module not in ("crate", "self", "super"),
            ))
        return imports

    def extract_variables(self, content: str) -> list[VariableInfo]:
        found = []
        for m in LET_RE.finditer(content):
            kind = DeclarationKind.LET if m.group("mut") else DeclarationKind.CONST
            found.append((m.start(), self.make_variable(m.group("name"), kind, line_number(content, m.start()))))
        for m in ITEM_RE.finditer(content):
            found.append((m.start(), self.make_variable(m.group("name"), DeclarationKind.CONST, line_number(content, m.start()))))
        return [v for _, v in sorted(found, key=lambda pair: pair[0])]


def _nested_deeper(content: str, open_idx: int, offset: int) -> bool:
    """True when *offset* is not directly inside the block opened at *open_idx*."""
    text = content[open_idx + 1:offset]
    return text.count("{") - text.count("}") > 0


def _parameters(text: str) -> list[ParameterInfo]:
    params = []
    for raw in split_parameters(text):
        if re.fullmatch(r"&?\s*(?:'\w+\s+)?(?:mut\s+)?self(?:\s*:.*)?", raw, re.DOTALL):
            continue
        name, _, type_hint = raw.partition(":")
        params.append(ParameterInfo(
            name=name.replace("mut ", "").strip(),
            type_hint=type_hint.strip() or None,
        ))
    return params
