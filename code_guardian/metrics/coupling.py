"""Import resolution, coupling and function-shape metrics.

Functions:
    resolve_import(importer, module, known_paths)   -> str | None
    import_graph(files)                             -> dict[str, list[str]]
    coupling_metrics(files)                         -> CouplingMetrics
    code_metrics(files)                             -> CodeMetrics
"""

import posixpath
from typing import Collection, Sequence

from code_guardian.languages import SOURCE_EXTENSIONS
from code_guardian.models import CodeMetrics, CouplingMetrics, ParsedFile

# sorted so that resolution is deterministic
_EXTENSIONS = tuple(sorted(SOURCE_EXTENSIONS))


def resolve_import(importer: str, module: str, known_paths: Collection[str]) -> str | None:
    """Map an import of *module* from *importer* onto one of *known_paths*.

    A module that is itself a known path resolves literally. Relative
    modules are resolved against the importer's directory, trying each
    source extension and index/``__init__`` files. Returns None when the
    module is outside the analysed set.
    """
    if module in known_paths:
        return module

    directory = posixpath.dirname(importer)
    if importer.endswith(".py"):
        candidates = _python_candidates(directory, module)
    else:
        base = posixpath.normpath(posixpath.join(directory, module))
        candidates = [base]
        candidates += [base + ext for ext in _EXTENSIONS]
        candidates += [posixpath.join(base, "index" + ext) for ext in _EXTENSIONS]

    for candidate in candidates:
        if candidate in known_paths:
            return candidate
    return None


def _python_candidates(directory: str, module: str) -> list[str]:
    stripped = module.lstrip(".")
    dots = len(module) - len(stripped)
    rel = stripped.replace(".", "/")
    if dots:
        base = directory
        for _ in range(dots - 1):
            base = posixpath.dirname(base)
        roots = [base]
    else:
        # absolute module: try the importer's tree from its directory upward
        roots = []
        current = directory
        while True:
            roots.append(current)
            if not current:
                break
            current = posixpath.dirname(current)

    candidates = []
    for root in roots:
        target = posixpath.join(root, rel) if rel else root
        candidates.append(target + ".py")
        candidates.append(posixpath.join(target, "__init__.py"))
    return candidates


def import_graph(files: Sequence[ParsedFile]) -> dict[str, list[str]]:
    """Return file -> resolved import targets (first-seen order, no repeats)."""
    known = {f.path for f in files}
    graph: dict[str, list[str]] = {}
    for parsed in files:
        targets: list[str] = []
        for imp in parsed.imports:
            target = resolve_import(parsed.path, imp.module, known)
            if target is not None and target != parsed.path and target not in targets:
                targets.append(target)
        graph[parsed.path] = targets
    return graph


def coupling_metrics(files: Sequence[ParsedFile]) -> CouplingMetrics:
    """Efferent, afferent coupling and instability per file.

    Efferent coupling counts distinct imported modules, resolved or not;
    afferent coupling counts the other files that import this one.
    """
    graph = import_graph(files)
    efferent = {f.path: len({imp.module for imp in f.imports}) for f in files}
    afferent = {
        f.path: sum(1 for source, targets in graph.items() if source != f.path and f.path in targets)
        for f in files
    }
    instability = {}
    for path in efferent:
        total = efferent[path] + afferent[path]
        instability[path] = efferent[path] / total if total else 0.0
    return CouplingMetrics(afferent=afferent, efferent=efferent, instability=instability)


def code_metrics(files: Sequence[ParsedFile], coupling: CouplingMetrics | None = None) -> CodeMetrics:
    lengths = [func.length for f in files for func in f.functions]
    params = [len(func.parameters) for f in files for func in f.functions]
    return CodeMetrics(
        average_function_length=sum(lengths) / len(lengths) if lengths else 0.0,
        max_function_length=max(lengths, default=0),
        average_parameter_count=sum(params) / len(params) if params else 0.0,
        max_parameter_count=max(params, default=0),
        nested_depth=0,
        coupling=coupling if coupling is not None else coupling_metrics(files),
    )
