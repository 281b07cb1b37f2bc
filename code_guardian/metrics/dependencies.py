"""Dependency health: import counts, circular imports and unused packages.

Usage:
    report = analyze_dependencies(parsed_files, manifests={"package.json": text})

Manifests are the raw text of ``package.json`` or ``requirements.txt``
files found among the inputs, keyed by path. A manifest that cannot be
parsed is logged and skipped.
"""

import json
import logging
import posixpath
import re
from typing import Mapping, Sequence

from code_guardian.metrics.coupling import import_graph
from code_guardian.models import DependencyReport, ParsedFile

logger = logging.getLogger(__name__)

MANIFEST_NAMES = frozenset({"package.json", "requirements.txt"})

_REQUIREMENT_RE = re.compile(r"^\s*(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)")

# distributions whose import name differs from the package name (normalized)
_IMPORT_ALIASES = {
    "pyyaml":          "yaml",
    "beautifulsoup4":  "bs4",
    "pillow":          "pil",
    "scikit_learn":    "sklearn",
    "python_dateutil": "dateutil",
    "opencv_python":   "cv2",
}


def analyze_dependencies(
    files: Sequence[ParsedFile],
    manifests: Mapping[str, str] | None = None,
) -> DependencyReport:
    modules = {imp.module for f in files for imp in f.imports}
    external = {imp.module for f in files for imp in f.imports if imp.is_external}
    return DependencyReport(
        total_dependencies=len(modules),
        external_dependencies=len(external),
        circular_dependencies=tuple(find_cycles(import_graph(files))),
        unused_dependencies=tuple(_unused(files, manifests or {})),
    )


def find_cycles(graph: Mapping[str, Sequence[str]]) -> list[str]:
    """Return each import cycle found by depth-first traversal as ``a -> b -> a``."""
    cycles: list[str] = []
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        path = [root]
        on_path = {root}
        pending = [iter(graph.get(root, ()))]

        while pending:
            dep = next(pending[-1], None)
            if dep is None:
                pending.pop()
                on_path.discard(path.pop())
                continue
            if dep in on_path:
                start = path.index(dep)
                cycles.append(" -> ".join(path[start:] + [dep]))
            elif dep not in visited:
                visited.add(dep)
                path.append(dep)
                on_path.add(dep)
                pending.append(iter(graph.get(dep, ())))

    return cycles


# ---------------------------------------------------------------------------
# Manifest parsing
# ---------------------------------------------------------------------------

def declared_dependencies(path: str, content: str) -> list[str]:
    """Return the package names declared by one manifest.

    Raises:
        ValueError: if the manifest cannot be parsed.
    """
    name = posixpath.basename(path)
    if name == "package.json":
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("package.json must be a JSON object")
        deps = data.get("dependencies") or {}
        if not isinstance(deps, dict):
            raise ValueError("'dependencies' must be a JSON object")
        return list(deps)

    packages = []
    for line in content.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        m = _REQUIREMENT_RE.match(line)
        if m:
            packages.append(m.group("name"))
    return packages


def _unused(files: Sequence[ParsedFile], manifests: Mapping[str, str]) -> list[str]:
    imported: set[str] = set()
    for f in files:
        for imp in f.imports:
            if imp.is_external:
                imported.update(_package_keys(imp.module))
    unused: list[str] = []
    for path in sorted(manifests):
        try:
            packages = declared_dependencies(path, manifests[path])
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError
            logger.warning("Skipping unparsable manifest '%s': %s", path, exc)
            continue
        for package in packages:
            key = _normalize(package)
            if _IMPORT_ALIASES.get(key, key) not in imported and package not in unused:
                unused.append(package)
    return unused


def _package_keys(module: str) -> set[str]:
    """Candidate package names for an import path (npm style and dotted)."""
    if module.startswith("@"):
        return {_normalize("/".join(module.split("/")[:2]))}
    first = module.split("/", 1)[0]
    return {_normalize(first), _normalize(first.split(".", 1)[0])}


def _normalize(name: str) -> str:
    return name.lower().replace("-", "_")
