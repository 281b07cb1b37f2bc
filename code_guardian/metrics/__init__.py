"""Derived metrics, each a read-only pass over parsed files and issues."""

from code_guardian.metrics.complexity import complexity_metrics, detect_duplicate_code
from code_guardian.metrics.coupling import code_metrics, coupling_metrics, import_graph, resolve_import
from code_guardian.metrics.coverage import measure_test_coverage, measure_test_suite
from code_guardian.metrics.dependencies import MANIFEST_NAMES, analyze_dependencies, find_cycles
from code_guardian.metrics.documentation import measure_documentation
from code_guardian.metrics.health import assess_code_health, technical_debt
from code_guardian.metrics.hotspots import identify_hotspots
from code_guardian.metrics.security import analyze_security
from code_guardian.metrics.smells import detect_code_smells

__all__ = [
    "MANIFEST_NAMES",
    "analyze_dependencies",
    "analyze_security",
    "assess_code_health",
    "code_metrics",
    "complexity_metrics",
    "coupling_metrics",
    "detect_code_smells",
    "detect_duplicate_code",
    "find_cycles",
    "identify_hotspots",
    "import_graph",
    "measure_documentation",
    "measure_test_coverage",
    "measure_test_suite",
    "resolve_import",
    "technical_debt",
]
