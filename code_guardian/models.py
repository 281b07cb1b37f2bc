"""Data models for analysis results.

Contains the enumerations and dataclasses shared by every stage of the
pipeline, plus the JSON serialization helper used by the report builders:
    - Language, Severity, Category            (tags)
    - ParsedFile and its parts                (structural model)
    - ReviewIssue                             (one finding)
    - metric bundles                          (derived metrics)
    - AnalysisResult                          (one run's output)
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JAVA = "java"
    CPP = "cpp"
    C = "c"
    GO = "go"
    RUST = "rust"
    UNKNOWN = "unknown"


class Severity(str, Enum):
    """Issue severity, ordered critical > warning > improvement."""
    CRITICAL = "critical"
    WARNING = "warning"
    IMPROVEMENT = "improvement"

    @property
    def weight(self) -> int:
        """Penalty weight shared by scoring and metrics."""
        return _SEVERITY_WEIGHTS[self]

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]


_SEVERITY_WEIGHTS = {Severity.CRITICAL: 10, Severity.WARNING: 3, Severity.IMPROVEMENT: 1}
_SEVERITY_RANKS   = {Severity.CRITICAL: 0,  Severity.WARNING: 1, Severity.IMPROVEMENT: 2}


class Category(str, Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    CODE_QUALITY = "code-quality"
    ERROR_HANDLING = "error-handling"
    ARCHITECTURE = "architecture"
    STATE_MANAGEMENT = "state-management"
    SCALABILITY = "scalability"


class FunctionKind(str, Enum):
    FUNCTION = "function"
    ARROW = "arrow"
    METHOD = "method"
    ASYNC = "async"


class ImportKind(str, Enum):
    DEFAULT = "default"
    NAMED = "named"
    NAMESPACE = "namespace"


class DeclarationKind(str, Enum):
    CONST = "const"
    LET = "let"
    VAR = "var"


class CommentKind(str, Enum):
    SINGLE = "single"
    BLOCK = "block"
    DOC = "doc"


class RiskTier(str, Enum):
    """Vulnerability tier used by the security report."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return _RISK_WEIGHTS[self]


_RISK_WEIGHTS = {RiskTier.LOW: 1, RiskTier.MEDIUM: 5, RiskTier.HIGH: 10, RiskTier.CRITICAL: 20}


class HealthLevel(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"


# ---------------------------------------------------------------------------
# Input and structural model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceFile:
    """A raw input file. ``content`` is None when it could not be read."""
    path: str
    content: str | None


@dataclass(frozen=True)
class ParameterInfo:
    name: str
    type_hint: str | None = None
    default: str | None = None
    is_optional: bool = False


@dataclass(frozen=True)
class FunctionInfo:
    name: str
    kind: FunctionKind
    start_line: int
    end_line: int | None
    parameters: tuple[ParameterInfo, ...]
    complexity: int
    has_return: bool
    is_exported: bool = False
    is_constructor: bool = False

    @property
    def length(self) -> int:
        """Number of source lines spanned, 1 when the end is unknown."""
        if self.end_line is None:
            return 1
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class ClassInfo:
    name: str
    start_line: int
    methods: tuple[str, ...]
    properties: tuple[str, ...]
    extends: str | None = None
    is_exported: bool = False


@dataclass(frozen=True)
class ImportInfo:
    module: str
    imported_names: tuple[str, ...]
    kind: ImportKind
    line: int
    is_external: bool


@dataclass(frozen=True)
class VariableInfo:
    name: str
    declaration_kind: DeclarationKind
    line: int
    is_global: bool


@dataclass(frozen=True)
class CommentInfo:
    kind: CommentKind
    text: str
    line: int
    contains_code_like_tokens: bool


@dataclass(frozen=True)
class ParsedFile:
    """Structural model of one source file. Immutable once built."""
    path: str
    language: Language
    content: str
    lines_of_code: int
    functions: tuple[FunctionInfo, ...] = ()
    classes: tuple[ClassInfo, ...] = ()
    imports: tuple[ImportInfo, ...] = ()
    variables: tuple[VariableInfo, ...] = ()
    comments: tuple[CommentInfo, ...] = ()
    complexity: int = 0


@dataclass(frozen=True)
class ReviewIssue:
    id: str
    severity: Severity
    category: Category
    file: str
    line: int
    title: str
    description: str
    suggestion: str


# ---------------------------------------------------------------------------
# Metric bundles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreSummary:
    security: int
    performance: int
    code_quality: int
    architecture: int
    maintainability_index: int
    technical_debt: int


@dataclass(frozen=True)
class ComplexityMetrics:
    average: int
    maximum: int
    complex_files: tuple[str, ...]


@dataclass(frozen=True)
class DuplicateCode:
    duplicate_blocks: int
    duplicated_lines: int
    duplicate_percentage: float


@dataclass(frozen=True)
class TestCoverage:
    coverage: float
    tested_files: int
    untested_files: tuple[str, ...]

    # keep pytest from collecting this as a test class
    __test__ = False


@dataclass(frozen=True)
class TestingMetrics:
    """Size of the test suite: files, declared cases and assertion lines."""
    test_suites: int
    test_cases: int
    assertions: int
    coverage_by_type: dict[str, int]

    __test__ = False


@dataclass(frozen=True)
class DocumentationMetrics:
    documented_files: int
    documentation_coverage: float
    missing_docs: tuple[str, ...]
    api_files: tuple[str, ...]
    inline_comments: int


@dataclass(frozen=True)
class CodeSmells:
    total_smells: int
    smells_by_type: dict[str, int]
    files_with_smells: tuple[str, ...]


@dataclass(frozen=True)
class DependencyReport:
    total_dependencies: int
    external_dependencies: int
    circular_dependencies: tuple[str, ...]
    unused_dependencies: tuple[str, ...]


@dataclass(frozen=True)
class CouplingMetrics:
    afferent: dict[str, int]
    efferent: dict[str, int]
    instability: dict[str, float]


@dataclass(frozen=True)
class CodeMetrics:
    average_function_length: float
    max_function_length: int
    average_parameter_count: float
    max_parameter_count: int
    nested_depth: int
    coupling: CouplingMetrics


@dataclass(frozen=True)
class Vulnerability:
    type: str
    severity: RiskTier
    file: str
    line: int
    description: str
    cwe: str


@dataclass(frozen=True)
class SecurityReport:
    vulnerabilities: tuple[Vulnerability, ...]
    risk_score: int


@dataclass(frozen=True)
class Hotspot:
    path: str
    score: float
    issues: int
    complexity: int
    churn: float


@dataclass(frozen=True)
class HotspotReport:
    files: tuple[Hotspot, ...]
    hotspots_by_type: dict[str, tuple[str, ...]]


@dataclass(frozen=True)
class TechnicalDebt:
    principal: int
    interest: float
    ratio: float
    time_to_pay_off: int


@dataclass(frozen=True)
class CodeHealth:
    overall: HealthLevel
    average: float
    factors: dict[str, float]
    improving: tuple[str, ...]
    declining: tuple[str, ...]


# ---------------------------------------------------------------------------
# Run output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisResult:
    issues: tuple[ReviewIssue, ...]
    score: int
    category_scores: dict[Category, int]
    total_files: int
    lines_of_code: int
    language_stats: dict[str, int]
    summary: ScoreSummary
    recommendations: tuple[str, ...]
    complexity: ComplexityMetrics
    duplicates: DuplicateCode
    test_coverage: TestCoverage
    code_smells: CodeSmells
    dependencies: DependencyReport
    code_metrics: CodeMetrics
    security: SecurityReport
    hotspots: HotspotReport
    technical_debt: TechnicalDebt
    code_health: CodeHealth
    testing_metrics: TestingMetrics
    documentation_metrics: DocumentationMetrics
    degraded_files: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping (enum tags, lists, plain dicts)."""
        return to_plain(self)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def to_plain(value: Any) -> Any:
    """Recursively convert dataclasses, enums and tuples to JSON types."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {to_plain(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
