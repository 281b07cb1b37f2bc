"""Analysis pipeline: extraction, issues, metrics and scores for a file set.

Usage:
    result = Analyzer().analyze(files)                  # AnalysisResult
    result = Analyzer.from_config(config).analyze(files, on_progress=print)

    run = Analyzer().start_run()                        # drive it file by file
    for source in files:
        run.add(source)
    result = run.finish()

An Analyzer only holds immutable configuration. Each run owns its own rule
engine (and pattern cache) and issue counter, so separate runs never share
mutable state.
"""

import logging
import posixpath
from collections import Counter
from typing import Callable, Iterable, Mapping

from code_guardian import metrics, scoring
from code_guardian.aggregator import IssueCounter, aggregate_file
from code_guardian.extractors import MissingContentError, extract
from code_guardian.extractors.base import count_lines_of_code
from code_guardian.languages import detect_language
from code_guardian.models import AnalysisResult, ParsedFile, ReviewIssue, SourceFile
from code_guardian.rules import DEFAULT_MAX_LINE_LENGTH, DEFAULT_RULES, Rule, RuleEngine

logger = logging.getLogger(__name__)


class Analyzer:
    def __init__(
        self,
        rules: Iterable[Rule] = DEFAULT_RULES,
        max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    ) -> None:
        self.rules = tuple(rules)
        self.max_line_length = max_line_length

    @classmethod
    def from_config(cls, config) -> "Analyzer":
        engine = RuleEngine.from_config(config)
        return cls(engine.rules, max_line_length=engine.max_line_length)

    def start_run(self) -> "AnalysisRun":
        return AnalysisRun(RuleEngine(self.rules, self.max_line_length))

    def analyze(
        self,
        files: Iterable[SourceFile],
        on_progress: Callable[[float], None] | None = None,
        churn: Mapping[str, float] | None = None,
    ) -> AnalysisResult:
        """Analyse *files* in order and return the merged result.

        *on_progress* receives the processed fraction after each file.
        """
        files = list(files)
        run = self.start_run()
        for index, source in enumerate(files, start=1):
            run.add(source)
            if on_progress is not None:
                on_progress(index / len(files))
        return run.finish(churn)


class AnalysisRun:
    """State of one analysis run. Not shared between runs."""

    def __init__(self, engine: RuleEngine) -> None:
        self.engine = engine
        self.next_id = IssueCounter()
        self.parsed: list[ParsedFile] = []
        self.issues: list[ReviewIssue] = []
        self.paths: list[str] = []
        self.degraded: list[str] = []
        self.manifests: dict[str, str] = {}
        self.language_stats: Counter[str] = Counter()
        self.total_lines = 0

    def add(self, source: SourceFile) -> list[ReviewIssue]:
        """Process one file and return the issues it produced."""
        if posixpath.basename(source.path) in metrics.MANIFEST_NAMES:
            if source.content is not None:
                self.manifests[source.path] = source.content
            return []

        self.paths.append(source.path)
        self.language_stats[detect_language(source.path).value] += 1

        try:
            parsed = extract(source)
        except MissingContentError as exc:
            logger.warning("%s; falling back to pattern rules", exc)
            found = self._degrade(source)
        except Exception:
            logger.warning("Extraction failed for '%s'; falling back to pattern rules", source.path, exc_info=True)
            found = self._degrade(source)
        else:
            self.parsed.append(parsed)
            self.total_lines += parsed.lines_of_code
            found = aggregate_file(parsed, self.engine, self.next_id)

        self.issues.extend(found)
        return found

    def _degrade(self, source: SourceFile) -> list[ReviewIssue]:
        self.degraded.append(source.path)
        if source.content is None:
            return []
        self.total_lines += count_lines_of_code(source.content)
        return self.engine.scan(source.path, source.content, self.next_id)

    def finish(self, churn: Mapping[str, float] | None = None) -> AnalysisResult:
        """Derive metrics and scores from everything added so far."""
        issues = self.issues
        scores = scoring.category_scores(issues)
        summary = scoring.summarize(issues, scores)
        coupling = metrics.coupling_metrics(self.parsed)
        smells = metrics.detect_code_smells(self.parsed)

        logger.info(
            "Analysed %d files (%d degraded): %d issues",
            len(self.paths), len(self.degraded), len(issues),
        )
        logger.debug("Rule pattern cache: %d hits, %d misses", self.engine.cache_hits, self.engine.cache_misses)

        return AnalysisResult(
            issues=tuple(issues),
            score=scoring.overall_score(issues, self.total_lines),
            category_scores=scores,
            total_files=len(self.paths),
            lines_of_code=self.total_lines,
            language_stats=dict(self.language_stats),
            summary=summary,
            recommendations=tuple(scoring.recommendations(issues, scores, self.language_stats)),
            complexity=metrics.complexity_metrics(self.parsed),
            duplicates=metrics.detect_duplicate_code(self.parsed),
            test_coverage=metrics.measure_test_coverage(self.paths),
            code_smells=smells,
            dependencies=metrics.analyze_dependencies(self.parsed, self.manifests),
            code_metrics=metrics.code_metrics(self.parsed, coupling),
            security=metrics.analyze_security(issues),
            hotspots=metrics.identify_hotspots(self.parsed, issues, coupling, churn),
            technical_debt=metrics.technical_debt(summary.technical_debt, self.total_lines),
            code_health=metrics.assess_code_health(scores, summary, smells),
            testing_metrics=metrics.measure_test_suite(self.parsed),
            documentation_metrics=metrics.measure_documentation(self.parsed),
            degraded_files=tuple(self.degraded),
        )
