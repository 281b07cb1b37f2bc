"""Issue-weighted scoring.

Functions:
    category_scores(issues)                          -> dict[Category, int]
    overall_score(issues, total_lines)               -> int
    summarize(issues, scores)                        -> ScoreSummary
    recommendations(issues, scores, language_stats)  -> list[str]

Scores use an exponential decay over the severity-weighted issue count, so
they approach but never reach zero. The floor is 1.
"""

import math
from collections import Counter
from typing import Iterable, Sequence

from code_guardian.models import Category, Language, ReviewIssue, ScoreSummary, Severity

CATEGORY_DECAY = 30
DENSITY_DECAY  = 80
MIN_LINES      = 100
SCORE_FLOOR    = 1
SCORE_CEILING  = 100

RECOMMENDATION_THRESHOLD = 70
TYPESCRIPT_ISSUE_LIMIT   = 10
ISSUE_VOLUME_LIMIT       = 50

# technical debt hours per issue
DEBT_HOURS = {Severity.CRITICAL: 8, Severity.WARNING: 3, Severity.IMPROVEMENT: 1}

_CATEGORY_ADVICE = (
    (Category.SECURITY,
     "Improve security by removing hardcoded credentials and implementing proper authentication"),
    (Category.PERFORMANCE,
     "Optimize performance by reducing unnecessary re-renders and implementing lazy loading"),
    (Category.CODE_QUALITY,
     "Enhance code quality by removing console statements and using modern JavaScript features"),
    (Category.ARCHITECTURE,
     "Refactor architecture by breaking down large functions and reducing coupling"),
)
TYPESCRIPT_ADVICE = "Consider adding stricter TypeScript configuration to catch more issues early"
VOLUME_ADVICE     = "Consider addressing high-priority issues first to reduce technical debt"
POSITIVE_MESSAGE  = "Great job! Your code is well-structured and follows best practices"


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties toward positive infinity rather than to even."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def weighted_count(issues: Iterable[ReviewIssue]) -> int:
    return sum(issue.severity.weight for issue in issues)


def _clamp(score: float) -> int:
    return int(max(SCORE_FLOOR, min(SCORE_CEILING, round_half_up(score))))


def _require(issues: Sequence[ReviewIssue] | None) -> Sequence[ReviewIssue]:
    if issues is None:
        raise ValueError("issues must be a sequence, not None")
    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def category_scores(issues: Sequence[ReviewIssue]) -> dict[Category, int]:
    """Score every category in [1, 100] from the issues filed under it."""
    issues = _require(issues)
    scores = {}
    for category in Category:
        weight = weighted_count(i for i in issues if i.category is category)
        scores[category] = _clamp(100 * math.exp(-weight / CATEGORY_DECAY))
    return scores


def overall_score(issues: Sequence[ReviewIssue], total_lines: int) -> int:
    """Score the whole run from the weighted issue density per 100 lines.

    Fewer than 100 lines are treated as 100 so tiny inputs are not punished
    by a huge density.
    """
    issues = _require(issues)
    density = weighted_count(issues) / max(total_lines, MIN_LINES) * 100
    return _clamp(100 * math.exp(-density / DENSITY_DECAY))


def technical_debt_hours(issues: Sequence[ReviewIssue]) -> int:
    return sum(DEBT_HOURS[issue.severity] for issue in _require(issues))


def summarize(issues: Sequence[ReviewIssue], scores: dict[Category, int]) -> ScoreSummary:
    issues = _require(issues)
    counts = Counter(issue.severity for issue in issues)
    maintainability = max(
        0,
        100
        - 2 * counts[Severity.IMPROVEMENT]
        - 5 * counts[Severity.WARNING]
        - 10 * counts[Severity.CRITICAL],
    )
    return ScoreSummary(
        security=scores.get(Category.SECURITY, 0),
        performance=scores.get(Category.PERFORMANCE, 0),
        code_quality=scores.get(Category.CODE_QUALITY, 0),
        architecture=scores.get(Category.ARCHITECTURE, 0),
        maintainability_index=maintainability,
        technical_debt=technical_debt_hours(issues),
    )


def recommendations(
    issues: Sequence[ReviewIssue],
    scores: dict[Category, int],
    language_stats: dict[str, int],
) -> list[str]:
    """Return canned remediation advice; never empty."""
    issues = _require(issues)
    advice = [
        message for category, message in _CATEGORY_ADVICE
        if scores.get(category, SCORE_CEILING) < RECOMMENDATION_THRESHOLD
    ]

    if language_stats.get(Language.TYPESCRIPT.value, 0) > 0:
        ts_issues = [i for i in issues if i.file.endswith((".ts", ".tsx"))]
        if len(ts_issues) > TYPESCRIPT_ISSUE_LIMIT:
            advice.append(TYPESCRIPT_ADVICE)

    if len(issues) > ISSUE_VOLUME_LIMIT:
        advice.append(VOLUME_ADVICE)

    return advice or [POSITIVE_MESSAGE]
