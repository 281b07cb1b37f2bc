"""Payloads handed to outside collaborators.

Functions:
    webhook_payload(result, event, name)    -> dict   event notification body
    insight_request(result, max_issues)     -> dict   input for an LLM reviewer

Only the payloads are built here; sending them is the caller's concern.
"""

from collections import Counter
from datetime import datetime, timezone

from code_guardian.models import AnalysisResult, Severity, to_plain

ANALYSIS_COMPLETE = "analysis_complete"
DEFAULT_MAX_ISSUES = 25
MAX_RECOMMENDATIONS = 5

_INSIGHT_ISSUE_FIELDS = ("title", "category", "severity", "file", "suggestion")


def webhook_payload(result: AnalysisResult, event: str = ANALYSIS_COMPLETE, name: str | None = None) -> dict:
    timestamp = datetime.now(timezone.utc).isoformat()
    return {
        "event": event,
        "data": {
            "name":         name,
            "score":        result.score,
            "total_issues": len(result.issues),
            "categories":   to_plain(result.category_scores),
            "issues":       to_plain(result.issues),
            "timestamp":    timestamp,
        },
        "timestamp": timestamp,
    }


def insight_request(result: AnalysisResult, max_issues: int = DEFAULT_MAX_ISSUES) -> dict:
    """Trim *result* to what an LLM reviewer needs, most severe issues first."""
    counts = Counter(issue.severity for issue in result.issues)
    # sorted() is stable, so issues keep run order within a severity
    ranked = sorted(result.issues, key=lambda issue: issue.severity.rank)[:max_issues]
    return {
        "score":           result.score,
        "lines_of_code":   result.lines_of_code,
        "total_issues":    len(result.issues),
        "critical":        counts[Severity.CRITICAL],
        "warnings":        counts[Severity.WARNING],
        "improvements":    counts[Severity.IMPROVEMENT],
        "language_stats":  dict(result.language_stats),
        "recommendations": list(result.recommendations[:MAX_RECOMMENDATIONS]),
        "issues": [
            {name: to_plain(getattr(issue, name)) for name in _INSIGHT_ISSUE_FIELDS}
            for issue in ranked
        ],
    }
