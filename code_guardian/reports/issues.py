"""Full analysis report.

Functions:
    build_report(result, name)    -> dict
"""

from collections import Counter
from datetime import datetime, timezone

from code_guardian.models import AnalysisResult, Category, ReviewIssue, Severity


def build_report(result: AnalysisResult, name: str) -> dict:
    """Return the JSON-ready report of one analysis run."""
    return _build_report(
        report_type="analysis",
        name=name,
        result=result,
    )


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _build_summary(issues: tuple[ReviewIssue, ...]) -> dict:
    severities = Counter(issue.severity for issue in issues)
    categories = Counter(issue.category for issue in issues)
    return {
        "total":       len(issues),
        "by_severity": {s.value: severities[s] for s in Severity},
        "by_category": {c.value: categories[c] for c in Category},
    }


def _build_report(report_type: str, name: str, result: AnalysisResult) -> dict:
    body = result.to_dict()
    return {
        "report_type":  report_type,
        "name":         name,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "issue_summary": _build_summary(result.issues),
        **body,
    }
