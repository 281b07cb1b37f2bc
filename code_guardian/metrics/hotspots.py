"""Hotspot ranking: files where issues, complexity and coupling pile up."""

from collections import Counter
from typing import Mapping, Sequence

from code_guardian.models import CouplingMetrics, Hotspot, HotspotReport, ParsedFile, ReviewIssue

MAX_HOTSPOTS = 10

ISSUE_WEIGHT       = 10
COMPLEXITY_WEIGHT  = 2
INSTABILITY_WEIGHT = 5

HIGH_ISSUE_COUNT = "High Issue Count"
HIGH_COMPLEXITY  = "High Complexity"
HIGH_CHURN       = "High Churn"

ISSUE_THRESHOLD      = 10
COMPLEXITY_THRESHOLD = 50
CHURN_THRESHOLD      = 5


def identify_hotspots(
    files: Sequence[ParsedFile],
    issues: Sequence[ReviewIssue],
    coupling: CouplingMetrics,
    churn: Mapping[str, float] | None = None,
) -> HotspotReport:
    """Rank files by a composite score and bucket the top ones.

    *churn* maps a path to a caller-supplied change frequency; files not in
    it have zero churn.
    """
    churn = churn or {}
    per_file = Counter(issue.file for issue in issues)

    ranked = []
    for parsed in files:
        count = per_file[parsed.path]
        score = (
            count * ISSUE_WEIGHT
            + parsed.complexity * COMPLEXITY_WEIGHT
            + coupling.instability.get(parsed.path, 0.0) * INSTABILITY_WEIGHT
        )
        ranked.append(Hotspot(
            path=parsed.path,
            score=score,
            issues=count,
            complexity=parsed.complexity,
            churn=float(churn.get(parsed.path, 0.0)),
        ))
    # stable sort keeps input order among equal scores
    top = sorted(ranked, key=lambda h: h.score, reverse=True)[:MAX_HOTSPOTS]

    buckets: dict[str, list[str]] = {}
    for spot in top:
        if spot.issues > ISSUE_THRESHOLD:
            buckets.setdefault(HIGH_ISSUE_COUNT, []).append(spot.path)
        if spot.complexity > COMPLEXITY_THRESHOLD:
            buckets.setdefault(HIGH_COMPLEXITY, []).append(spot.path)
        if spot.churn > CHURN_THRESHOLD:
            buckets.setdefault(HIGH_CHURN, []).append(spot.path)

    return HotspotReport(
        files=tuple(top),
        hotspots_by_type={name: tuple(paths) for name, paths in buckets.items()},
    )
