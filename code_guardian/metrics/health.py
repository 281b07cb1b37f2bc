"""Technical debt and overall code health."""

import math

from code_guardian.models import (
    Category,
    CodeHealth,
    CodeSmells,
    HealthLevel,
    ScoreSummary,
    TechnicalDebt,
)

INTEREST_RATE = 0.1
# share of the principal paid down per sprint
PAYDOWN_RATE = 0.2
MAX_DEBT_RATIO = 100

SMELL_PENALTY = 5
IMPROVING_ABOVE = 70
DECLINING_BELOW = 50

_LEVELS = (
    (90, HealthLevel.EXCELLENT),
    (75, HealthLevel.GOOD),
    (60, HealthLevel.FAIR),
    (40, HealthLevel.POOR),
)

_TREND_FACTORS = (
    ("Code Quality", "code_quality"),
    ("Security", "security"),
    ("Maintainability", "maintainability"),
)


def technical_debt(principal: int, total_lines: int) -> TechnicalDebt:
    """Debt in hours, its interest, its ratio to code size and payoff sprints."""
    ratio = principal / total_lines * 100 if total_lines > 0 else 0.0
    sprints = math.ceil(1 / PAYDOWN_RATE) if ratio > 0 else 0
    return TechnicalDebt(
        principal=principal,
        interest=principal * INTEREST_RATE,
        ratio=min(MAX_DEBT_RATIO, ratio),
        time_to_pay_off=sprints,
    )


def assess_code_health(
    scores: dict[Category, int], summary: ScoreSummary, smells: CodeSmells
) -> CodeHealth:
    factors = {
        "security":        float(scores.get(Category.SECURITY, 0)),
        "performance":     float(scores.get(Category.PERFORMANCE, 0)),
        "code_quality":    float(scores.get(Category.CODE_QUALITY, 0)),
        "architecture":    float(scores.get(Category.ARCHITECTURE, 0)),
        "maintainability": float(summary.maintainability_index),
        "technical_debt":  float(max(0, 100 - summary.technical_debt)),
        "code_smells":     float(max(0, 100 - smells.total_smells * SMELL_PENALTY)),
    }
    average = sum(factors.values()) / len(factors)

    level = HealthLevel.CRITICAL
    for floor, candidate in _LEVELS:
        if average >= floor:
            level = candidate
            break

    return CodeHealth(
        overall=level,
        average=average,
        factors=factors,
        improving=tuple(label for label, key in _TREND_FACTORS if factors[key] > IMPROVING_ABOVE),
        declining=tuple(label for label, key in _TREND_FACTORS if factors[key] < DECLINING_BELOW),
    )
