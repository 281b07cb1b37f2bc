"""Complexity and duplication metrics over the parsed file set."""

from collections import Counter
from typing import Sequence

from code_guardian.models import ComplexityMetrics, DuplicateCode, ParsedFile
from code_guardian.scoring import round_half_up

COMPLEX_FILE_FACTOR = 1.5
MAX_LISTED_FILES = 10

# estimated size of one duplicated block
LINES_PER_DUPLICATE = 10


def complexity_metrics(files: Sequence[ParsedFile]) -> ComplexityMetrics:
    """Mean and max file complexity, plus files well above the mean."""
    if not files:
        return ComplexityMetrics(average=0, maximum=0, complex_files=())
    values = [f.complexity for f in files]
    mean = sum(values) / len(values)
    threshold = mean * COMPLEX_FILE_FACTOR
    complex_files = [f.path for f in files if f.complexity > threshold]
    return ComplexityMetrics(
        average=int(round_half_up(mean)),
        maximum=max(values),
        complex_files=tuple(complex_files[:MAX_LISTED_FILES]),
    )


def detect_duplicate_code(files: Sequence[ParsedFile]) -> DuplicateCode:
    """Count repeated ``name(arity)`` signatures across all files.

    Every occurrence after the first counts as one duplicate block.
    """
    seen: Counter[str] = Counter()
    blocks = 0
    for parsed in files:
        for func in parsed.functions:
            signature = f"{func.name}({len(func.parameters)})"
            if seen[signature]:
                blocks += 1
            seen[signature] += 1

    duplicated = blocks * LINES_PER_DUPLICATE
    total = sum(f.lines_of_code for f in files)
    percentage = duplicated / total * 100 if total else 0.0
    return DuplicateCode(
        duplicate_blocks=blocks,
        duplicated_lines=duplicated,
        duplicate_percentage=round_half_up(percentage, 1),
    )
