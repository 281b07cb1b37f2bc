"""Code smell detection."""

from collections import Counter
from typing import Sequence

from code_guardian.models import CodeSmells, ParsedFile

LONG_PARAMETER_LIST = "Long Parameter List"
LARGE_CLASS         = "Large Class"
FEATURE_ENVY        = "Feature Envy"
DATA_CLUMPS         = "Data Clumps"

MAX_PARAMETERS       = 5
MAX_CLASS_METHODS    = 20
MAX_FILE_DEFINITIONS = 15
MAX_FILE_VARIABLES   = 10


def detect_code_smells(files: Sequence[ParsedFile]) -> CodeSmells:
    by_type: Counter[str] = Counter()
    smelly: list[str] = []

    for parsed in files:
        found = 0
        for func in parsed.functions:
            if len(func.parameters) > MAX_PARAMETERS:
                by_type[LONG_PARAMETER_LIST] += 1
                found += 1
        for cls in parsed.classes:
            if len(cls.methods) > MAX_CLASS_METHODS:
                by_type[LARGE_CLASS] += 1
                found += 1
        if len(parsed.functions) + len(parsed.classes) > MAX_FILE_DEFINITIONS:
            by_type[FEATURE_ENVY] += 1
            found += 1
        if len(parsed.variables) > MAX_FILE_VARIABLES:
            by_type[DATA_CLUMPS] += 1
            found += 1
        if found:
            smelly.append(parsed.path)

    return CodeSmells(
        total_smells=sum(by_type.values()),
        smells_by_type=dict(by_type),
        files_with_smells=tuple(smelly),
    )
