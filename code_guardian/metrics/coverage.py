"""Test-file coverage and test-suite size.

A test file marks its subject as tested by base name, e.g.
``src/app.test.ts`` -> ``app.ts``, ``tests/test_config.py`` -> ``config.py``,
``server_test.go`` -> ``server.go`` and ``FooTest.java`` -> ``Foo.java``.
"""

import posixpath
import re
from typing import Iterable

from code_guardian.models import ParsedFile, TestCoverage, TestingMetrics
from code_guardian.scoring import round_half_up

MAX_LISTED_FILES = 10

_SUBJECT_PATTERNS = (
    (re.compile(r"^(?P<stem>.+)\.(?:test|spec)(?P<ext>\.\w+)$"), "{stem}{ext}"),
    (re.compile(r"^test_(?P<stem>.+)\.py$"),                      "{stem}.py"),
    (re.compile(r"^(?P<stem>.+)_test\.(?P<ext>py|go)$"),          "{stem}.{ext}"),
    (re.compile(r"^(?P<stem>[A-Z]\w*?)Tests?\.java$"),            "{stem}.java"),
)

_TEST_DIRECTORIES = frozenset({"test", "tests", "__tests__"})

TEST_KINDS = ("unit", "integration", "e2e")

TEST_CASE_RE = re.compile(
    r"\b(?:it|test|describe)\s*\("
    r"|^\s*(?:async\s+)?def\s+test\w*\s*\("
    r"|^\s*func\s+Test\w*\s*\("
    r"|@Test\b"
    r"|#\[(?:tokio::)?test\]"
)
ASSERTION_RE = re.compile(r"\bexpect\s*\(|\bassert\w*\b|\bt\.(?:Errorf?|Fatalf?)\s*\(")


def is_test_file(path: str) -> bool:
    if "__tests__/" in path or path.startswith("__tests__"):
        return True
    name = posixpath.basename(path)
    return any(pattern.match(name) for pattern, _ in _SUBJECT_PATTERNS)


def subject_name(path: str) -> str:
    """Return the base name of the file a test file covers."""
    name = posixpath.basename(path)
    for pattern, template in _SUBJECT_PATTERNS:
        m = pattern.match(name)
        if m:
            return template.format(**m.groupdict())
    return name


def measure_test_coverage(paths: Iterable[str]) -> TestCoverage:
    """Share of non-test source files whose base name a test file covers."""
    paths = list(paths)
    subjects = {subject_name(p) for p in paths if is_test_file(p)}
    sources = [p for p in paths if not is_test_file(p)]

    tested = [p for p in sources if posixpath.basename(p) in subjects]
    untested = [p for p in sources if posixpath.basename(p) not in subjects]
    coverage = len(tested) / len(sources) * 100 if sources else 0.0
    return TestCoverage(
        coverage=round_half_up(coverage, 1),
        tested_files=len(tested),
        untested_files=tuple(untested[:MAX_LISTED_FILES]),
    )


def in_test_suite(path: str) -> bool:
    """True for test files and for anything under a test directory."""
    return is_test_file(path) or any(part in _TEST_DIRECTORIES for part in path.split("/")[:-1])


def classify_test(path: str) -> str | None:
    """Return "unit", "integration" or "e2e" when the path names one."""
    name = posixpath.basename(path)
    directories = path.split("/")[:-1]
    for kind in TEST_KINDS:
        if f".{kind}." in name or kind in directories:
            return kind
    return None


def measure_test_suite(files: Iterable[ParsedFile]) -> TestingMetrics:
    """Count test files, declared test cases and assertion lines."""
    suites = cases = assertions = 0
    by_kind = dict.fromkeys(TEST_KINDS, 0)
    for parsed in files:
        if not in_test_suite(parsed.path):
            continue
        suites += 1
        kind = classify_test(parsed.path)
        if kind:
            by_kind[kind] += 1
        for line in parsed.content.splitlines():
            if TEST_CASE_RE.search(line):
                cases += 1
            if ASSERTION_RE.search(line):
                assertions += 1
    return TestingMetrics(
        test_suites=suites,
        test_cases=cases,
        assertions=assertions,
        coverage_by_type=by_kind,
    )

