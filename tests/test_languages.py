"""Tests for code_guardian/languages.py"""

import pytest

from code_guardian.languages import SOURCE_EXTENSIONS, detect_language
from code_guardian.models import Language


@pytest.mark.parametrize("path, expected", [
    ("src/app.ts",          Language.TYPESCRIPT),
    ("src/App.TSX",         Language.TYPESCRIPT),
    ("lib/index.mjs",       Language.JAVASCRIPT),
    ("tools/run.py",        Language.PYTHON),
    ("Main.java",           Language.JAVA),
    ("engine/core.hpp",     Language.CPP),
    ("engine/core.h",       Language.C),
    ("cmd/server.go",       Language.GO),
    ("src/lib.rs",          Language.RUST),
    ("src\\win\\path.cc",   Language.CPP),
])
def test_detect_known_extensions(path, expected):
    assert detect_language(path) is expected


@pytest.mark.parametrize("path", ["README", "notes.md", "package.json", "archive.tar.gz", ".ts/file"])
def test_detect_unknown(path):
    assert detect_language(path) is Language.UNKNOWN


def test_source_extensions_cover_every_language():
    languages = {detect_language(f"x{ext}") for ext in SOURCE_EXTENSIONS}
    assert languages == set(Language) - {Language.UNKNOWN}
