"""Language classification by file extension.

Usage:
    detect_language("src/app.tsx")     # Language.TYPESCRIPT
    detect_language("README")          # Language.UNKNOWN
"""

from pathlib import PurePosixPath

from code_guardian.models import Language

EXTENSIONS: dict[str, Language] = {
    ".ts":   Language.TYPESCRIPT,
    ".tsx":  Language.TYPESCRIPT,
    ".js":   Language.JAVASCRIPT,
    ".jsx":  Language.JAVASCRIPT,
    ".mjs":  Language.JAVASCRIPT,
    ".cjs":  Language.JAVASCRIPT,
    ".py":   Language.PYTHON,
    ".java": Language.JAVA,
    ".cpp":  Language.CPP,
    ".cc":   Language.CPP,
    ".cxx":  Language.CPP,
    ".hpp":  Language.CPP,
    ".c":    Language.C,
    ".h":    Language.C,
    ".go":   Language.GO,
    ".rs":   Language.RUST,
}

SOURCE_EXTENSIONS = frozenset(EXTENSIONS)


def detect_language(path: str) -> Language:
    """Return the language tag for *path*, or ``Language.UNKNOWN``."""
    suffix = PurePosixPath(path.replace("\\", "/")).suffix.lower()
    return EXTENSIONS.get(suffix, Language.UNKNOWN)
