"""Structural extractors, one strategy per language family.

Usage:
    parsed = extract(SourceFile("src/app.ts", text))   # ParsedFile
    extractor = get_extractor(Language.GO)             # GoExtractor
"""

from code_guardian.extractors.base import MissingContentError, StructuralExtractor
from code_guardian.extractors.cpp import CExtractor, CppExtractor
from code_guardian.extractors.generic import GenericExtractor
from code_guardian.extractors.go import GoExtractor
from code_guardian.extractors.java import JavaExtractor
from code_guardian.extractors.javascript import JavaScriptExtractor, TypeScriptExtractor
from code_guardian.extractors.python import PythonExtractor
from code_guardian.extractors.rust import RustExtractor
from code_guardian.languages import detect_language
from code_guardian.models import Language, ParsedFile, SourceFile

__all__ = ["MissingContentError", "StructuralExtractor", "extract", "get_extractor"]

# Extractors hold no per-call state, so one instance per language is shared.
_EXTRACTORS: dict[Language, StructuralExtractor] = {
    Language.TYPESCRIPT: TypeScriptExtractor(),
    Language.JAVASCRIPT: JavaScriptExtractor(),
    Language.PYTHON:     PythonExtractor(),
    Language.JAVA:       JavaExtractor(),
    Language.CPP:        CppExtractor(),
    Language.C:          CExtractor(),
    Language.GO:         GoExtractor(),
    Language.RUST:       RustExtractor(),
    Language.UNKNOWN:    GenericExtractor(),
}


def get_extractor(language: Language) -> StructuralExtractor:
    return _EXTRACTORS.get(language, _EXTRACTORS[Language.UNKNOWN])


def extract(source: SourceFile) -> ParsedFile:
    """Classify *source* by its path and return its structural model.

    Raises:
        MissingContentError: if the file content is unavailable.
    """
    return get_extractor(detect_language(source.path)).extract(source.path, source.content)
