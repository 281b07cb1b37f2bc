"""Fallback extractor for files whose language is not recognized.

Only line counting and comment extraction apply; everything else is empty.
"""

from code_guardian.extractors.base import StructuralExtractor
from code_guardian.models import Language


class GenericExtractor(StructuralExtractor):
    language = Language.UNKNOWN
