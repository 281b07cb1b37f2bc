"""Documentation coverage from the extracted comments."""

from typing import Iterable

from code_guardian.metrics.coverage import MAX_LISTED_FILES
from code_guardian.models import CommentKind, DocumentationMetrics, ParsedFile
from code_guardian.scoring import round_half_up

API_DIRECTORIES = ("api/", "routes/")


def measure_documentation(files: Iterable[ParsedFile]) -> DocumentationMetrics:
    """Share of files carrying at least one doc comment or docstring.

    Single-line and block comments are counted as inline comments; only
    ``/** */``, ``///`` and docstrings make a file documented.
    """
    files = list(files)
    documented = 0
    missing = []
    inline = 0
    for parsed in files:
        if any(c.kind is CommentKind.DOC for c in parsed.comments):
            documented += 1
        else:
            missing.append(parsed.path)
        inline += sum(1 for c in parsed.comments if c.kind is not CommentKind.DOC)

    coverage = documented / len(files) * 100 if files else 0.0
    return DocumentationMetrics(
        documented_files=documented,
        documentation_coverage=round_half_up(coverage, 1),
        missing_docs=tuple(missing[:MAX_LISTED_FILES]),
        api_files=tuple(p.path for p in files if any(d in p.path for d in API_DIRECTORIES)),
        inline_comments=inline,
    )
