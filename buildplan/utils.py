"""Small probes shared by the planners."""

from typing import Iterable, Optional

from .source import SourceAccessor


def weak_contains(content: str, needle: str) -> bool:
    """
    Case-insensitive substring test.

    Both sides are lower-cased; there is no word-boundary check, so
    ``Flask-Login`` contains ``flask`` and ``djangorestframework``
    contains ``django``.
    """
    return needle.lower() in content.lower()


def has_file(src: SourceAccessor, path: str) -> bool:
    """Check if a file exists in the project."""
    return src.exists(path)


def first_existing(src: SourceAccessor, candidates: Iterable[str]) -> Optional[str]:
    """Return the first candidate path that exists, in the given order."""
    for candidate in candidates:
        if has_file(src, candidate):
            return candidate
    return None
