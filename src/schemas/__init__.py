"""Schema definitions for zinio-distiller."""

from .issue import Issue, PageIndexError
from .magazine import IssueSummary, Library, Magazine
from .page import Page
from .session import Session

__all__ = [
    "Issue",
    "IssueSummary",
    "Library",
    "Magazine",
    "Page",
    "PageIndexError",
    "Session",
]
