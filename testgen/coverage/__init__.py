"""Coverage trace reading and gap analysis."""

from .analyzer import CoverageAnalyzer
from .patterns import is_excluded, is_included, matches
from .reader import JacocoXmlReader, TraceError, TraceNotFound, TraceReader

__all__ = [
    "CoverageAnalyzer",
    "JacocoXmlReader",
    "TraceError",
    "TraceNotFound",
    "TraceReader",
    "is_excluded",
    "is_included",
    "matches",
]
