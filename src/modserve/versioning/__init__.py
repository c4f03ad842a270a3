"""Version classification and ordering."""

from .models import Latest, VersionRecord, VersionType
from .classifier import classify, compare, for_sorting, is_supported_version, latest_of

__all__ = [
    "Latest",
    "VersionRecord",
    "VersionType",
    "classify",
    "compare",
    "for_sorting",
    "is_supported_version",
    "latest_of",
]
