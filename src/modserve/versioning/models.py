"""Data models for versions and their classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..paths import series_path as _series_path


class VersionType(Enum):
    """Kinds of concrete module versions."""
    RELEASE = "release"
    PRERELEASE = "prerelease"
    PSEUDO = "pseudo"

    @property
    def rank(self) -> int:
        """Ordering rank: releases above prereleases above pseudo-versions."""
        return _RANKS[self]


_RANKS = {
    VersionType.PSEUDO: 0,
    VersionType.PRERELEASE: 1,
    VersionType.RELEASE: 2,
}


class Latest(Enum):
    """Marker returned by classify() for the "latest" sentinel."""
    LATEST = "latest"


@dataclass(frozen=True)
class VersionRecord:
    """A known (module_path, version) pair, created when a module is ingested."""
    module_path: str
    version: str
    version_type: VersionType
    commit_time: Optional[datetime] = None
    sort_key: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.sort_key:
            # classifier imports this module
            from .classifier import for_sorting
            object.__setattr__(self, "sort_key", for_sorting(self.version))

    @property
    def series_path(self) -> str:
        return _series_path(self.module_path)
