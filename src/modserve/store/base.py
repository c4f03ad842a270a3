"""Abstract contract for the fetch-result store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from ..constants import Constants
from ..errors import InvalidArgument
from ..versioning import VersionRecord, VersionType
from .models import FetchOutcome


class FetchResultStore(ABC):
    """Read interface over recorded fetch attempts and version histories.

    Every method is a coroutine and is the only place a resolution suspends.
    Implementations raise NotFound for missing records and StoreUnavailable
    when the backing engine fails; they never retry.
    """

    @abstractmethod
    async def get_version_map(self, full_path: str, version: str) -> FetchOutcome:
        """Return the outcome recorded for exactly (full_path, version).

        Raises:
            NotFound: if no attempt was recorded for the pair.
        """

    @abstractmethod
    async def get_version_maps_for_paths(
        self, paths: Sequence[str], version: str
    ) -> List[FetchOutcome]:
        """Return the non-2xx outcomes recorded for any of paths at version.

        The result is unordered.
        """

    @abstractmethod
    async def get_latest_major_path_for_path(self, full_path: str) -> str:
        """Return the highest-major path whose v1 path is full_path.

        Raises:
            NotFound: if no higher major version of full_path is known.
        """

    @abstractmethod
    async def get_tagged_versions(
        self, series_path: str, types: Sequence[VersionType]
    ) -> List[VersionRecord]:
        """Return versions of the module series, highest precedence first."""

    async def get_pseudo_versions(self, series_path: str) -> List[VersionRecord]:
        """Return the most recent pseudo-versions of the module series."""
        return await self.get_tagged_versions(series_path, [VersionType.PSEUDO])

    @abstractmethod
    async def insert_module(
        self, record: VersionRecord, unit_paths: Iterable[str] = ()
    ) -> None:
        """Record a successfully ingested module version and its unit paths."""

    @abstractmethod
    async def record_fetch_outcome(self, outcome: FetchOutcome) -> bool:
        """Create or overwrite the outcome for its key.

        A terminal outcome already stored for the key is kept as is.

        Returns:
            True if the outcome was written.
        """

    async def close(self) -> None:
        """Release any resources held by the store."""


def check_version_types(types: Sequence[VersionType]) -> int:
    """Validate a version-type filter and return the row limit it implies.

    A pseudo-only query is capped; 0 means unlimited.
    """
    if not types:
        raise InvalidArgument("must specify at least one version type")
    if list(types) == [VersionType.PSEUDO]:
        return Constants.PSEUDO_VERSION_LIMIT
    return 0
