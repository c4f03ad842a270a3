"""In-memory fetch-result store, used by tests and the resolve CLI."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from ..errors import NotFound
from .. import paths
from ..versioning import VersionRecord, VersionType
from .base import FetchResultStore, check_version_types
from .models import FetchOutcome, ModuleUnit

logger = logging.getLogger(__name__)


class MemoryStore(FetchResultStore):
    """Dict-backed store with the same semantics as the SQLite backend."""

    def __init__(self):
        self._version_map: Dict[Tuple[str, str], FetchOutcome] = {}
        self._modules: Dict[Tuple[str, str], VersionRecord] = {}
        self._units: Dict[str, ModuleUnit] = {}

    async def get_version_map(self, full_path: str, version: str) -> FetchOutcome:
        outcome = self._version_map.get((full_path, version))
        if outcome is None:
            raise NotFound(f"no version map entry for {full_path}@{version}")
        return outcome

    async def get_version_maps_for_paths(
        self, paths: Sequence[str], version: str
    ) -> List[FetchOutcome]:
        wanted = set(paths)
        return [
            outcome
            for (path, v), outcome in self._version_map.items()
            if path in wanted and v == version and not outcome.is_success
        ]

    async def get_latest_major_path_for_path(self, full_path: str) -> str:
        best = None
        for unit in self._units.values():
            if unit.v1_path != full_path:
                continue
            major = paths.major_of(unit.module_path)
            if best is None or major > best[0]:
                best = (major, unit.path)
        if best is None or best[1] == full_path:
            raise NotFound(f"no higher major version of {full_path}")
        return best[1]

    async def get_tagged_versions(
        self, series_path: str, types: Sequence[VersionType]
    ) -> List[VersionRecord]:
        limit = check_version_types(types)
        wanted = set(types)
        records = sorted(
            (
                r for r in self._modules.values()
                if r.series_path == series_path and r.version_type in wanted
            ),
            key=lambda r: (r.sort_key, r.version),
            reverse=True,
        )
        return records[:limit] if limit else records

    async def insert_module(
        self, record: VersionRecord, unit_paths: Iterable[str] = ()
    ) -> None:
        self._modules[(record.module_path, record.version)] = record
        for path in (record.module_path, *unit_paths):
            self._units[path] = ModuleUnit(path=path, module_path=record.module_path)

    async def record_fetch_outcome(self, outcome: FetchOutcome) -> bool:
        existing = self._version_map.get(outcome.key)
        if existing is not None and existing.is_terminal:
            logger.debug(
                "Keeping terminal status %d for %s@%s",
                existing.status, *outcome.key,
            )
            return False
        self._version_map[outcome.key] = outcome
        return True
