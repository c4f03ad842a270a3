"""Path/version resolution engine.

Decides, from previously recorded fetch results only, what a request for
(full_path, requested_version) should get. Rules are tried in order and the
first one that applies wins:

1. An exact version-map record that is terminal (490/491) or failed with a
   5xx status is authoritative.
2. With the not-at-v1 experiment active, a higher major version of the path
   is a redirect, whatever version was requested.
3. Non-2xx records for any candidate module path at the requested version
   are merged into one outcome.
4. Otherwise nothing is known and the path may be fetched.

"latest" requests never end in a terminal not-found: they fall back to the
module's version history instead.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..constants import Constants
from ..errors import InvalidArgument, NotFound
from ..paths import candidate_module_paths, check_path, series_path
from ..store.base import FetchResultStore
from ..store.models import FetchOutcome
from ..versioning import Latest, VersionType, classify, latest_of
from .models import (
    Found,
    NotFoundFetchable,
    NotFoundTerminal,
    Redirect,
    RequestContext,
    Resolution,
    Upstream,
)

logger = logging.getLogger(__name__)


def _precedence(outcome: FetchOutcome) -> int:
    if outcome.is_alternative:
        return 0
    if outcome.is_bad_module:
        return 1
    return 2


def merge_outcomes(outcomes: Sequence[FetchOutcome]) -> FetchOutcome:
    """Pick the single outcome that decides a candidate sweep.

    Alternative-module records beat bad-module records, which beat any other
    failure. Ties go to the longest module path, so a `P/vN` variant beats
    its prefix `P`. Input order is irrelevant.
    """
    if not outcomes:
        raise InvalidArgument("cannot merge an empty set of outcomes")
    return min(
        outcomes,
        key=lambda o: (_precedence(o), -len(o.module_path), o.module_path),
    )


class ResolutionEngine:
    """Resolves requested paths against a FetchResultStore.

    The engine holds no mutable state; one instance may serve any number of
    concurrent requests.
    """

    def __init__(self, store: FetchResultStore):
        self._store = store

    async def resolve(
        self,
        full_path: str,
        requested_version: str,
        ctx: Optional[RequestContext] = None,
    ) -> Resolution:
        """Resolve a path and version to a Resolution.

        Args:
            full_path: Requested package or module import path.
            requested_version: A version string or "latest".
            ctx: Request context; decides which experiments apply.

        Returns:
            One of Redirect, NotFoundTerminal, NotFoundFetchable, Upstream
            or Found.

        Raises:
            InvalidArgument: for an empty or malformed path or version.
            InvalidVersion: if the version is not a semantic version.
            StoreUnavailable: if the store fails; never masked as not-found.
        """
        if not full_path or not requested_version:
            raise InvalidArgument("full_path and requested_version must both be non-empty")
        check_path(full_path)
        is_latest = classify(requested_version) is Latest.LATEST
        ctx = ctx or RequestContext()

        try:
            exact = await self._store.get_version_map(full_path, requested_version)
        except NotFound:
            exact = None
        if exact is not None and (exact.status >= 500 or exact.is_terminal):
            logger.debug(
                "Exact record for %s@%s has status %d", full_path, requested_version, exact.status
            )
            return await self._from_outcome(exact, full_path, requested_version, is_latest)

        if ctx.is_active(Constants.EXPERIMENT_NOT_AT_V1):
            try:
                major_path = await self._store.get_latest_major_path_for_path(full_path)
            except NotFound:
                major_path = None
            if major_path:
                logger.debug("Redirecting %s to higher major path %s", full_path, major_path)
                return Redirect(target_module_path=major_path, from_path=full_path)

        candidates = candidate_module_paths(full_path, requested_version)
        outcomes = await self._store.get_version_maps_for_paths(candidates, requested_version)
        if not outcomes:
            logger.debug("Nothing recorded for %s@%s", full_path, requested_version)
            return NotFoundFetchable(normalized_path=full_path, requested_version=requested_version)

        winner = merge_outcomes(outcomes)
        logger.debug(
            "Merged %d records for %s@%s; %s has status %d",
            len(outcomes), full_path, requested_version, winner.module_path, winner.status,
        )
        return await self._from_outcome(winner, full_path, requested_version, is_latest)

    async def _from_outcome(
        self,
        outcome: FetchOutcome,
        full_path: str,
        requested_version: str,
        is_latest: bool,
    ) -> Resolution:
        if outcome.is_alternative:
            return Redirect(target_module_path=outcome.go_mod_path, from_path=full_path)
        if outcome.is_bad_module:
            if is_latest:
                return await self._latest_from_history(outcome.module_path, full_path)
            return NotFoundTerminal(full_path=full_path, requested_version=requested_version)
        return Upstream(
            outcome=outcome, full_path=full_path, requested_version=requested_version
        )

    async def _latest_from_history(self, module_path: str, full_path: str) -> Resolution:
        """Resolve "latest" from the version history rather than a cached failure.

        module_path is the module the bad-module record was found on, which
        is full_path itself or a module enclosing it.
        """
        series = series_path(module_path)
        tagged = await self._store.get_tagged_versions(
            series, [VersionType.RELEASE, VersionType.PRERELEASE]
        )
        record = latest_of(r for r in tagged if r.module_path == module_path)
        if record is None:
            pseudo = await self._store.get_pseudo_versions(series)
            record = latest_of(r for r in pseudo if r.module_path == module_path)
        if record is None:
            logger.debug("No version history for %s; offering a fetch", full_path)
            return NotFoundFetchable(
                normalized_path=full_path, requested_version=Constants.LATEST_VERSION
            )
        logger.debug("Resolved %s@latest to %s from version history", full_path, record.version)
        return Found(record=record)
