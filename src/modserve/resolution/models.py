"""Resolution outcomes and the per-request context."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Union

from ..store.models import FetchOutcome
from ..versioning import VersionRecord


@dataclass(frozen=True)
class Redirect:
    """The path lives in another module; send the user there."""
    target_module_path: str
    from_path: str


@dataclass(frozen=True)
class NotFoundTerminal:
    """A permanent bad-module record exists; never offer a fetch."""
    full_path: str
    requested_version: str


@dataclass(frozen=True)
class NotFoundFetchable:
    """Nothing definitive is known; the user may request a fetch."""
    normalized_path: str
    requested_version: str


@dataclass(frozen=True)
class Upstream:
    """A non-terminal failure from a previous fetch, shown as recorded."""
    outcome: FetchOutcome
    full_path: str
    requested_version: str


@dataclass(frozen=True)
class Found:
    """A version of the module is known; hand over to page rendering."""
    record: VersionRecord


Resolution = Union[Redirect, NotFoundTerminal, NotFoundFetchable, Upstream, Found]


@dataclass(frozen=True)
class RequestContext:
    """Per-request settings threaded through resolve()."""
    experiments: FrozenSet[str] = frozenset()

    def is_active(self, experiment: str) -> bool:
        return experiment in self.experiments


@dataclass
class ExperimentSet:
    """Configured experiments and their rollout percentages (0-100)."""
    rollouts: Dict[str, int] = field(default_factory=dict)

    def context_for(self, request_key: Optional[str] = None) -> RequestContext:
        """Build the context for one request.

        Partial rollouts are decided by hashing the request key, so a given
        client sees a stable set of experiments.
        """
        active = set()
        for name, rollout in self.rollouts.items():
            if rollout >= 100:
                active.add(name)
            elif rollout > 0 and request_key:
                digest = hashlib.sha256(f"{name}:{request_key}".encode()).digest()
                if int.from_bytes(digest[:4], "big") % 100 < rollout:
                    active.add(name)
        return RequestContext(experiments=frozenset(active))
