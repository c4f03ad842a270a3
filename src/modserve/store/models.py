"""Records kept by the fetch-result store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..constants import FetchStatus, RECOGNIZED_STATUSES, TERMINAL_STATUSES
from ..errors import InvalidArgument
from ..paths import v1_path as _v1_path


@dataclass(frozen=True)
class FetchOutcome:
    """Recorded result of a past attempt to fetch (module_path, requested_version).

    ``module_path`` is the path that was requested. ``go_mod_path`` is the
    module that actually declares it, which differs from ``module_path``
    when the path lives in an alternative module.
    """

    module_path: str
    requested_version: str
    status: int
    go_mod_path: str = ""
    error: str = ""
    response_text: str = ""
    resolved_version: Optional[str] = None

    def __post_init__(self):
        if self.status not in RECOGNIZED_STATUSES:
            raise InvalidArgument(f"unrecognized fetch status {self.status}")
        if (self.status >= 400) != bool(self.error):
            raise InvalidArgument(
                f"status {self.status} for {self.module_path}@{self.requested_version} "
                "must carry an error message iff it is a failure"
            )
        if not self.go_mod_path:
            object.__setattr__(self, "go_mod_path", self.module_path)

    @property
    def key(self):
        return self.module_path, self.requested_version

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_terminal(self) -> bool:
        """490 and 491 records are permanent and are never re-fetched."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_alternative(self) -> bool:
        return self.status in (FetchStatus.ALTERNATIVE_MODULE, FetchStatus.FOUND)

    @property
    def is_bad_module(self) -> bool:
        return self.status == FetchStatus.BAD_MODULE


@dataclass(frozen=True)
class ModuleUnit:
    """A package or module path recorded for an ingested module."""

    path: str
    module_path: str

    @property
    def v1_path(self) -> str:
        return _v1_path(self.path, self.module_path)
