"""Resolution of requested paths and versions to outcomes."""

from .models import (
    ExperimentSet,
    Found,
    NotFoundFetchable,
    NotFoundTerminal,
    Redirect,
    RequestContext,
    Resolution,
    Upstream,
)
from .engine import ResolutionEngine, merge_outcomes

__all__ = [
    "ExperimentSet",
    "Found",
    "NotFoundFetchable",
    "NotFoundTerminal",
    "Redirect",
    "RequestContext",
    "Resolution",
    "ResolutionEngine",
    "Upstream",
    "merge_outcomes",
]
