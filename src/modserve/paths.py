"""Module path utilities and candidate module path generation.

A package import path such as ``example.com/mod/sub/pkg`` may belong to any
module whose path is a prefix of it. The candidate list is probed against
the store in order, most specific first.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from .constants import Constants
from .errors import InvalidArgument

_MAJOR_ELEM_RE = re.compile(r"^v([2-9]|[1-9][0-9]+)$")
_GOPKG_SUFFIX_RE = re.compile(r"\.v(0|[1-9][0-9]*)(-unstable)?$")
_GOPKG_PREFIX = "gopkg.in/"


def check_path(path: str) -> None:
    """Validate the structure of an import path.

    Raises:
        InvalidArgument: if the path is empty or malformed.
    """
    if not path:
        raise InvalidArgument("path must be non-empty")
    if path.startswith("/") or path.endswith("/"):
        raise InvalidArgument(f"path {path!r} has a leading or trailing slash")
    if any(ch.isspace() for ch in path):
        raise InvalidArgument(f"path {path!r} contains whitespace")
    for elem in path.split("/"):
        if elem in ("", ".", ".."):
            raise InvalidArgument(f"path {path!r} has an invalid element {elem!r}")


def is_stdlib_path(path: str) -> bool:
    """Report whether path looks like a standard library package.

    Standard library paths have no dot in their first element.
    """
    return "." not in path.split("/", 1)[0]


def _major_suffix(module_path: str) -> Optional[int]:
    """Return N for a trailing major-version element, if any."""
    if module_path.startswith(_GOPKG_PREFIX):
        m = _GOPKG_SUFFIX_RE.search(module_path)
        return int(m.group(1)) if m else None
    last = module_path.rsplit("/", 1)[-1]
    m = _MAJOR_ELEM_RE.match(last)
    return int(m.group(1)) if m else None


def major_of(module_path: str) -> int:
    """Major version implied by a module path (1 when unsuffixed)."""
    major = _major_suffix(module_path)
    return major if major else 1


def series_path(module_path: str) -> str:
    """Return the module path with any major-version suffix removed.

    All major versions of a module share a series path:
    ``example.com/mod``, ``example.com/mod/v2`` and ``example.com/mod/v3``
    are in the series ``example.com/mod``.
    """
    if module_path.startswith(_GOPKG_PREFIX):
        return _GOPKG_SUFFIX_RE.sub("", module_path)
    if _major_suffix(module_path):
        return module_path.rsplit("/", 1)[0]
    return module_path


def v1_path(path: str, module_path: str) -> str:
    """Return the path that `path` would have at major version 1."""
    if path != module_path and not path.startswith(module_path + "/"):
        raise InvalidArgument(f"{path!r} is not inside module {module_path!r}")
    return series_path(module_path) + path[len(module_path):]


def _has_major_element(path: str) -> bool:
    return any(_MAJOR_ELEM_RE.match(elem) for elem in path.split("/")[1:])


def _requested_major(version: Optional[str]) -> int:
    if not version or version == Constants.LATEST_VERSION:
        return 1
    m = re.match(r"^v(\d+)\.", version)
    return int(m.group(1)) if m else 1


def candidate_module_paths(full_path: str, version: Optional[str] = None) -> Tuple[str, ...]:
    """Return the module paths that could contain full_path, most specific first.

    Every prefix of full_path is a candidate, down to its first element.
    When a concrete version with major N >= 2 is given and the path does not
    name a major version itself, each prefix P is followed by ``P/vN``: the
    path the module would have after crossing that major-version boundary.

    Args:
        full_path: Import path of a package or module.
        version: Optional requested version.

    Returns:
        Tuple of candidate module paths; never empty.

    Raises:
        InvalidArgument: if full_path is malformed.
    """
    check_path(full_path)
    major = _requested_major(version)
    with_variants = (
        major >= 2
        and not full_path.startswith(_GOPKG_PREFIX)
        and not _has_major_element(full_path)
    )

    elems = full_path.split("/")
    candidates = []
    for i in range(len(elems), 0, -1):
        prefix = "/".join(elems[:i])
        candidates.append(prefix)
        if with_variants:
            candidates.append(f"{prefix}/v{major}")
    return tuple(candidates)
