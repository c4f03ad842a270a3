"""Version classification and ordering.

Versions use the Go module convention: a semantic version with a leading
"v" (``v1.2.3``, ``v1.2.3-rc.1``). Pseudo-versions are prereleases that
encode a commit timestamp and revision, e.g.
``v0.0.0-20190101123456-abcdef123456``.

Ordering is by type first (release > prerelease > pseudo) and then by
semantic-version precedence, so a pseudo-version never outranks a tagged
prerelease, whatever its numbers say.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Tuple, Union

import semantic_version

from ..constants import Constants
from ..errors import InvalidVersion
from .models import Latest, VersionRecord, VersionType


_PSEUDO_RE = re.compile(
    r"^v[0-9]+\.(0\.0-|\d+\.\d+-([^+]*\.)?0\.)\d{14}-[A-Za-z0-9]+(\+[0-9A-Za-z-]+)?$"
)


def _parse(version: str) -> semantic_version.Version:
    """Parse a v-prefixed version, dropping build metadata."""
    if not isinstance(version, str) or not version.startswith("v"):
        raise InvalidVersion(version)
    try:
        parsed = semantic_version.Version(version[1:])
    except ValueError as exc:
        raise InvalidVersion(version) from exc
    # Build metadata ("+incompatible") does not take part in precedence.
    return semantic_version.Version(
        major=parsed.major,
        minor=parsed.minor,
        patch=parsed.patch,
        prerelease=parsed.prerelease,
    )


def classify(version: str) -> Union[VersionType, Latest]:
    """Classify a version string.

    Args:
        version: Version string, or the "latest" sentinel.

    Returns:
        The VersionType, or Latest.LATEST for the sentinel.

    Raises:
        InvalidVersion: if the string is not a semantic version.
    """
    if version == Constants.LATEST_VERSION:
        return Latest.LATEST
    parsed = _parse(version)
    if _PSEUDO_RE.match(version):
        return VersionType.PSEUDO
    if parsed.prerelease:
        return VersionType.PRERELEASE
    return VersionType.RELEASE


def is_supported_version(version: str) -> bool:
    """Return True for "latest" or any well-formed version; never raises."""
    try:
        classify(version)
    except InvalidVersion:
        return False
    return True


def _key(version: str) -> Tuple[int, semantic_version.Version]:
    vtype = classify(version)
    if vtype is Latest.LATEST:
        raise InvalidVersion(version, "the latest sentinel has no precedence")
    return vtype.rank, _parse(version)


def compare(v1: str, v2: str) -> int:
    """Compare two versions, returning -1, 0 or 1."""
    k1, k2 = _key(v1), _key(v2)
    if k1 < k2:
        return -1
    if k1 > k2:
        return 1
    return 0


def _encode_number(digits: str) -> str:
    # Length prefix makes lexicographic order match numeric order.
    return chr(ord("a") + len(digits) - 1) + digits


def for_sorting(version: str) -> str:
    """Return a string whose lexicographic order matches compare().

    Suitable for an indexed ``sort_version`` column.
    """
    rank, parsed = _key(version)
    core = ".".join(_encode_number(str(n)) for n in (parsed.major, parsed.minor, parsed.patch))
    if not parsed.prerelease:
        return f"{rank}{core}~"
    idents = []
    for ident in parsed.prerelease:
        if ident.isdigit():
            idents.append("#" + _encode_number(ident))
        else:
            idents.append(ident)
    return f"{rank}{core}-" + ",".join(idents)


def latest_of(records: Iterable[VersionRecord]) -> Optional[VersionRecord]:
    """Pick the highest release, else prerelease, else pseudo-version."""
    best = None
    for record in records:
        if best is None or record.sort_key > best.sort_key:
            best = record
    return best
