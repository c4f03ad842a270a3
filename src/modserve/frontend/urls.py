"""URL helpers for module pages."""

from __future__ import annotations

from typing import Tuple

from ..constants import Constants


def parse_request_path(url_path: str) -> Tuple[str, str]:
    """Split a URL path into (full_path, version).

    Accepts ``path``, ``path@version`` and ``module@version/sub/pkg``.
    A missing version means "latest".
    """
    path = url_path.strip("/")
    if "@" not in path:
        return path, Constants.LATEST_VERSION
    module, rest = path.split("@", 1)
    version, _, suffix = rest.partition("/")
    full_path = f"{module}/{suffix}" if suffix else module
    return full_path, version


def unit_url(module_path: str) -> str:
    """URL of the latest version of a module's page."""
    return f"/{module_path}"
