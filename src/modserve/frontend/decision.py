"""Map resolutions to directives for the presentation layer.

Everything here is pure: the same input always yields the same directive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Union

from ..constants import Constants, FetchStatus
from ..errors import InvalidArgument, InvalidVersion, StoreUnavailable
from ..paths import is_stdlib_path
from ..resolution import (
    Found,
    NotFoundFetchable,
    NotFoundTerminal,
    Redirect,
    Resolution,
    Upstream,
)
from ..versioning import VersionRecord, is_supported_version
from .urls import unit_url

NOT_FOUND = "not-found"
NOT_FOUND_WITHOUT_FETCH = "not-found-without-fetch"
INVALID_VERSION = "invalid-version"
UPSTREAM = "upstream"
INTERNAL = "internal"


@dataclass(frozen=True)
class TemporaryRedirect:
    target: str
    flash_key: str
    flash_value: str


@dataclass(frozen=True)
class ErrorPage:
    status: int
    message_variant: str
    message_data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchPrompt:
    normalized_path: str


@dataclass(frozen=True)
class PassThrough:
    record: VersionRecord


Directive = Union[TemporaryRedirect, ErrorPage, FetchPrompt, PassThrough]


def status_text(status: int) -> str:
    """Reason phrase for a status, including the site-specific codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return {
            FetchStatus.HAS_INCOMPLETE_PACKAGES: "Incomplete Packages",
            FetchStatus.ALTERNATIVE_MODULE: "Alternative Module",
            FetchStatus.BAD_MODULE: "Bad Module",
        }.get(status, "Unknown Status")


def _invalid_version_page(full_path: str, version: str) -> ErrorPage:
    return ErrorPage(
        status=HTTPStatus.BAD_REQUEST,
        message_variant=INVALID_VERSION,
        message_data={"path": full_path, "version": version},
    )


def path_not_found(full_path: str, requested_version: str) -> Directive:
    """404 for a path nothing definitive is known about."""
    if not is_supported_version(requested_version):
        return _invalid_version_page(full_path, requested_version)
    if is_stdlib_path(full_path):
        return ErrorPage(
            status=HTTPStatus.NOT_FOUND,
            message_variant=NOT_FOUND,
            message_data={"status_text": status_text(HTTPStatus.NOT_FOUND)},
        )
    path = full_path
    if requested_version != Constants.LATEST_VERSION:
        path = f"{full_path}@{requested_version}"
    return FetchPrompt(normalized_path=path)


def decide(resolution: Resolution) -> Directive:
    """Turn a Resolution into a directive for the HTML layer."""
    if isinstance(resolution, Redirect):
        return TemporaryRedirect(
            target=unit_url(resolution.target_module_path),
            flash_key=Constants.ALTERNATIVE_MODULE_FLASH,
            flash_value=resolution.from_path,
        )
    if isinstance(resolution, NotFoundTerminal):
        return ErrorPage(
            status=HTTPStatus.NOT_FOUND,
            message_variant=NOT_FOUND_WITHOUT_FETCH,
            message_data={"status_text": status_text(HTTPStatus.NOT_FOUND)},
        )
    if isinstance(resolution, NotFoundFetchable):
        return path_not_found(resolution.normalized_path, resolution.requested_version)
    if isinstance(resolution, Upstream):
        outcome = resolution.outcome
        if outcome.status == FetchStatus.INTERNAL_ERROR:
            # Our own failure last time; let the user try again.
            return path_not_found(resolution.full_path, resolution.requested_version)
        return ErrorPage(
            status=outcome.status,
            message_variant=UPSTREAM,
            message_data={
                "status_text": status_text(outcome.status),
                "message": outcome.response_text,
            },
        )
    if isinstance(resolution, Found):
        return PassThrough(record=resolution.record)
    raise InvalidArgument(f"unknown resolution {resolution!r}")


def decide_error(exc: Exception, full_path: str, requested_version: str) -> Directive:
    """Map a resolution failure to a directive.

    Raises:
        The original exception if it is not a modserve error with a mapping.
    """
    if isinstance(exc, InvalidVersion):
        return _invalid_version_page(full_path, requested_version)
    if isinstance(exc, (InvalidArgument, StoreUnavailable)):
        return ErrorPage(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message_variant=INTERNAL,
            message_data={"status_text": status_text(HTTPStatus.INTERNAL_SERVER_ERROR)},
        )
    raise exc
