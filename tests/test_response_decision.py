"""Tests for mapping resolutions to presentation directives."""

import pytest

from modserve.constants import Constants
from modserve.errors import InvalidArgument, InvalidVersion, NotFound, StoreUnavailable
from modserve.frontend.decision import (
    INTERNAL,
    INVALID_VERSION,
    NOT_FOUND,
    NOT_FOUND_WITHOUT_FETCH,
    UPSTREAM,
    ErrorPage,
    FetchPrompt,
    PassThrough,
    TemporaryRedirect,
    decide,
    decide_error,
    path_not_found,
    status_text,
)
from modserve.resolution import Found, NotFoundFetchable, NotFoundTerminal, Redirect, Upstream
from modserve.store import FetchOutcome
from modserve.versioning import VersionRecord, VersionType


def _upstream(status, response_text="", path="example.com/x", version="v1.0.0"):
    outcome = FetchOutcome(
        module_path=path,
        requested_version=version,
        status=status,
        error="fetch failed" if status >= 400 else "",
        response_text=response_text,
    )
    return Upstream(outcome=outcome, full_path=path, requested_version=version)


class TestDecide:
    """Tests for decide()."""

    def test_redirect(self):
        """Test a redirect carries the origin path as a flash message."""
        directive = decide(Redirect(target_module_path="example.com", from_path="example.com/foo"))
        assert directive == TemporaryRedirect(
            target="/example.com",
            flash_key=Constants.ALTERNATIVE_MODULE_FLASH,
            flash_value="example.com/foo",
        )

    def test_terminal_not_found(self):
        """Test a terminal not-found never offers a fetch."""
        directive = decide(NotFoundTerminal(full_path="example.com/bad", requested_version="v1.0.0"))
        assert directive == ErrorPage(
            status=404,
            message_variant=NOT_FOUND_WITHOUT_FETCH,
            message_data={"status_text": "Not Found"},
        )

    def test_fetchable_with_version(self):
        """Test the fetch prompt names path@version."""
        directive = decide(NotFoundFetchable(normalized_path="unknown.org/x", requested_version="v1.0.0"))
        assert directive == FetchPrompt(normalized_path="unknown.org/x@v1.0.0")

    def test_fetchable_latest(self):
        """Test latest requests prompt for the bare path."""
        directive = decide(NotFoundFetchable(normalized_path="unknown.org/x", requested_version="latest"))
        assert directive == FetchPrompt(normalized_path="unknown.org/x")

    def test_stdlib_not_fetchable(self):
        """Test standard library paths get a plain 404."""
        directive = decide(NotFoundFetchable(normalized_path="net/http", requested_version="latest"))
        assert directive == ErrorPage(
            status=404, message_variant=NOT_FOUND, message_data={"status_text": "Not Found"}
        )

    def test_upstream_shows_recorded_text(self):
        """Test upstream failures show their status and response text."""
        directive = decide(_upstream(502, response_text="proxy said no"))
        assert directive == ErrorPage(
            status=502,
            message_variant=UPSTREAM,
            message_data={"status_text": "Bad Gateway", "message": "proxy said no"},
        )

    def test_upstream_internal_error_offers_fetch(self):
        """Test a recorded 500 lets the user retry."""
        directive = decide(_upstream(500, path="example.com/oops", version="v2.0.0"))
        assert directive == FetchPrompt(normalized_path="example.com/oops@v2.0.0")

    def test_found_passes_through(self):
        """Test a found record goes to normal rendering."""
        record = VersionRecord("example.com/mod", "v1.0.0", VersionType.RELEASE)
        assert decide(Found(record=record)) == PassThrough(record=record)

    def test_unknown_resolution(self):
        """Test anything else is rejected."""
        with pytest.raises(InvalidArgument):
            decide("not a resolution")


class TestPathNotFound:
    """Tests for path_not_found()."""

    def test_invalid_version(self):
        """Test an unsupported version yields a 400 page."""
        directive = path_not_found("example.com/x", "master")
        assert directive == ErrorPage(
            status=400,
            message_variant=INVALID_VERSION,
            message_data={"path": "example.com/x", "version": "master"},
        )

    def test_pure(self):
        """Test repeated calls give equal directives."""
        assert path_not_found("example.com/x", "v1.0.0") == path_not_found("example.com/x", "v1.0.0")


class TestDecideError:
    """Tests for decide_error()."""

    def test_invalid_version(self):
        """Test InvalidVersion maps to the invalid-version page."""
        directive = decide_error(InvalidVersion("v1"), "example.com/x", "v1")
        assert directive.status == 400
        assert directive.message_variant == INVALID_VERSION

    @pytest.mark.parametrize("exc", [InvalidArgument("bad path"), StoreUnavailable("locked")])
    def test_internal(self, exc):
        """Test argument and store failures map to a 500 page."""
        directive = decide_error(exc, "example.com/x", "v1.0.0")
        assert directive == ErrorPage(
            status=500,
            message_variant=INTERNAL,
            message_data={"status_text": "Internal Server Error"},
        )

    @pytest.mark.parametrize("exc", [RuntimeError("boom"), NotFound("missing")])
    def test_unmapped_reraised(self, exc):
        """Test errors without a mapping propagate."""
        with pytest.raises(type(exc)):
            decide_error(exc, "example.com/x", "v1.0.0")


class TestStatusText:
    """Tests for status_text()."""

    @pytest.mark.parametrize("status,expected", [
        (404, "Not Found"),
        (503, "Service Unavailable"),
        (490, "Alternative Module"),
        (491, "Bad Module"),
        (290, "Incomplete Packages"),
    ])
    def test_phrases(self, status, expected):
        """Test standard and site-specific reason phrases."""
        assert status_text(status) == expected
