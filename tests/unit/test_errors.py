"""Unit tests for docpub.errors module."""

import pytest

from docpub.errors import (
    BuildInFlightError,
    ConflictError,
    DuplicateSlugError,
    ForbiddenError,
    InvalidRevertTargetError,
    NotFoundError,
    PublishError,
    UpstreamFailureError,
    ValidationFailedError,
)


class TestErrorHierarchy:
    """Test cases for the exception hierarchy."""

    @pytest.mark.parametrize("error", [
        NotFoundError("Site", "s1"),
        ForbiddenError("actor-1", ["owner"]),
        ConflictError("boom"),
        BuildInFlightError("s1", "b1"),
        DuplicateSlugError("intro"),
        InvalidRevertTargetError("b1", "build is failed"),
        ValidationFailedError("bad"),
        UpstreamFailureError("put"),
    ])
    def test_all_errors_are_publish_errors(self, error):
        """Every error kind can be caught as PublishError."""
        assert isinstance(error, PublishError)

    def test_conflict_subclasses(self):
        """Single-flight, slug and revert errors are conflicts."""
        assert issubclass(BuildInFlightError, ConflictError)
        assert issubclass(DuplicateSlugError, ConflictError)
        assert issubclass(InvalidRevertTargetError, ConflictError)


class TestErrorMessages:
    """Test cases for error messages and attributes."""

    def test_not_found_message(self):
        """NotFoundError names the entity and id."""
        error = NotFoundError("Build", "0abc")
        assert str(error) == "Build 0abc not found"
        assert error.entity == "Build"
        assert error.entity_id == "0abc"

    def test_forbidden_sorts_roles(self):
        """ForbiddenError lists required roles in sorted order."""
        error = ForbiddenError("member-1", {"owner", "admin"})
        assert error.required_roles == ["admin", "owner"]
        assert "admin, owner" in str(error)

    def test_build_in_flight_carries_ids(self):
        """BuildInFlightError exposes the site and the active build."""
        error = BuildInFlightError("site-1", "build-1")
        assert error.site_id == "site-1"
        assert error.build_id == "build-1"
        assert "build-1" in str(error)

    def test_duplicate_slug_root_and_parent(self):
        """DuplicateSlugError message depends on the parent."""
        assert "root level" in str(DuplicateSlugError("intro"))
        assert "parent p1" in str(DuplicateSlugError("intro", "p1"))

    def test_validation_with_field(self):
        """ValidationFailedError includes the field when given."""
        error = ValidationFailedError("must not be empty", "domain")
        assert str(error) == "Validation failed for 'domain': must not be empty"
        assert error.field == "domain"
        assert error.original_message == "must not be empty"

    def test_validation_without_field(self):
        """ValidationFailedError without a field has a generic prefix."""
        assert str(ValidationFailedError("bad input")) == "Validation failed: bad input"

    def test_upstream_failure_reason(self):
        """UpstreamFailureError appends the reason when present."""
        assert str(UpstreamFailureError("put")) == "Upstream operation 'put' failed"
        error = UpstreamFailureError("put", "timeout")
        assert str(error) == "Upstream operation 'put' failed: timeout"
        assert error.reason == "timeout"
