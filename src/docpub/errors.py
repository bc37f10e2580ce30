"""Typed exception hierarchy for the publish pipeline.

This module defines the error kinds shared by every docpub subpackage.
All exceptions inherit from PublishError so callers can catch any
application-level failure in one place, and each carries the context
needed to build a descriptive message.
"""

from typing import Iterable, Optional


class PublishError(Exception):
    """Base exception for all docpub errors."""
    pass


class NotFoundError(PublishError):
    """Raised when a site, build, space or document does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(PublishError):
    """Raised when an actor lacks the role required for an operation."""

    def __init__(self, actor_id: str, required_roles: Iterable[str]):
        roles = sorted(required_roles)
        super().__init__(
            f"Actor {actor_id} lacks required role (one of: {', '.join(roles)})"
        )
        self.actor_id = actor_id
        self.required_roles = roles


class ConflictError(PublishError):
    """Raised when an operation conflicts with existing state."""

    def __init__(self, message: str):
        super().__init__(message)


class BuildInFlightError(ConflictError):
    """Raised when a publish is requested while another build is active."""

    def __init__(self, site_id: str, build_id: str):
        super().__init__(
            f"Site {site_id} already has build {build_id} queued or running"
        )
        self.site_id = site_id
        self.build_id = build_id


class DuplicateSlugError(ConflictError):
    """Raised when a slug is already used by a sibling."""

    def __init__(self, slug: str, parent_id: Optional[str] = None):
        if parent_id:
            message = f"Slug '{slug}' already exists under parent {parent_id}"
        else:
            message = f"Slug '{slug}' already exists at root level"
        super().__init__(message)
        self.slug = slug
        self.parent_id = parent_id


class InvalidRevertTargetError(ConflictError):
    """Raised when a revert targets a build that cannot be aliased."""

    def __init__(self, build_id: str, reason: str):
        super().__init__(f"Cannot revert to build {build_id}: {reason}")
        self.build_id = build_id
        self.reason = reason


class ValidationFailedError(PublishError):
    """Raised when input fails validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        if field:
            full_message = f"Validation failed for '{field}': {message}"
        else:
            full_message = f"Validation failed: {message}"
        super().__init__(full_message)
        self.field = field
        self.original_message = message


class UpstreamFailureError(PublishError):
    """Raised when a storage or rendering collaborator fails."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Upstream operation '{operation}' failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.operation = operation
        self.reason = reason
