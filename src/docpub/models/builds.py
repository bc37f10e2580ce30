"""Build data models.

A build records one publish or revert operation and moves through
queued -> running -> success | failed. Terminal states are final.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class BuildStatus(str, Enum):
    """Lifecycle states of a build."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is allowed."""
        return self in (BuildStatus.SUCCESS, BuildStatus.FAILED)

    @property
    def is_active(self) -> bool:
        """Check if the build occupies the site's single build slot."""
        return self in (BuildStatus.QUEUED, BuildStatus.RUNNING)


class BuildOperation(str, Enum):
    """What a build does."""

    PUBLISH = "publish"
    REVERT = "revert"


# Allowed status transitions
BUILD_TRANSITIONS = {
    BuildStatus.QUEUED: {BuildStatus.RUNNING, BuildStatus.FAILED},
    BuildStatus.RUNNING: {BuildStatus.SUCCESS, BuildStatus.FAILED},
    BuildStatus.SUCCESS: set(),
    BuildStatus.FAILED: set(),
}


@dataclass
class Build:
    """An immutable-once-finished record of one publish or revert.

    Attributes:
        site_id: Site being published
        build_id: Sortable, collision-resistant build identifier
        owner_id: Tenant the build's content blobs belong to
        operation: publish or revert
        status: Current lifecycle state
        actor_id: Actor who requested the build
        selected_space_ids_snapshot: Space selection captured at request time
        items_total: Number of pages to process
        items_done: Number of pages processed so far
        pages_written: Number of new content blobs uploaded
        bytes_written: Bytes uploaded for new content blobs
        target_build_id: Build being aliased (revert only)
        error: Failure message (failed builds only)
    """
    site_id: str
    build_id: str
    owner_id: str
    operation: BuildOperation
    status: BuildStatus
    actor_id: str
    selected_space_ids_snapshot: Tuple[str, ...] = ()
    items_total: int = 0
    items_done: int = 0
    pages_written: int = 0
    bytes_written: int = 0
    target_build_id: Optional[str] = None
    error: Optional[str] = None
    created_at: str = ""
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


@dataclass
class BuildProgress:
    """Progress counters persisted while a build is running."""
    items_done: int = 0
    pages_written: int = 0
    bytes_written: int = 0
