"""Build lifecycle state machine shared by publish and revert.

A runner takes a queued build, moves it to running, executes the
operation and finishes it as success or failed. Errors raised while the
build is running are recorded on the build and never propagate: the
runner is invoked detached from the request that queued the build.
"""

import logging
from abc import ABC, abstractmethod

from docpub.clock import utc_now_iso
from docpub.models import Build, BuildStatus, Site
from docpub.state import Repository

logger = logging.getLogger(__name__)


class BuildRunner(ABC):
    """Template for running one build to a terminal state."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def run(self, build_id: str) -> Build:
        """Run a queued build; builds in any other state are returned as is.

        Returns:
            The build in its final state
        """
        build = self.repository.get_build(build_id)
        if build.status != BuildStatus.QUEUED:
            logger.info(f"Build {build_id} is {build.status.value}; nothing to run")
            return build

        build = self.repository.update_build(
            build_id, status=BuildStatus.RUNNING, started_at=utc_now_iso()
        )
        logger.info(f"Build {build_id} running ({build.operation.value} for site {build.site_id})")

        try:
            site = self.repository.get_site(build.site_id)
            self.execute(build, site)
        except Exception as e:
            logger.exception(f"Build {build_id} failed: {e}")
            return self.repository.update_build(
                build_id,
                status=BuildStatus.FAILED,
                error=str(e) or type(e).__name__,
                finished_at=utc_now_iso(),
            )

        finished_at = utc_now_iso()
        build = self.repository.update_build(
            build_id, status=BuildStatus.SUCCESS, finished_at=finished_at
        )
        try:
            self.repository.update_site(
                build.site_id, last_build_id=build_id, last_published_at=finished_at
            )
        except Exception as e:
            logger.exception(f"Build {build_id} succeeded but site {build.site_id} was not updated: {e}")
        logger.info(f"Build {build_id} succeeded")
        return build

    @abstractmethod
    def execute(self, build: Build, site: Site) -> None:
        """Do the build's work; raise to fail the build.

        Implementations must flip pointers only after every artifact the
        pointer references is written.
        """
