"""Revert operator.

Makes a prior successful publish live again under a new build id. The
target's manifest, tree and theme are copied verbatim apart from the
build id, publish time and alias marker, so content is neither re-rendered
nor re-hashed and the pages map matches the target exactly.
"""

import logging
from typing import Optional

from docpub.clock import now_ms
from docpub.errors import InvalidRevertTargetError
from docpub.models import Build, BuildOperation, BuildProgress, BuildStatus, Site
from docpub.state import Repository
from docpub.storage import ContentBlobStore, ObjectNotFoundError

from .build_runner import BuildRunner
from .models import BuildArtifacts
from .pointers import PointerPublisher, pointer_for

logger = logging.getLogger(__name__)


def validate_revert_target(repository: Repository, site_id: str, target_build_id: Optional[str]) -> Build:
    """Check that a build can be reverted to.

    Raises:
        InvalidRevertTargetError: If the target is missing, belongs to another
            site, did not succeed or is itself a revert
    """
    if not target_build_id:
        raise InvalidRevertTargetError("", "no target build given")
    target = repository.find_build(site_id, target_build_id)
    if target is None:
        raise InvalidRevertTargetError(target_build_id, f"no such build for site {site_id}")
    if target.status != BuildStatus.SUCCESS:
        raise InvalidRevertTargetError(target_build_id, f"build is {target.status.value}")
    if target.operation != BuildOperation.PUBLISH:
        raise InvalidRevertTargetError(target_build_id, "only publish builds can be reverted to")
    return target


class RevertOperator(BuildRunner):
    """Run revert builds."""

    def __init__(
        self,
        repository: Repository,
        blob_store: ContentBlobStore,
        pointer_publisher: Optional[PointerPublisher] = None,
    ):
        super().__init__(repository)
        self.blob_store = blob_store
        self.pointer_publisher = pointer_publisher or PointerPublisher(blob_store)

    def execute(self, build: Build, site: Site) -> None:
        target = validate_revert_target(self.repository, site.id, build.target_build_id)
        artifacts = self.load_target(site, target.build_id)

        published_at = now_ms()
        artifacts.manifest.update(
            buildId=build.build_id,
            publishedAt=published_at,
            aliasedFromBuildId=target.build_id,
        )
        artifacts.tree.update(buildId=build.build_id, publishedAt=published_at)

        pages = artifacts.manifest.get('pages') or {}
        self.repository.update_build(build.build_id, items_total=len(pages))

        if artifacts.theme is not None:
            self.blob_store.write_versioned(site.id, build.build_id, "theme", artifacts.theme)
        self.blob_store.write_versioned(site.id, build.build_id, "manifest", artifacts.manifest)
        self.blob_store.write_versioned(site.id, build.build_id, "tree", artifacts.tree)
        # Every page reuses the target's blob, so none count as written
        self.repository.record_progress(build.build_id, BuildProgress(items_done=len(pages)))

        self._touch_blobs(site, pages)

        pointer = pointer_for(self.blob_store, site, build.build_id, with_theme=artifacts.theme is not None)
        self.pointer_publisher.flip(site, pointer)
        logger.info(f"Build {build.build_id} aliases build {target.build_id} ({len(pages)} page(s))")

    def load_target(self, site: Site, target_build_id: str) -> BuildArtifacts:
        """Read the target build's artifacts.

        Raises:
            InvalidRevertTargetError: If the manifest or tree is missing
        """
        try:
            manifest = self.blob_store.read_versioned(site.id, target_build_id, "manifest")
            tree = self.blob_store.read_versioned(site.id, target_build_id, "tree")
        except ObjectNotFoundError as e:
            raise InvalidRevertTargetError(target_build_id, f"artifact missing ({e.key})")
        try:
            theme = self.blob_store.read_versioned(site.id, target_build_id, "theme")
        except ObjectNotFoundError:
            theme = None
        return BuildArtifacts(manifest=manifest, tree=tree, theme=theme)

    def _touch_blobs(self, site: Site, pages: dict) -> None:
        try:
            touched = self.blob_store.touch(site.owner_id, (entry['hash'] for entry in pages.values()))
            logger.debug(f"Touched {touched} content blob(s) referenced by the revert")
        except Exception as e:
            logger.warning(f"Could not touch content blobs for site {site.id}: {e}")
