"""Publish orchestrator.

Drives one publish build: flatten the snapshotted spaces, render and store
every page as a deduplicated content blob (concurrently), write the
manifest, tree and theme under the build id, then flip the pointers.
Progress counters are persisted as pages complete.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from docpub.clock import now_ms
from docpub.models import Build, BuildProgress, Site
from docpub.state import Repository
from docpub.storage import ContentBlobStore

from .build_runner import BuildRunner
from .bundles import PageBundler
from .content_source import ContentSource
from .flattener import TreeFlattener
from .manifest_builder import ManifestBuilder
from .models import BuildArtifacts, FlatPage, PageRef
from .pointers import PointerPublisher, pointer_for

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


class BuildOrchestrator(BuildRunner):
    """Run publish builds.

    Example:
        >>> orchestrator = BuildOrchestrator(repo, RepositoryContentSource(repo), blob_store)
        >>> build = orchestrator.run(build_id)
        >>> build.status
        <BuildStatus.SUCCESS: 'success'>
    """

    def __init__(
        self,
        repository: Repository,
        content_source: ContentSource,
        blob_store: ContentBlobStore,
        bundler: Optional[PageBundler] = None,
        flattener: Optional[TreeFlattener] = None,
        manifest_builder: Optional[ManifestBuilder] = None,
        pointer_publisher: Optional[PointerPublisher] = None,
        max_workers: int = MAX_WORKERS,
    ):
        super().__init__(repository)
        self.content_source = content_source
        self.blob_store = blob_store
        self.bundler = bundler or PageBundler(content_source)
        self.flattener = flattener or TreeFlattener()
        self.manifest_builder = manifest_builder or ManifestBuilder()
        self.pointer_publisher = pointer_publisher or PointerPublisher(blob_store)
        self.max_workers = max(1, max_workers)

    def execute(self, build: Build, site: Site) -> None:
        spaces = self.content_source.list_pages(list(build.selected_space_ids_snapshot))
        flattened = self.flattener.flatten(spaces)
        pages = flattened.flat_pages
        self.repository.update_build(build.build_id, items_total=len(pages))
        logger.info(f"Build {build.build_id}: {len(pages)} page(s) in {len(spaces)} space(s)")

        page_refs = self.write_pages(build, site, pages)

        artifacts = self.manifest_builder.build(
            flattened, page_refs, site, build.build_id, now_ms()
        )
        self.write_artifacts(site, build.build_id, artifacts)

        pointer = pointer_for(self.blob_store, site, build.build_id, with_theme=artifacts.theme is not None)
        report = self.pointer_publisher.flip(site, pointer)
        if not report.ok:
            logger.warning(
                f"Build {build.build_id} is live but {len(report.failed)} host pointer(s) failed: "
                f"{', '.join(sorted(report.failed))}"
            )

    def write_pages(self, build: Build, site: Site, pages: List[FlatPage]) -> Dict[str, PageRef]:
        """Render and store every page, returning blob references by page id.

        Raises:
            Exception: The first page failure that is not locally recoverable
        """
        refs: Dict[str, PageRef] = {}
        progress = BuildProgress()
        lock = threading.Lock()

        if not pages:
            return refs

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pages))) as executor:
            futures = {
                executor.submit(self._write_page, site.owner_id, page): page
                for page in pages
            }
            try:
                for future in as_completed(futures):
                    page = futures[future]
                    ref = future.result()
                    with lock:
                        refs[page.id] = ref
                        progress.items_done += 1
                        if ref.is_new:
                            progress.pages_written += 1
                            progress.bytes_written += ref.size
                        snapshot = BuildProgress(
                            progress.items_done, progress.pages_written, progress.bytes_written
                        )
                    self.repository.record_progress(build.build_id, snapshot)
                    logger.debug(
                        f"Page {snapshot.items_done}/{len(pages)} {page.route} "
                        f"({'new' if ref.is_new else 'reused'} blob {ref.hash[:12]})"
                    )
            except Exception:
                for pending in futures:
                    pending.cancel()
                raise

        logger.info(
            f"Build {build.build_id}: {progress.pages_written} new blob(s), "
            f"{len(pages) - progress.pages_written} reused"
        )
        return refs

    def _write_page(self, tenant_id: str, page: FlatPage) -> PageRef:
        bundle = self.bundler.bundle(page)
        result = self.blob_store.put_json(tenant_id, bundle)
        return PageRef(hash=result.hash, key=result.key, size=result.size, is_new=result.is_new)

    def write_artifacts(self, site: Site, build_id: str, artifacts: BuildArtifacts) -> None:
        """Write theme, manifest and tree under the build id (write-once)."""
        if artifacts.theme is not None:
            self.blob_store.write_versioned(site.id, build_id, "theme", artifacts.theme)
        self.blob_store.write_versioned(site.id, build_id, "manifest", artifacts.manifest)
        self.blob_store.write_versioned(site.id, build_id, "tree", artifacts.tree)
