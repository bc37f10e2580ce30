"""In-process repository for spaces, documents, sites, builds and blob index rows.

The repository is the single source of record for the publish pipeline.
All reads return copies so callers never share mutable rows, and every
multi-step change runs inside ``transaction()`` which restores the prior
tables if the block raises.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from docpub.errors import BuildInFlightError, ConflictError, NotFoundError
from docpub.models import (
    BUILD_TRANSITIONS,
    Build,
    BuildProgress,
    BuildStatus,
    ContentBlob,
    Document,
    Membership,
    Site,
    Space,
)

logger = logging.getLogger(__name__)


class Repository:
    """Thread-safe tables backing the publish pipeline.

    Example:
        >>> repo = Repository()
        >>> with repo.transaction():
        ...     repo.add_space(space)
        ...     repo.add_document(root_group)
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.spaces: Dict[str, Space] = {}
        self.documents: Dict[str, Document] = {}
        self.contents: Dict[str, Dict[str, Any]] = {}
        self.sites: Dict[str, Site] = {}
        self.builds: Dict[str, Build] = {}
        self.blobs: Dict[Tuple[str, str], ContentBlob] = {}
        self.members: List[Membership] = []

    @contextmanager
    def transaction(self) -> Iterator["Repository"]:
        """Run a block atomically; tables are restored if it raises."""
        with self._lock:
            snapshot = self._snapshot()
            try:
                yield self
            except BaseException:
                self._restore(snapshot)
                raise

    @contextmanager
    def reading(self) -> Iterator["Repository"]:
        """Hold the lock for a consistent read of the raw tables.

        Tables are not copied; callers must not mutate them.
        """
        with self._lock:
            yield self

    def _snapshot(self) -> Dict[str, Any]:
        return {
            'spaces': copy.deepcopy(self.spaces),
            'documents': copy.deepcopy(self.documents),
            'contents': copy.deepcopy(self.contents),
            'sites': copy.deepcopy(self.sites),
            'builds': copy.deepcopy(self.builds),
            'blobs': copy.deepcopy(self.blobs),
            'members': copy.deepcopy(self.members),
        }

    def _restore(self, snapshot: Dict[str, Any]) -> None:
        for name, table in snapshot.items():
            setattr(self, name, table)

    # Spaces

    def add_space(self, space: Space) -> None:
        with self._lock:
            self.spaces[space.id] = copy.deepcopy(space)

    def get_space(self, space_id: str) -> Space:
        """Get a space by id.

        Raises:
            NotFoundError: If the space does not exist
        """
        with self._lock:
            space = self.spaces.get(space_id)
            if space is None:
                raise NotFoundError("Space", space_id)
            return copy.deepcopy(space)

    def find_space_by_slug(self, owner_id: str, slug: str) -> Optional[Space]:
        with self._lock:
            for space in self.spaces.values():
                if space.owner_id == owner_id and space.slug == slug:
                    return copy.deepcopy(space)
            return None

    def get_spaces(self, space_ids: List[str]) -> List[Space]:
        """Get the spaces that exist among ``space_ids``, in the given order."""
        with self._lock:
            return [copy.deepcopy(self.spaces[sid]) for sid in space_ids if sid in self.spaces]

    def delete_space(self, space_id: str) -> None:
        with self._lock:
            self.spaces.pop(space_id, None)

    # Documents

    def add_document(self, document: Document) -> None:
        with self._lock:
            self.documents[document.id] = copy.deepcopy(document)

    def save_document(self, document: Document) -> None:
        with self._lock:
            if document.id not in self.documents:
                raise NotFoundError("Document", document.id)
            self.documents[document.id] = copy.deepcopy(document)

    def get_document(self, document_id: str) -> Document:
        """Get a document by id.

        Raises:
            NotFoundError: If the document does not exist
        """
        with self._lock:
            document = self.documents.get(document_id)
            if document is None:
                raise NotFoundError("Document", document_id)
            return copy.deepcopy(document)

    def list_documents(self, space_id: str) -> List[Document]:
        """All documents of a space, ordered by (rank, slug)."""
        with self._lock:
            docs = [copy.deepcopy(d) for d in self.documents.values() if d.space_id == space_id]
        return sorted(docs, key=lambda d: (d.rank, d.slug))

    def list_children(self, space_id: str, parent_id: Optional[str]) -> List[Document]:
        """Direct children of ``parent_id`` (root level when None), ordered by rank."""
        return [d for d in self.list_documents(space_id) if d.parent_id == parent_id]

    def delete_documents(self, document_ids: List[str]) -> int:
        """Delete many documents and their stored content in one step."""
        with self._lock:
            removed = 0
            for document_id in document_ids:
                if self.documents.pop(document_id, None) is not None:
                    removed += 1
                self.contents.pop(document_id, None)
            return removed

    def set_content(self, document_id: str, structured_doc: Dict[str, Any]) -> None:
        with self._lock:
            self.contents[document_id] = copy.deepcopy(structured_doc)

    def get_content(self, document_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self.contents.get(document_id)
            return copy.deepcopy(value) if value is not None else None

    # Sites

    def add_site(self, site: Site) -> None:
        with self._lock:
            self.sites[site.id] = copy.deepcopy(site)

    def get_site(self, site_id: str) -> Site:
        """Get a site by id.

        Raises:
            NotFoundError: If the site does not exist
        """
        with self._lock:
            site = self.sites.get(site_id)
            if site is None:
                raise NotFoundError("Site", site_id)
            return copy.deepcopy(site)

    def find_site_by_slug(self, owner_id: str, slug: str) -> Optional[Site]:
        with self._lock:
            for site in self.sites.values():
                if site.owner_id == owner_id and site.slug == slug:
                    return copy.deepcopy(site)
            return None

    def find_site_by_host(self, host: str) -> Optional[Site]:
        """Site bound to ``host`` as primary or custom domain."""
        with self._lock:
            for site in self.sites.values():
                if host in site.hosts:
                    return copy.deepcopy(site)
            return None

    def update_site(self, site_id: str, **changes: Any) -> Site:
        with self._lock:
            site = self.get_site(site_id)
            updated = replace(site, **changes)
            self.sites[site_id] = updated
            return copy.deepcopy(updated)

    # Members

    def add_member(self, membership: Membership) -> None:
        with self._lock:
            self.members = [
                m for m in self.members
                if not (m.owner_id == membership.owner_id and m.actor_id == membership.actor_id)
            ]
            self.members.append(copy.deepcopy(membership))

    def get_role(self, owner_id: str, actor_id: str) -> Optional[str]:
        with self._lock:
            for membership in self.members:
                if membership.owner_id == owner_id and membership.actor_id == actor_id:
                    return membership.role
            return None

    # Builds

    def add_build_if_idle(self, build: Build) -> Build:
        """Insert a build unless the site already has one queued or running.

        Raises:
            BuildInFlightError: If another build for the site is active
        """
        with self._lock:
            active = self.find_active_build(build.site_id)
            if active is not None:
                raise BuildInFlightError(build.site_id, active.build_id)
            if build.build_id in self.builds:
                raise ConflictError(f"Build {build.build_id} already exists")
            self.builds[build.build_id] = copy.deepcopy(build)
            return copy.deepcopy(build)

    def get_build(self, build_id: str) -> Build:
        """Get a build by id.

        Raises:
            NotFoundError: If the build does not exist
        """
        with self._lock:
            build = self.builds.get(build_id)
            if build is None:
                raise NotFoundError("Build", build_id)
            return copy.deepcopy(build)

    def find_build(self, site_id: str, build_id: str) -> Optional[Build]:
        with self._lock:
            build = self.builds.get(build_id)
            if build is None or build.site_id != site_id:
                return None
            return copy.deepcopy(build)

    def list_builds(self, site_id: str) -> List[Build]:
        """Builds of a site, newest first."""
        with self._lock:
            builds = [copy.deepcopy(b) for b in self.builds.values() if b.site_id == site_id]
        return sorted(builds, key=lambda b: b.build_id, reverse=True)

    def find_active_build(self, site_id: str) -> Optional[Build]:
        with self._lock:
            for build in self.builds.values():
                if build.site_id == site_id and build.status.is_active:
                    return copy.deepcopy(build)
            return None

    def update_build(self, build_id: str, **changes: Any) -> Build:
        """Apply field changes to a build, validating any status transition.

        Raises:
            NotFoundError: If the build does not exist
            ConflictError: If the status transition is not allowed
        """
        with self._lock:
            build = self.get_build(build_id)
            new_status = changes.get('status')
            if new_status is not None and new_status != build.status:
                if new_status not in BUILD_TRANSITIONS[build.status]:
                    raise ConflictError(
                        f"Build {build_id} cannot move from {build.status.value} "
                        f"to {BuildStatus(new_status).value}"
                    )
            if 'selected_space_ids_snapshot' in changes:
                raise ConflictError(f"Build {build_id} space snapshot is immutable")
            updated = replace(build, **changes)
            self.builds[build_id] = updated
            return copy.deepcopy(updated)

    def record_progress(self, build_id: str, progress: BuildProgress) -> Build:
        """Persist progress counters; counters never move backwards."""
        with self._lock:
            build = self.get_build(build_id)
            updated = replace(
                build,
                items_done=max(build.items_done, progress.items_done),
                pages_written=max(build.pages_written, progress.pages_written),
                bytes_written=max(build.bytes_written, progress.bytes_written),
            )
            self.builds[build_id] = updated
            return copy.deepcopy(updated)

    # Content blob index

    def get_blob(self, tenant_id: str, blob_hash: str) -> Optional[ContentBlob]:
        with self._lock:
            blob = self.blobs.get((tenant_id, blob_hash))
            return copy.deepcopy(blob) if blob is not None else None

    def upsert_blob(
        self,
        tenant_id: str,
        blob_hash: str,
        key: str,
        size: int,
        used_at: str,
    ) -> Tuple[ContentBlob, bool]:
        """Insert an index row, or increment the existing one.

        Returns:
            Tuple of (blob row, created) where created is True for a new row
        """
        with self._lock:
            existing = self.blobs.get((tenant_id, blob_hash))
            if existing is not None:
                existing.ref_count += 1
                existing.last_used_at = used_at
                return copy.deepcopy(existing), False
            blob = ContentBlob(
                tenant_id=tenant_id,
                hash=blob_hash,
                key=key,
                size=size,
                ref_count=1,
                last_used_at=used_at,
            )
            self.blobs[(tenant_id, blob_hash)] = blob
            return copy.deepcopy(blob), True

    def touch_blob(self, tenant_id: str, blob_hash: str, used_at: str) -> bool:
        """Increment an existing row's reference count; False if absent."""
        with self._lock:
            existing = self.blobs.get((tenant_id, blob_hash))
            if existing is None:
                return False
            existing.ref_count += 1
            existing.last_used_at = used_at
            return True
