"""Pointer flip: make a build live for a site and all of its hostnames."""

import logging
from typing import Optional

from docpub.models import Site
from docpub.storage import ContentBlobStore, ObjectNotFoundError, site_pointer_key, versioned_key

from .domain_mirror import DomainPointerMirror
from .models import MirrorReport, Pointer

logger = logging.getLogger(__name__)


def pointer_for(blob_store: ContentBlobStore, site: Site, build_id: str, with_theme: bool = True) -> Pointer:
    """Pointer naming a build's artifact URLs."""
    return Pointer(
        build_id=build_id,
        manifest_url=blob_store.url_for(versioned_key(site.id, build_id, "manifest")),
        tree_url=blob_store.url_for(versioned_key(site.id, build_id, "tree")),
        theme_url=blob_store.url_for(versioned_key(site.id, build_id, "theme")) if with_theme else None,
    )


class PointerPublisher:
    """Flip the project-wide pointer, then mirror it to every host.

    The project-wide write must succeed; host mirroring is best-effort.
    """

    def __init__(self, blob_store: ContentBlobStore, mirror: Optional[DomainPointerMirror] = None):
        self.blob_store = blob_store
        self.mirror = mirror or DomainPointerMirror(blob_store)

    def flip(self, site: Site, pointer: Pointer) -> MirrorReport:
        """Point the site at ``pointer``'s build.

        Raises:
            StorageError: If the project-wide pointer cannot be written
        """
        self.blob_store.write_pointer(site_pointer_key(site.id), pointer.to_dict())
        logger.info(f"Site {site.id} now points at build {pointer.build_id}")
        return self.mirror.mirror(site.hosts, pointer)

    def current(self, site_id: str) -> Optional[Pointer]:
        """The site's live pointer, or None before the first publish."""
        try:
            return Pointer.from_dict(self.blob_store.read_json(site_pointer_key(site_id)))
        except ObjectNotFoundError:
            return None
