"""Content-addressed blob store.

Bytes are stored once per tenant under a key derived from their SHA-256
digest. A reference-counted index row in the Repository records every
stored blob, so republishing unchanged content costs one hash and one
index lookup instead of an upload.

Build artifacts (manifest, tree, theme) are written under build-id-scoped
paths that refuse overwrites; pointers are the only mutable writes.
"""

import hashlib
import json
import logging
from typing import Any, Iterable

from docpub.clock import utc_now_iso
from docpub.models import BlobPutResult
from docpub.state import Repository

from .errors import ObjectExistsError
from .object_store import POINTER_MAX_AGE, ObjectStore

logger = logging.getLogger(__name__)


def hash_bytes(data: bytes) -> str:
    """SHA-256 hex digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def serialize_json(payload: Any) -> bytes:
    """Serialize a payload to stable JSON bytes.

    Keys keep their insertion order and no whitespace is added, so the same
    payload always yields byte-identical output.
    """
    return json.dumps(payload, ensure_ascii=False, separators=(',', ':')).encode('utf-8')


def blob_key(tenant_id: str, blob_hash: str, ext: str = "json") -> str:
    """Storage key of a tenant's content blob."""
    return f"orgs/{tenant_id}/blobs/{blob_hash}.{ext}"


def versioned_key(site_id: str, build_id: str, name: str) -> str:
    """Storage key of a build artifact (manifest, tree or theme)."""
    return f"sites/{site_id}/{build_id}/{name}.json"


def site_pointer_key(site_id: str) -> str:
    """Storage key of a site's project-wide latest pointer."""
    return f"sites/{site_id}/latest.json"


def host_pointer_key(host: str) -> str:
    """Storage key of a hostname's latest pointer."""
    return f"domains/{host}/latest.json"


class ContentBlobStore:
    """Deduplicating writer on top of an ObjectStore and the blob index.

    The index row for ``(tenant, hash)`` is only inserted after the upload
    succeeds, so an index hit always names an object that exists.

    Example:
        >>> blobs = ContentBlobStore(InMemoryObjectStore(), Repository())
        >>> result = blobs.put("org-1", b'{"title":"Intro"}')
        >>> result.is_new
        True
    """

    def __init__(self, object_store: ObjectStore, repository: Repository):
        self.object_store = object_store
        self.repository = repository

    def put(self, tenant_id: str, data: bytes, ext: str = "json") -> BlobPutResult:
        """Store bytes once per tenant, returning the blob reference.

        Args:
            tenant_id: Owner the blob is deduplicated within
            data: Exact bytes to store
            ext: File extension of the storage key

        Returns:
            BlobPutResult with is_new=False when the index already had the hash

        Raises:
            StorageError: If the upload fails for a reason other than a race
        """
        blob_hash = hash_bytes(data)
        key = blob_key(tenant_id, blob_hash, ext)
        size = len(data)
        now = utc_now_iso()

        if self.repository.touch_blob(tenant_id, blob_hash, now):
            logger.debug(f"Blob {blob_hash[:12]} reused for tenant {tenant_id}")
            return BlobPutResult(hash=blob_hash, key=key, size=size, is_new=False)

        try:
            self.object_store.put_immutable(key, data, content_type=_content_type(ext))
        except ObjectExistsError:
            # Another build uploaded the same bytes first
            logger.debug(f"Blob {blob_hash[:12]} already uploaded by a concurrent writer")

        _, created = self.repository.upsert_blob(tenant_id, blob_hash, key, size, now)
        if created:
            logger.debug(f"Blob {blob_hash[:12]} stored ({size} bytes)")
        return BlobPutResult(hash=blob_hash, key=key, size=size, is_new=created)

    def put_json(self, tenant_id: str, payload: Any) -> BlobPutResult:
        """Serialize a payload and store it as a content blob."""
        return self.put(tenant_id, serialize_json(payload))

    def write_versioned(
        self,
        site_id: str,
        build_id: str,
        name: str,
        payload: Any,
        overwrite: bool = False,
    ) -> str:
        """Write a build artifact under its build-id-scoped key.

        Raises:
            ObjectExistsError: If the artifact already exists and overwrite is False

        Returns:
            The storage key written
        """
        key = versioned_key(site_id, build_id, name)
        data = serialize_json(payload)
        if overwrite:
            self.object_store.put_mutable(key, data)
        else:
            self.object_store.put_immutable(key, data)
        logger.debug(f"Wrote {key} ({len(data)} bytes)")
        return key

    def read_versioned(self, site_id: str, build_id: str, name: str) -> Any:
        """Read and decode a build artifact.

        Raises:
            ObjectNotFoundError: If the artifact does not exist
        """
        return json.loads(self.object_store.get(versioned_key(site_id, build_id, name)))

    def write_pointer(self, key: str, payload: Any) -> None:
        """Overwrite a mutable pointer with a short cache lifetime."""
        self.object_store.put_mutable(key, serialize_json(payload), cache_max_age=POINTER_MAX_AGE)

    def read_json(self, key: str) -> Any:
        """Read and decode any JSON object by key."""
        return json.loads(self.object_store.get(key))

    def touch(self, tenant_id: str, hashes: Iterable[str]) -> int:
        """Refresh index rows of blobs still referenced by a build.

        Best-effort: failures are logged and skipped.

        Returns:
            Number of index rows touched
        """
        now = utc_now_iso()
        touched = 0
        for blob_hash in sorted(set(hashes)):
            try:
                if self.repository.touch_blob(tenant_id, blob_hash, now):
                    touched += 1
            except Exception as e:
                logger.warning(f"Failed to touch blob {blob_hash[:12]}: {e}")
        return touched

    def url_for(self, key: str) -> str:
        return self.object_store.url_for(key)


def _content_type(ext: str) -> str:
    if ext == "json":
        return "application/json"
    if ext in ("yaml", "yml"):
        return "application/yaml"
    return "application/octet-stream"
