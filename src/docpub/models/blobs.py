"""Content blob data models."""

from dataclasses import dataclass


@dataclass
class ContentBlob:
    """Index row for a tenant-scoped, hash-addressed immutable object.

    Attributes:
        tenant_id: Owner the blob is deduplicated within
        hash: SHA-256 hex digest of the stored bytes
        key: Storage key of the object
        size: Size of the object in bytes
        ref_count: Number of times the blob was referenced by a build
        last_used_at: ISO 8601 timestamp of the last reference
    """
    tenant_id: str
    hash: str
    key: str
    size: int
    ref_count: int = 1
    last_used_at: str = ""


@dataclass
class BlobPutResult:
    """Result of storing bytes through the content-addressed blob store."""
    hash: str
    key: str
    size: int
    is_new: bool
