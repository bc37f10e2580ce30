"""Object storage for the publish pipeline.

This package provides the object-store backends (in-memory, filesystem and
HTTP), the content-addressed blob store layered on top of them, and the
retry and credential helpers used by the HTTP backend.
"""

from .auth import StorageAuthenticator, StorageCredentials
from .blob_store import (
    ContentBlobStore,
    blob_key,
    hash_bytes,
    host_pointer_key,
    serialize_json,
    site_pointer_key,
    versioned_key,
)
from .errors import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageCredentialsError,
    StorageError,
    StorageUnavailableError,
)
from .http_store import HttpObjectStore
from .object_store import (
    IMMUTABLE_MAX_AGE,
    POINTER_MAX_AGE,
    FilesystemObjectStore,
    InMemoryObjectStore,
    ObjectStore,
)

__all__ = [
    'StorageAuthenticator',
    'StorageCredentials',
    'ContentBlobStore',
    'blob_key',
    'hash_bytes',
    'host_pointer_key',
    'serialize_json',
    'site_pointer_key',
    'versioned_key',
    'ObjectExistsError',
    'ObjectNotFoundError',
    'StorageCredentialsError',
    'StorageError',
    'StorageUnavailableError',
    'HttpObjectStore',
    'IMMUTABLE_MAX_AGE',
    'POINTER_MAX_AGE',
    'FilesystemObjectStore',
    'InMemoryObjectStore',
    'ObjectStore',
]
