"""Typed exception hierarchy for object-storage errors.

Storage failures are upstream failures from the pipeline's point of view;
a missing object is additionally a NotFoundError so callers can treat it
like any other missing record.
"""

from typing import Optional

from docpub.errors import NotFoundError, UpstreamFailureError


class StorageError(UpstreamFailureError):
    """Base exception for object-storage failures."""

    def __init__(self, operation: str, key: str, reason: Optional[str] = None):
        super().__init__(f"{operation} {key}", reason)
        self.key = key


class ObjectExistsError(StorageError):
    """Raised when an immutable write targets a key that already exists."""

    def __init__(self, key: str):
        super().__init__("put", key, "object already exists")


class ObjectNotFoundError(NotFoundError):
    """Raised when a requested object does not exist."""

    def __init__(self, key: str):
        super().__init__("Object", key)
        self.key = key


class StorageUnavailableError(StorageError):
    """Raised when the storage backend cannot be reached."""

    def __init__(self, endpoint: str, reason: Optional[str] = None):
        super().__init__("connect", endpoint, reason or "storage backend unreachable")
        self.endpoint = endpoint


class StorageCredentialsError(UpstreamFailureError):
    """Raised when storage credentials are missing or rejected."""

    def __init__(self, missing: str):
        super().__init__("authenticate", f"missing or invalid {missing}")
        self.missing = missing
