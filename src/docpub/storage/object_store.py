"""Object-storage abstraction with immutable and mutable writes.

Three operations are exposed: immutable put (refuses to overwrite), mutable
put (overwrite allowed, short cache lifetime) and get by key. Backends:
an in-memory store for tests and a filesystem store for local publishing.
"""

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from .errors import ObjectExistsError, ObjectNotFoundError, StorageError

logger = logging.getLogger(__name__)

# Cache lifetimes (seconds) attached to written objects
IMMUTABLE_MAX_AGE = 31536000
POINTER_MAX_AGE = 5


@dataclass
class StoredObject:
    """An object held by a storage backend."""
    data: bytes
    content_type: str
    cache_max_age: int


class ObjectStore(ABC):
    """Interface every storage backend implements."""

    def __init__(self, base_url: str = ""):
        self.base_url = base_url.rstrip('/')

    @abstractmethod
    def put_immutable(self, key: str, data: bytes, content_type: str = "application/json") -> None:
        """Write an object that may never be overwritten.

        Raises:
            ObjectExistsError: If an object already exists at ``key``
            StorageError: If the write fails
        """

    @abstractmethod
    def put_mutable(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/json",
        cache_max_age: int = POINTER_MAX_AGE,
    ) -> None:
        """Write or overwrite an object.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read an object.

        Raises:
            ObjectNotFoundError: If no object exists at ``key``
            StorageError: If the read fails
        """

    def exists(self, key: str) -> bool:
        try:
            self.get(key)
        except ObjectNotFoundError:
            return False
        return True

    def url_for(self, key: str) -> str:
        """Public URL of an object."""
        return f"{self.base_url}/{key}" if self.base_url else key


class InMemoryObjectStore(ObjectStore):
    """Thread-safe in-memory backend."""

    def __init__(self, base_url: str = "memory://objects"):
        super().__init__(base_url)
        self._lock = threading.Lock()
        self.objects: Dict[str, StoredObject] = {}

    def put_immutable(self, key: str, data: bytes, content_type: str = "application/json") -> None:
        with self._lock:
            if key in self.objects:
                raise ObjectExistsError(key)
            self.objects[key] = StoredObject(bytes(data), content_type, IMMUTABLE_MAX_AGE)

    def put_mutable(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/json",
        cache_max_age: int = POINTER_MAX_AGE,
    ) -> None:
        with self._lock:
            self.objects[key] = StoredObject(bytes(data), content_type, cache_max_age)

    def get(self, key: str) -> bytes:
        with self._lock:
            stored = self.objects.get(key)
        if stored is None:
            raise ObjectNotFoundError(key)
        return stored.data

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self.objects


class FilesystemObjectStore(ObjectStore):
    """Backend writing objects below a root directory.

    Immutable writes link a fully-written temp file into place, so a
    concurrent writer of the same key either wins or sees ObjectExistsError,
    and readers never observe a partial object.
    """

    def __init__(self, root: str, base_url: Optional[str] = None):
        super().__init__(base_url if base_url is not None else f"file://{os.path.abspath(root)}")
        self.root = os.path.abspath(root)

    def _path(self, key: str) -> str:
        normalized = os.path.normpath(key)
        if normalized.startswith('..') or os.path.isabs(normalized):
            raise StorageError("resolve", key, "key escapes storage root")
        return os.path.join(self.root, normalized)

    def _write_temp(self, path: str, data: bytes) -> str:
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-')
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        return temp_path

    def put_immutable(self, key: str, data: bytes, content_type: str = "application/json") -> None:
        path = self._path(key)
        try:
            temp_path = self._write_temp(path, data)
        except OSError as e:
            raise StorageError("put", key, str(e))
        try:
            os.link(temp_path, path)
        except FileExistsError:
            raise ObjectExistsError(key)
        except OSError as e:
            raise StorageError("put", key, str(e))
        finally:
            os.unlink(temp_path)
        logger.debug(f"Stored immutable object {key} ({len(data)} bytes)")

    def put_mutable(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/json",
        cache_max_age: int = POINTER_MAX_AGE,
    ) -> None:
        path = self._path(key)
        try:
            temp_path = self._write_temp(path, data)
            os.replace(temp_path, path)
        except OSError as e:
            raise StorageError("put", key, str(e))
        logger.debug(f"Stored mutable object {key} ({len(data)} bytes)")

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            raise ObjectNotFoundError(key)
        except OSError as e:
            raise StorageError("get", key, str(e))
