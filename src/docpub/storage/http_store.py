"""HTTP object-storage backend.

This module talks to a blob-storage HTTP API with requests and translates
HTTP failures into the storage exception hierarchy. Transient failures are
retried through retry_logic.
"""

import logging
from typing import Optional

import requests
from requests.exceptions import ConnectionError, Timeout

from .auth import StorageAuthenticator, StorageCredentials
from .errors import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageCredentialsError,
    StorageError,
    StorageUnavailableError,
)
from .object_store import IMMUTABLE_MAX_AGE, POINTER_MAX_AGE, ObjectStore
from .retry_logic import TRANSIENT_STATUS_CODES, retry_on_transient

logger = logging.getLogger(__name__)

# Request timeout in seconds
REQUEST_TIMEOUT = 30


class HttpObjectStore(ObjectStore):
    """Object store backed by an HTTP blob API.

    Writes are ``PUT {api}/{key}`` with headers controlling cache lifetime
    and whether overwriting is allowed; the API answers 409 when an
    immutable key already exists. Reads go to the public ``base_url``.

    Example:
        >>> store = HttpObjectStore(StorageAuthenticator(), "https://blobs.example.com")
        >>> store.put_mutable("sites/abc/latest.json", b"{}")
    """

    def __init__(
        self,
        authenticator: StorageAuthenticator,
        base_url: str,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url)
        self._authenticator = authenticator
        self._session = session or requests.Session()
        self._credentials: Optional[StorageCredentials] = None

    def _get_credentials(self) -> StorageCredentials:
        if self._credentials is None:
            self._credentials = self._authenticator.get_credentials()
        return self._credentials

    def _put(self, key: str, data: bytes, content_type: str, cache_max_age: int, overwrite: bool) -> None:
        creds = self._get_credentials()
        url = f"{creds.url}/{key}"
        headers = {
            'Authorization': f"Bearer {creds.token}",
            'Content-Type': content_type,
            'x-cache-control-max-age': str(cache_max_age),
            'x-allow-overwrite': '1' if overwrite else '0',
            'x-add-random-suffix': '0',
        }
        try:
            response = self._session.put(url, data=data, headers=headers, timeout=REQUEST_TIMEOUT)
        except (ConnectionError, Timeout) as e:
            raise StorageUnavailableError(creds.url, str(e))
        self._raise_for_status(response, 'put', key, creds.url)

    def _raise_for_status(self, response: requests.Response, operation: str, key: str, endpoint: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 404:
            raise ObjectNotFoundError(key)
        if status == 409:
            raise ObjectExistsError(key)
        if status in (401, 403):
            raise StorageCredentialsError('DOCPUB_STORAGE_TOKEN')
        if status in TRANSIENT_STATUS_CODES:
            raise StorageUnavailableError(endpoint, f"HTTP {status}")
        raise StorageError(operation, key, f"HTTP {status}: {response.text[:200]}")

    def put_immutable(self, key: str, data: bytes, content_type: str = "application/json") -> None:
        retry_on_transient(self._put, key, data, content_type, IMMUTABLE_MAX_AGE, False)
        logger.debug(f"PUT {key} (immutable, {len(data)} bytes)")

    def put_mutable(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/json",
        cache_max_age: int = POINTER_MAX_AGE,
    ) -> None:
        retry_on_transient(self._put, key, data, content_type, cache_max_age, True)
        logger.debug(f"PUT {key} (mutable, max-age {cache_max_age}s)")

    def _get(self, key: str) -> bytes:
        url = self.url_for(key)
        try:
            response = self._session.get(url, timeout=REQUEST_TIMEOUT)
        except (ConnectionError, Timeout) as e:
            raise StorageUnavailableError(self.base_url, str(e))
        self._raise_for_status(response, 'get', key, self.base_url)
        return response.content

    def get(self, key: str) -> bytes:
        return retry_on_transient(self._get, key)
