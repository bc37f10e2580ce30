"""Authentication module for loading object-storage credentials.

Credentials for the HTTP storage backend are loaded from environment
variables using python-dotenv. They are never cached or logged.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import StorageCredentialsError


class StorageCredentials(NamedTuple):
    """Object-storage API credentials."""
    url: str
    token: str


class StorageAuthenticator:
    """Loads and validates storage credentials from environment variables.

    Required environment variables:
        DOCPUB_STORAGE_URL: Base URL of the object-storage API
        DOCPUB_STORAGE_TOKEN: Read/write token for the store

    Example:
        >>> auth = StorageAuthenticator()
        >>> creds = auth.get_credentials()
    """

    def __init__(self):
        """Load environment variables from a .env file if present."""
        load_dotenv()

    def get_credentials(self) -> StorageCredentials:
        """Get storage credentials from environment variables.

        Raises:
            StorageCredentialsError: If any required variable is missing
        """
        url = os.getenv('DOCPUB_STORAGE_URL')
        token = os.getenv('DOCPUB_STORAGE_TOKEN')

        if not url:
            raise StorageCredentialsError('DOCPUB_STORAGE_URL')
        if not token:
            raise StorageCredentialsError('DOCPUB_STORAGE_TOKEN')

        return StorageCredentials(url=url.rstrip('/'), token=token)
