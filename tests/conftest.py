"""Root pytest configuration for all tests.

This conftest applies to all test types (unit and integration) and
provides the in-memory repository and storage every layer builds on.
"""

import logging

import pytest

from docpub.state import Repository
from docpub.storage import ContentBlobStore, InMemoryObjectStore
from tests.fixtures.sample_content import SeededSite, seed_site

# requests logs every connection at DEBUG; keep test output readable.
logging.getLogger("urllib3").setLevel(logging.WARNING)


@pytest.fixture
def repository() -> Repository:
    """Empty in-memory repository."""
    return Repository()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def blob_store(object_store: InMemoryObjectStore, repository: Repository) -> ContentBlobStore:
    """Content-addressed blob store over the in-memory object store."""
    return ContentBlobStore(object_store, repository)


@pytest.fixture
def seeded(repository: Repository) -> SeededSite:
    """Repository holding a site that selects two populated spaces."""
    return seed_site(repository)
