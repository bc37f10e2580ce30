"""Pytest configuration for integration tests.

Integration tests drive the full publish pipeline through the
PublishService with the inline dispatcher.
"""

import pytest

from docpub.publish import PublishService, create_publish_service


@pytest.fixture
def service(repository, object_store) -> PublishService:
    """Publish service over the in-memory repository and object store."""
    return create_publish_service(repository, object_store, max_workers=4)
