"""Workspace assembly for CLI commands.

A workspace is a directory holding ``.docpub/config.yaml``. This module
loads the config and persisted state, builds the configured object store
and content source, and wires a PublishService that runs builds inline.
"""

import logging
from typing import Optional

from docpub.publish import (
    ContentSource,
    DirectoryContentSource,
    InlineDispatcher,
    PublishService,
    RepositoryContentSource,
    create_publish_service,
)
from docpub.state import Repository, StateStore
from docpub.storage import (
    FilesystemObjectStore,
    HttpObjectStore,
    ObjectStore,
    StorageAuthenticator,
)

from .config import ConfigLoader
from .models import BACKEND_HTTP, StorageConfig, WorkspaceConfig

logger = logging.getLogger(__name__)


def build_object_store(storage: StorageConfig) -> ObjectStore:
    """Create the object store described by a storage config section."""
    if storage.backend == BACKEND_HTTP:
        return HttpObjectStore(StorageAuthenticator(), storage.base_url)
    return FilesystemObjectStore(storage.root, base_url=storage.base_url)


class Workspace:
    """Config, state and publish service of one working directory.

    Example:
        >>> workspace = Workspace.open(".docpub/config.yaml")
        >>> build = workspace.service.request_publish(workspace.config.site_id,
        ...                                           workspace.config.actor_id)
        >>> workspace.save()
    """

    def __init__(
        self,
        config: WorkspaceConfig,
        repository: Repository,
        object_store: Optional[ObjectStore] = None,
    ):
        self.config = config
        self.repository = repository
        self.object_store = object_store or build_object_store(config.storage)
        self.content_source = self._build_content_source()
        self.service: PublishService = create_publish_service(
            repository,
            self.object_store,
            content_source=self.content_source,
            dispatcher=InlineDispatcher(),
            max_workers=config.max_workers,
        )

    @classmethod
    def open(cls, config_path: str, object_store: Optional[ObjectStore] = None) -> "Workspace":
        """Load config and state for a workspace.

        Raises:
            ConfigNotFoundError: If the config file does not exist
            ConfigError: If the config is invalid
            StateError: If the state file is malformed
        """
        config = ConfigLoader.load(config_path)
        repository = StateStore.load(config.state_path)
        logger.debug(f"Opened workspace for site {config.site_id} (state: {config.state_path})")
        return cls(config, repository, object_store=object_store)

    def save(self) -> None:
        """Persist the repository back to the state file."""
        StateStore.save(self.config.state_path, self.repository)
        logger.debug(f"Saved state to {self.config.state_path}")

    def _build_content_source(self) -> ContentSource:
        if self.config.content_dir:
            return DirectoryContentSource(self.config.content_dir)
        return RepositoryContentSource(self.repository)
