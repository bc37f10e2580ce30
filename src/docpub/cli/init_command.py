"""InitCommand for workspace initialization.

This module implements ``docpub init``: it creates the site record, grants
the local actor the owner role and writes ``.docpub/config.yaml``.
"""

import logging
import os
from typing import Optional

from docpub.documents import SiteService
from docpub.models import ROLE_OWNER, Membership, Site
from docpub.state import StateStore

from .config import ConfigLoader
from .errors import InitError
from .models import BACKEND_FILESYSTEM, BACKEND_HTTP, StorageConfig, WorkspaceConfig
from .workspace import build_object_store

logger = logging.getLogger(__name__)


class InitCommand:
    """Handles initialization of a docpub workspace.

    Example:
        >>> init = InitCommand()
        >>> site = init.run("Acme Docs", content_dir="./docs")
    """

    DEFAULT_CONFIG_PATH = ConfigLoader.DEFAULT_CONFIG_PATH
    DEFAULT_OWNER_ID = "local"
    DEFAULT_ACTOR_ID = "local-user"

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the init command.

        Args:
            config_path: Optional config file path (defaults to .docpub/config.yaml)
        """
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH

    def run(
        self,
        site_name: str,
        owner_id: str = DEFAULT_OWNER_ID,
        actor_id: str = DEFAULT_ACTOR_ID,
        backend: str = BACKEND_FILESYSTEM,
        storage_root: str = StorageConfig.root,
        base_url: Optional[str] = None,
        content_dir: Optional[str] = None,
        state_path: Optional[str] = None,
    ) -> Site:
        """Create the site and write the workspace config.

        Args:
            site_name: Display name of the new site
            owner_id: Organization/project owning the site
            actor_id: Actor granted the owner role and recorded on CLI builds
            backend: Storage backend ("filesystem" or "http")
            storage_root: Root directory of the filesystem backend
            base_url: Public base URL of published objects
            content_dir: Directory with a docpub.yaml index to publish from
            state_path: State file path (defaults next to the config)

        Returns:
            The created Site

        Raises:
            InitError: If the workspace is already initialized or arguments are invalid
        """
        if os.path.exists(self.config_path):
            raise InitError(f"Workspace already initialized: {self.config_path} exists")
        if backend not in (BACKEND_FILESYSTEM, BACKEND_HTTP):
            raise InitError(f"Unknown storage backend: '{backend}'")
        if backend == BACKEND_HTTP and not base_url:
            raise InitError("--base-url is required for the http backend")
        if content_dir and not os.path.isdir(content_dir):
            raise InitError(f"Content directory not found: {content_dir}")

        config_dir = os.path.dirname(self.config_path)
        storage = StorageConfig(backend=backend, root=storage_root, base_url=base_url)
        store = build_object_store(storage)

        state_path = state_path or os.path.join(config_dir or ".", "state.yaml")
        repository = StateStore.load(state_path)
        site = SiteService(repository).create_site(
            owner_id,
            site_name,
            store_id=backend,
            base_url=store.base_url,
        )
        repository.add_member(Membership(owner_id=owner_id, actor_id=actor_id, role=ROLE_OWNER))
        StateStore.save(state_path, repository)

        ConfigLoader.save(self.config_path, WorkspaceConfig(
            site_id=site.id,
            actor_id=actor_id,
            storage=storage,
            state_path=state_path,
            content_dir=content_dir,
        ))
        logger.info(f"Initialized workspace for site {site.id} at {self.config_path}")
        return site
