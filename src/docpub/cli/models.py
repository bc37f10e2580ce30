"""Data models for the docpub command line.

This module defines the exit codes returned by the CLI and the workspace
configuration read from ``.docpub/config.yaml``.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

# Storage backends a workspace can publish to
BACKEND_FILESYSTEM = "filesystem"
BACKEND_HTTP = "http"


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    Exit codes:
        SUCCESS (0): Operation completed successfully
        GENERAL_ERROR (1): Unexpected error or invalid arguments
        BUILD_FAILED (2): The publish or revert build ended in the failed state
        AUTH_ERROR (3): Actor lacks the required role or storage credentials are missing
        STORAGE_ERROR (4): Object storage could not be read or written
        CONFLICT (5): Another build is in flight or the request conflicts with state
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    BUILD_FAILED = 2
    AUTH_ERROR = 3
    STORAGE_ERROR = 4
    CONFLICT = 5


@dataclass
class StorageConfig:
    """Object storage the workspace publishes to.

    Attributes:
        backend: "filesystem" or "http"
        root: Root directory of the filesystem backend
        base_url: Public base URL of published objects (optional)
    """
    backend: str = BACKEND_FILESYSTEM
    root: str = ".docpub/objects"
    base_url: Optional[str] = None


@dataclass
class WorkspaceConfig:
    """Configuration of one docpub workspace.

    Attributes:
        site_id: Site published by this workspace
        actor_id: Actor recorded on builds requested from the CLI
        storage: Object storage settings
        state_path: Path of the persisted state file
        max_workers: Page upload parallelism
        content_dir: Directory with a docpub.yaml index (None publishes
            the editor-backed documents held in the state file)
    """
    site_id: str
    actor_id: str
    storage: StorageConfig = field(default_factory=StorageConfig)
    state_path: str = ".docpub/state.yaml"
    max_workers: int = 8
    content_dir: Optional[str] = None
