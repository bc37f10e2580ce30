"""Command line interface for docpub.

This package provides the Typer application, the workspace config loader
and the commands that drive the publish service from a terminal.
"""

from .config import ConfigLoader
from .errors import CLIError, ConfigError, ConfigFilesystemError, ConfigNotFoundError, InitError
from .init_command import InitCommand
from .models import ExitCode, StorageConfig, WorkspaceConfig
from .output import OutputHandler
from .publish_command import PublishCommand
from .workspace import Workspace, build_object_store

__all__ = [
    'ConfigLoader',
    'CLIError',
    'ConfigError',
    'ConfigFilesystemError',
    'ConfigNotFoundError',
    'InitError',
    'InitCommand',
    'ExitCode',
    'StorageConfig',
    'WorkspaceConfig',
    'OutputHandler',
    'PublishCommand',
    'Workspace',
    'build_object_store',
]
