"""Record storage for the publish pipeline.

This package provides the thread-safe in-process Repository and the
StateStore that persists it to YAML between CLI invocations.
"""

from .errors import StateError, StateFilesystemError
from .repository import Repository
from .state_store import StateStore

__all__ = [
    'StateError',
    'StateFilesystemError',
    'Repository',
    'StateStore',
]
