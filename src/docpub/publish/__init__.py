"""Publish pipeline.

This package flattens selected spaces into routes, renders and stores
page bundles as deduplicated content blobs, assembles the manifest and
navigation tree, and makes builds live by flipping pointers. Revert
re-aliases a prior build without re-rendering.
"""

from .authorization import PUBLISH_ROLES, ActorContext, Authorizer, MembershipAuthorizer
from .build_ids import new_build_id
from .build_runner import BuildRunner
from .bundles import PageBundler
from .content_source import ContentSource, DirectoryContentSource, RepositoryContentSource
from .dispatcher import Dispatcher, InlineDispatcher, ThreadedDispatcher
from .domain_mirror import DomainPointerMirror, normalized_hosts
from .flattener import TreeFlattener, route_for
from .manifest_builder import ManifestBuilder
from .models import (
    BuildArtifacts,
    FlatPage,
    FlattenResult,
    MirrorReport,
    PageRef,
    Pointer,
    SpaceContent,
    SpaceTree,
    TreeItem,
)
from .orchestrator import BuildOrchestrator
from .pointers import PointerPublisher, pointer_for
from .revert import RevertOperator, validate_revert_target
from .service import PublishService, create_publish_service

__all__ = [
    'PUBLISH_ROLES',
    'ActorContext',
    'Authorizer',
    'MembershipAuthorizer',
    'new_build_id',
    'BuildRunner',
    'PageBundler',
    'ContentSource',
    'DirectoryContentSource',
    'RepositoryContentSource',
    'Dispatcher',
    'InlineDispatcher',
    'ThreadedDispatcher',
    'DomainPointerMirror',
    'normalized_hosts',
    'TreeFlattener',
    'route_for',
    'ManifestBuilder',
    'BuildArtifacts',
    'FlatPage',
    'FlattenResult',
    'MirrorReport',
    'PageRef',
    'Pointer',
    'SpaceContent',
    'SpaceTree',
    'TreeItem',
    'BuildOrchestrator',
    'PointerPublisher',
    'pointer_for',
    'RevertOperator',
    'validate_revert_target',
    'PublishService',
    'create_publish_service',
]
