"""Document tree editing for the publish pipeline.

This package provides rank and slug generation, the document, space and
site services that mutate the Repository, and the OpenAPI importer that
builds spec-managed subtrees.
"""

from .api_import import ApiSpecImporter, extract_operations, parse_openapi
from .document_service import DocumentService, collect_subtree_ids
from .models import ApiImportResult, ApiOperation, ParsedApiSpec
from .rank import INITIAL_RANK, rank_after, rank_before, rank_between, validate_rank
from .site_service import SiteService, allocate_primary_host
from .slugs import slugify, unique_slug
from .space_service import SpaceService

__all__ = [
    'ApiSpecImporter',
    'extract_operations',
    'parse_openapi',
    'DocumentService',
    'collect_subtree_ids',
    'ApiImportResult',
    'ApiOperation',
    'ParsedApiSpec',
    'INITIAL_RANK',
    'rank_after',
    'rank_before',
    'rank_between',
    'validate_rank',
    'SiteService',
    'allocate_primary_host',
    'slugify',
    'unique_slug',
    'SpaceService',
]
