"""Test fixtures for docpub tests.

This module provides:
- Sample editor JSON documents, HTML pages and an OpenAPI spec
- seed_site(), which populates a Repository with a publishable site
"""

from .sample_content import (
    BASE_URL,
    MEMBER_ACTOR,
    OWNER_ACTOR,
    OWNER_ID,
    SAMPLE_DOC_CONFIGURE,
    SAMPLE_DOC_INSTALL,
    SAMPLE_HTML_PAGE,
    SAMPLE_OPENAPI_YAML,
    SeededSite,
    paragraph_doc,
    seed_site,
)

__all__ = [
    'BASE_URL',
    'MEMBER_ACTOR',
    'OWNER_ACTOR',
    'OWNER_ID',
    'SAMPLE_DOC_CONFIGURE',
    'SAMPLE_DOC_INSTALL',
    'SAMPLE_HTML_PAGE',
    'SAMPLE_OPENAPI_YAML',
    'SeededSite',
    'paragraph_doc',
    'seed_site',
]
