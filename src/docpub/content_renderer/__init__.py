"""Content rendering for structured rich-text documents.

This package converts editor JSON into HTML, a table of contents and
plain text. Rendering is deterministic so rendered bundles can be
content-addressed.
"""

from .errors import MalformedContentError
from .html_import import HtmlImporter, html_to_document
from .models import RenderedContent, TocItem
from .nodes import ContentDocument, ContentMark, ContentNode, MarkType, NodeType
from .parser import DocumentParser
from .renderer import ContentRenderer, anchor_id

__all__ = [
    'MalformedContentError',
    'HtmlImporter',
    'html_to_document',
    'RenderedContent',
    'TocItem',
    'ContentDocument',
    'ContentMark',
    'ContentNode',
    'MarkType',
    'NodeType',
    'DocumentParser',
    'ContentRenderer',
    'anchor_id',
]
