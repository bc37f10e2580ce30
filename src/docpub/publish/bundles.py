"""Page bundle assembly.

A bundle is the JSON document stored as one page's content blob. It holds
only content-derived fields, so an unchanged page produces byte-identical
bytes on every publish and deduplicates.
"""

import logging
from typing import Any, Dict, Optional

from docpub.content_renderer import ContentRenderer, RenderedContent

from .content_source import ContentSource
from .models import FlatPage

logger = logging.getLogger(__name__)

EMPTY_DOCUMENT: Dict[str, Any] = {"type": "doc", "content": []}


class PageBundler:
    """Render a flattened page into its bundle payload.

    Loading and rendering failures are recovered locally: the page is
    published with empty content and a warning is logged.
    """

    def __init__(self, content_source: ContentSource, renderer: Optional[ContentRenderer] = None):
        self.content_source = content_source
        self.renderer = renderer or ContentRenderer()

    def bundle(self, page: FlatPage) -> Dict[str, Any]:
        """Build the stored payload of one page.

        Title, slug, trail and icon live in the manifest and tree, so renaming
        or moving a page reuses its content blob.
        """
        bundle: Dict[str, Any] = {
            'id': page.id,
            'type': page.type.value,
        }

        if page.is_api:
            bundle['apiPath'] = page.api_path
            bundle['apiMethod'] = page.api_method
            bundle['apiSpecBlobKey'] = page.api_spec_blob_key
            bundle['rendered'] = {'html': '', 'toc': []}
            bundle['plain'] = ''
            bundle['source'] = {'type': 'api', 'content': []}
            return bundle

        source = self._load(page)
        rendered = self._render(page, source)
        bundle['rendered'] = {
            'html': rendered.html,
            'toc': [item.to_dict() for item in rendered.toc],
        }
        bundle['plain'] = rendered.plain
        bundle['markdown'] = rendered.markdown
        bundle['source'] = source
        return bundle

    def _load(self, page: FlatPage) -> Dict[str, Any]:
        try:
            source = self.content_source.load_content(page.id)
        except Exception as e:
            logger.warning(f"Publishing empty content for page {page.id}: could not load source ({e})")
            return dict(EMPTY_DOCUMENT)
        return source if source is not None else dict(EMPTY_DOCUMENT)

    def _render(self, page: FlatPage, source: Dict[str, Any]) -> RenderedContent:
        try:
            return self.renderer.render(source)
        except Exception as e:
            logger.warning(f"Publishing empty content for page {page.id}: render failed ({e})")
            return RenderedContent()
