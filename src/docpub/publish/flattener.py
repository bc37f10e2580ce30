"""Document tree flattener.

Walks the selected spaces depth-first in rank order, producing the flat
list of publishable pages with their canonical routes and the navigation
tree that mirrors the full hierarchy.
"""

import logging
from typing import Dict, List, Optional

from docpub.models import Document, DocumentType

from .models import FlatPage, FlattenResult, SpaceContent, SpaceTree, TreeItem

logger = logging.getLogger(__name__)

API_ROUTE_PREFIX = "/api-reference"


def route_for(space_slug: str, trail: List[str], is_api: bool) -> str:
    """Canonical route of a page.

    Example:
        >>> route_for("guides", ["getting-started", "install"], False)
        '/guides/getting-started/install'
    """
    path = "/".join(trail)
    if is_api:
        return f"{API_ROUTE_PREFIX}/{space_slug}/{path}"
    return f"/{space_slug}/{path}"


def tree_kind(doc_type: DocumentType) -> str:
    """Navigation kind of a document: group, page or api."""
    if doc_type == DocumentType.API:
        return "api"
    if doc_type == DocumentType.PAGE:
        return "page"
    return "group"


def _sibling_order(document: Document):
    return (document.rank, document.slug)


class TreeFlattener:
    """Flatten ordered spaces into routes, pages and navigation trees.

    Example:
        >>> result = TreeFlattener().flatten(source.list_pages(site.selected_space_ids))
        >>> result.routes_by_space["guides"]
        ['/guides/getting-started/install', '/guides/getting-started/configure']
    """

    def flatten(self, ordered_spaces: List[SpaceContent]) -> FlattenResult:
        """Flatten spaces in the given order.

        Args:
            ordered_spaces: Spaces with their documents, in publish order

        Returns:
            FlattenResult; a space without pages maps to an empty route list
        """
        result = FlattenResult()
        for entry in ordered_spaces:
            space = entry.space
            result.spaces.append(space)
            routes = result.routes_by_space.setdefault(space.slug, [])

            children: Dict[Optional[str], List[Document]] = {}
            known_ids = {d.id for d in entry.documents}
            for document in entry.documents:
                parent_id = document.parent_id if document.parent_id in known_ids else None
                if document.parent_id is not None and parent_id is None:
                    logger.warning(f"Document {document.id} has a missing parent; treating it as root")
                children.setdefault(parent_id, []).append(document)
            for siblings in children.values():
                siblings.sort(key=_sibling_order)

            tree = SpaceTree(space=space)
            # Explicit stack of (document, parent trail, parent tree item)
            stack = [(doc, [], None) for doc in reversed(children.get(None, []))]
            while stack:
                document, parent_trail, parent_item = stack.pop()
                trail = parent_trail + [document.slug]
                is_api = document.type == DocumentType.API
                route = route_for(space.slug, trail, is_api)

                item = TreeItem(
                    kind=tree_kind(document.type),
                    title=document.title,
                    slug=document.slug,
                    route=route,
                    icon_name=document.icon_name,
                )
                if is_api:
                    item.api = {
                        'path': document.api_path or "",
                        'method': document.api_method or "",
                        'document': document.api_spec_blob_key or "",
                    }
                if parent_item is None:
                    tree.items.append(item)
                else:
                    parent_item.children.append(item)

                if document.is_page_like:
                    result.flat_pages.append(FlatPage(
                        id=document.id,
                        title=document.title,
                        slug=document.slug,
                        trail=trail,
                        space_id=space.id,
                        space_slug=space.slug,
                        route=route,
                        type=document.type,
                        icon_name=document.icon_name,
                        updated_at=document.updated_at,
                        api_path=document.api_path,
                        api_method=document.api_method,
                        api_spec_blob_key=document.api_spec_blob_key,
                    ))
                    routes.append(route)

                for child in reversed(children.get(document.id, [])):
                    stack.append((child, trail, item))

            result.space_trees.append(tree)
            logger.debug(f"Flattened space {space.slug}: {len(routes)} page(s)")

        return result
