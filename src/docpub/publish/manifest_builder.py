"""Manifest and navigation tree builder.

The manifest is the flat, route-indexed view a renderer uses to load page
content; the tree is the nested view used for the sidebar. Both are built
from the same flattening pass so their routes always agree.
"""

import logging
from typing import Any, Dict, List

from docpub.clock import to_epoch_ms
from docpub.models import BUTTON_POSITIONS, LAYOUT_TABS, Site

from .models import BuildArtifacts, FlattenResult, PageRef

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 3
TREE_VERSION = 2
THEME_VERSION = 1
CONTENT_VERSION = "pm-bundle-v2"

# Number of following routes offered as prefetch hints
NEIGHBOR_COUNT = 2

FALLBACK_DEFAULT_SPACE = "docs"


class ManifestBuilder:
    """Assemble the manifest, tree and theme payloads of a build.

    Example:
        >>> artifacts = ManifestBuilder().build(flattened, page_refs, site, build_id, now_ms())
        >>> artifacts.manifest["counts"]
        {'pages': 3, 'newBlobs': 3, 'reusedBlobs': 0}
    """

    def build(
        self,
        flattened: FlattenResult,
        page_refs: Dict[str, PageRef],
        site: Site,
        build_id: str,
        published_at: int,
    ) -> BuildArtifacts:
        """Build all versioned payloads.

        Args:
            flattened: Output of the tree flattener
            page_refs: Blob reference per page id
            site: Site being published
            build_id: Id of the build
            published_at: Publish time in epoch milliseconds

        Raises:
            KeyError: If a flattened page has no blob reference
        """
        nav_spaces = self.build_nav_spaces(flattened, site.layout)
        manifest = self.build_manifest(flattened, page_refs, site, nav_spaces, build_id, published_at)
        tree = self.build_tree(flattened, site, nav_spaces, build_id, published_at)
        theme = self.build_theme(site)
        logger.debug(
            f"Built manifest for build {build_id}: {manifest['counts']['pages']} page(s), "
            f"{len(nav_spaces)} space(s)"
        )
        return BuildArtifacts(manifest=manifest, tree=tree, theme=theme)

    @staticmethod
    def build_nav_spaces(flattened: FlattenResult, layout: str) -> List[Dict[str, Any]]:
        style = "tab" if layout == LAYOUT_TABS else "dropdown"
        nav_spaces = []
        for order, space in enumerate(flattened.spaces, start=1):
            entry: Dict[str, Any] = {
                'slug': space.slug,
                'name': space.name,
                'style': style,
                'order': order,
                'iconName': space.icon_name,
            }
            routes = flattened.routes_by_space.get(space.slug) or []
            if routes:
                entry['entry'] = routes[0]
            nav_spaces.append(entry)
        return nav_spaces

    def build_manifest(
        self,
        flattened: FlattenResult,
        page_refs: Dict[str, PageRef],
        site: Site,
        nav_spaces: List[Dict[str, Any]],
        build_id: str,
        published_at: int,
    ) -> Dict[str, Any]:
        pages: Dict[str, Dict[str, Any]] = {}
        new_blobs = 0
        for page in flattened.flat_pages:
            ref = page_refs[page.id]
            if ref.is_new:
                new_blobs += 1
            entry: Dict[str, Any] = {
                'title': page.title,
                'space': page.space_slug,
                'iconName': page.icon_name,
                'blob': ref.key,
                'hash': ref.hash,
                'size': ref.size,
                'neighbors': [],
                'lastModified': to_epoch_ms(page.updated_at) if page.updated_at else published_at,
                'kind': 'api' if page.is_api else 'page',
            }
            if page.is_api and page.api_path and page.api_method and page.api_spec_blob_key:
                entry['api'] = {
                    'path': page.api_path,
                    'method': page.api_method,
                    'document': page.api_spec_blob_key,
                }
            pages[page.route] = entry

        self._link_neighbors(pages, flattened.routes_by_space)

        total = len(flattened.flat_pages)
        if nav_spaces:
            default_space = nav_spaces[0]['slug']
        else:
            default_space = FALLBACK_DEFAULT_SPACE

        return {
            'version': MANIFEST_VERSION,
            'contentVersion': CONTENT_VERSION,
            'buildId': build_id,
            'publishedAt': published_at,
            'site': {
                'name': site.name,
                'logoUrl': site.logo_url_light,
                'layout': site.layout,
                'baseUrl': site.base_url,
                'branding': {
                    'logo': {
                        'light': site.logo_url_light,
                        'dark': site.logo_url_dark or site.logo_url_light,
                    },
                    'favicon': {'url': site.favicon_url} if site.favicon_url else None,
                },
            },
            'routing': {'basePath': '/', 'defaultSpace': default_space},
            'nav': {'spaces': nav_spaces},
            'counts': {'pages': total, 'newBlobs': new_blobs, 'reusedBlobs': total - new_blobs},
            'pages': pages,
        }

    @staticmethod
    def _link_neighbors(pages: Dict[str, Dict[str, Any]], routes_by_space: Dict[str, List[str]]) -> None:
        """Attach prefetch neighbors and previous/next links within each space."""
        for routes in routes_by_space.values():
            for index, route in enumerate(routes):
                entry = pages[route]
                entry['neighbors'] = routes[index + 1:index + 1 + NEIGHBOR_COUNT]
                if index > 0:
                    previous = routes[index - 1]
                    entry['previous'] = {'title': pages[previous]['title'], 'route': previous}
                if index + 1 < len(routes):
                    following = routes[index + 1]
                    entry['next'] = {'title': pages[following]['title'], 'route': following}

    @staticmethod
    def build_tree(
        flattened: FlattenResult,
        site: Site,
        nav_spaces: List[Dict[str, Any]],
        build_id: str,
        published_at: int,
    ) -> Dict[str, Any]:
        buttons: Dict[str, List[Dict[str, Any]]] = {position: [] for position in BUTTON_POSITIONS}
        for button in sorted(site.buttons, key=lambda b: (b.position, b.rank)):
            if button.position not in buttons:
                continue
            buttons[button.position].append({
                'id': button.id,
                'label': button.label,
                'href': button.href,
                'iconName': button.icon_name,
                'target': button.target,
            })

        return {
            'version': TREE_VERSION,
            'siteId': site.id,
            'buildId': build_id,
            'publishedAt': published_at,
            'nav': {
                'spaces': [
                    {key: value for key, value in space.items() if key != 'style'}
                    for space in nav_spaces
                ],
            },
            'spaces': [
                {
                    'space': {
                        'slug': tree.space.slug,
                        'name': tree.space.name,
                        'iconName': tree.space.icon_name,
                    },
                    'items': [item.to_dict() for item in tree.items],
                }
                for tree in flattened.space_trees
            ],
            'buttons': buttons,
        }

    @staticmethod
    def build_theme(site: Site) -> Dict[str, Any]:
        return {
            'version': THEME_VERSION,
            'light': {'tokens': dict(site.theme.light_tokens), 'vars': dict(site.theme.vars)},
            'dark': {'tokens': dict(site.theme.dark_tokens)},
        }
