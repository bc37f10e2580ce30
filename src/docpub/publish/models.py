"""Data models for the publish pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from docpub.models import Document, DocumentType, Space


@dataclass
class FlatPage:
    """One publishable leaf with its resolved route.

    Attributes:
        id: Document id
        title: Display title
        slug: Document slug
        trail: Slugs from the space root down to this page
        space_id: Owning space
        space_slug: Owning space's slug
        route: Canonical route of the page
        type: page or api
        icon_name: Optional navigation icon
        updated_at: ISO 8601 timestamp of the last modification
    """
    id: str
    title: str
    slug: str
    trail: List[str]
    space_id: str
    space_slug: str
    route: str
    type: DocumentType
    icon_name: Optional[str] = None
    updated_at: str = ""
    api_path: Optional[str] = None
    api_method: Optional[str] = None
    api_spec_blob_key: Optional[str] = None

    @property
    def is_api(self) -> bool:
        return self.type == DocumentType.API


@dataclass
class TreeItem:
    """A node of the navigation tree with its resolved route."""
    kind: str
    title: str
    slug: str
    route: str
    icon_name: Optional[str] = None
    api: Optional[Dict[str, str]] = None
    children: List["TreeItem"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            'kind': self.kind,
            'title': self.title,
            'iconName': self.icon_name,
            'slug': self.slug,
            'route': self.route,
        }
        if self.api is not None:
            item['api'] = dict(self.api)
        if self.children:
            item['children'] = [child.to_dict() for child in self.children]
        return item


@dataclass
class SpaceTree:
    """Navigation tree of one space."""
    space: Space
    items: List[TreeItem] = field(default_factory=list)


@dataclass
class SpaceContent:
    """A selected space with its documents, as yielded by a content source."""
    space: Space
    documents: List[Document] = field(default_factory=list)


@dataclass
class FlattenResult:
    """Flattened view of the selected spaces.

    Attributes:
        spaces: Selected spaces in publish order
        flat_pages: Publishable leaves in traversal order
        routes_by_space: Ordered routes per space slug (empty spaces included)
        space_trees: Navigation tree per space, in publish order
    """
    spaces: List[Space] = field(default_factory=list)
    flat_pages: List[FlatPage] = field(default_factory=list)
    routes_by_space: Dict[str, List[str]] = field(default_factory=dict)
    space_trees: List[SpaceTree] = field(default_factory=list)


@dataclass
class PageRef:
    """Content blob reference of one flattened page."""
    hash: str
    key: str
    size: int
    is_new: bool


@dataclass
class BuildArtifacts:
    """Versioned payloads written under a build id."""
    manifest: Dict[str, Any]
    tree: Dict[str, Any]
    theme: Optional[Dict[str, Any]] = None


@dataclass
class Pointer:
    """Mutable redirect naming the live build and its artifact URLs."""
    build_id: str
    manifest_url: str
    tree_url: str
    theme_url: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        payload = {
            'buildId': self.build_id,
            'manifestUrl': self.manifest_url,
            'treeUrl': self.tree_url,
        }
        if self.theme_url:
            payload['themeUrl'] = self.theme_url
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Pointer":
        return cls(
            build_id=payload['buildId'],
            manifest_url=payload['manifestUrl'],
            tree_url=payload['treeUrl'],
            theme_url=payload.get('themeUrl'),
        )


@dataclass
class MirrorReport:
    """Outcome of writing a pointer to every bound hostname."""
    written: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
