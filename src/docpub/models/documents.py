"""Document and space data models.

A space is a named collection of documents; documents form a tree inside
the space through their parent ids and are ordered among siblings by a
dense lexicographic rank.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DocumentType(str, Enum):
    """Kinds of nodes in a space's document tree."""

    PAGE = "page"
    GROUP = "group"
    API = "api"
    API_SPEC = "api_spec"
    API_TAG = "api_tag"


# Leaves that produce a published page
PAGE_LIKE_TYPES = {DocumentType.PAGE, DocumentType.API}

# Nodes owned by an imported API spec (not independently editable)
SPEC_MANAGED_TYPES = {DocumentType.API, DocumentType.API_TAG}

# Nodes that may only appear at root level
ROOT_ONLY_TYPES = {DocumentType.GROUP}


@dataclass
class Document:
    """A node in a space's hierarchical tree.

    Attributes:
        id: Unique document identifier
        space_id: Owning space
        parent_id: Parent document id (None for root-level nodes)
        type: Node kind (page, group, api, api_spec, api_tag)
        slug: URL segment, unique among siblings
        title: Display title
        rank: Dense lexicographic sibling-order key
        icon_name: Optional icon shown in navigation
        source_key: Optional back-reference to a content source key
        api_path: HTTP path for api leaves
        api_method: HTTP method for api leaves
        api_spec_blob_key: Storage key of the imported spec for api nodes
        updated_at: ISO 8601 timestamp of the last modification
    """
    id: str
    space_id: str
    parent_id: Optional[str]
    type: DocumentType
    slug: str
    title: str
    rank: str
    icon_name: Optional[str] = None
    source_key: Optional[str] = None
    api_path: Optional[str] = None
    api_method: Optional[str] = None
    api_spec_blob_key: Optional[str] = None
    updated_at: str = ""

    @property
    def is_page_like(self) -> bool:
        """Check if this node produces a published page."""
        return self.type in PAGE_LIKE_TYPES

    @property
    def is_spec_managed(self) -> bool:
        """Check if this node is owned by an imported API spec."""
        return self.type in SPEC_MANAGED_TYPES


@dataclass
class Space:
    """A named, owner-scoped collection of documents.

    Attributes:
        id: Unique space identifier
        owner_id: Organization/project the space belongs to (the tenant)
        slug: URL segment, unique within the owner
        name: Display name
        icon_name: Optional icon shown in the space switcher
        description: Optional free-text description
    """
    id: str
    owner_id: str
    slug: str
    name: str
    icon_name: Optional[str] = None
    description: Optional[str] = None
