"""Domain records shared across the publish pipeline."""

from docpub.models.blobs import BlobPutResult, ContentBlob
from docpub.models.builds import (
    BUILD_TRANSITIONS,
    Build,
    BuildOperation,
    BuildProgress,
    BuildStatus,
)
from docpub.models.documents import (
    PAGE_LIKE_TYPES,
    ROOT_ONLY_TYPES,
    SPEC_MANAGED_TYPES,
    Document,
    DocumentType,
    Space,
)
from docpub.models.sites import (
    BUTTON_POSITIONS,
    LAYOUT_SIDEBAR_DROPDOWN,
    LAYOUT_TABS,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_OWNER,
    Membership,
    Site,
    SiteButton,
    SiteTheme,
)

__all__ = [
    'BlobPutResult',
    'ContentBlob',
    'BUILD_TRANSITIONS',
    'Build',
    'BuildOperation',
    'BuildProgress',
    'BuildStatus',
    'PAGE_LIKE_TYPES',
    'ROOT_ONLY_TYPES',
    'SPEC_MANAGED_TYPES',
    'Document',
    'DocumentType',
    'Space',
    'BUTTON_POSITIONS',
    'LAYOUT_SIDEBAR_DROPDOWN',
    'LAYOUT_TABS',
    'ROLE_ADMIN',
    'ROLE_MEMBER',
    'ROLE_OWNER',
    'Membership',
    'Site',
    'SiteButton',
    'SiteTheme',
]
