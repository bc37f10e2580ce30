"""Site data models.

A site binds a storage backend, a primary hostname, custom domains and the
ordered list of spaces selected for publishing.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Layout values accepted on a site
LAYOUT_SIDEBAR_DROPDOWN = "sidebar-dropdown"
LAYOUT_TABS = "tabs"

# Positions a navigation button can be rendered at
BUTTON_POSITIONS = ("sidebar_top", "sidebar_bottom", "topbar_left", "topbar_right")

# Roles a member can hold within an owner
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


@dataclass
class SiteButton:
    """A navigation button rendered by the docs site."""
    id: str
    label: str
    href: str
    position: str = "sidebar_top"
    icon_name: Optional[str] = None
    target: str = "_self"
    rank: int = 0


@dataclass
class SiteTheme:
    """Theme tokens written to the per-build theme artifact."""
    light_tokens: Dict[str, str] = field(default_factory=dict)
    dark_tokens: Dict[str, str] = field(default_factory=dict)
    vars: Dict[str, str] = field(default_factory=dict)


@dataclass
class Site:
    """One published documentation site per project.

    Attributes:
        id: Unique site identifier
        owner_id: Organization/project that owns the site (blob tenant)
        name: Display name
        slug: URL-safe site slug
        store_id: Identifier of the bound storage backend
        base_url: Public base URL of the storage backend
        primary_host: Allocated primary hostname
        custom_domains: Bound custom hostnames
        selected_space_ids: Ordered space ids configured for publishing
        layout: Navigation layout (sidebar-dropdown or tabs)
        last_build_id: Build currently live (None before first publish)
        last_published_at: ISO 8601 timestamp of the last successful build
    """
    id: str
    owner_id: str
    name: str
    slug: str
    store_id: str
    base_url: str
    primary_host: str = ""
    custom_domains: List[str] = field(default_factory=list)
    selected_space_ids: List[str] = field(default_factory=list)
    layout: str = LAYOUT_SIDEBAR_DROPDOWN
    logo_url_light: Optional[str] = None
    logo_url_dark: Optional[str] = None
    favicon_url: Optional[str] = None
    buttons: List[SiteButton] = field(default_factory=list)
    theme: SiteTheme = field(default_factory=SiteTheme)
    last_build_id: Optional[str] = None
    last_published_at: Optional[str] = None

    @property
    def hosts(self) -> List[str]:
        """All hostnames bound to the site, primary first."""
        return [self.primary_host, *self.custom_domains]


@dataclass
class Membership:
    """Role of an actor within an owner (organization/project)."""
    owner_id: str
    actor_id: str
    role: str
