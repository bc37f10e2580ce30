"""Site configuration: creation, space selection, domains and appearance."""

import logging
import secrets
from typing import Dict, List, Optional

from docpub.errors import ConflictError, ValidationFailedError
from docpub.hosts import validate_domain
from docpub.models import BUTTON_POSITIONS, LAYOUT_SIDEBAR_DROPDOWN, LAYOUT_TABS, Site, SiteButton, SiteTheme
from docpub.state import Repository

from .document_service import new_id
from .slugs import SPACE_SLUG_MAX_LENGTH, slugify

logger = logging.getLogger(__name__)

DEFAULT_ROOT_DOMAIN = "docpub.site"

LAYOUTS = (LAYOUT_SIDEBAR_DROPDOWN, LAYOUT_TABS)


def allocate_primary_host(site_slug: str, root_domain: str = DEFAULT_ROOT_DOMAIN) -> str:
    """Allocate a hostname of the form ``{slug}-{6 hex}.{root}``."""
    return f"{site_slug or 'site'}-{secrets.token_hex(3)}.{root_domain}"


class SiteService:
    """Manage sites and the configuration a publish snapshots.

    Example:
        >>> sites = SiteService(repo)
        >>> site = sites.create_site("org-1", "Acme Docs", "store-1", "https://blobs.example.com")
        >>> sites.select_spaces(site.id, [guides.id, reference.id])
    """

    def __init__(self, repository: Repository, root_domain: str = DEFAULT_ROOT_DOMAIN):
        self.repository = repository
        self.root_domain = root_domain

    def create_site(
        self,
        owner_id: str,
        name: str,
        store_id: str,
        base_url: str,
        slug: Optional[str] = None,
        site_id: Optional[str] = None,
    ) -> Site:
        """Create a site with a freshly allocated primary hostname.

        Raises:
            ConflictError: If the owner already has a site with the slug
        """
        site_slug = slugify(slug or name, SPACE_SLUG_MAX_LENGTH)
        with self.repository.transaction():
            if self.repository.find_site_by_slug(owner_id, site_slug) is not None:
                raise ConflictError(f"Site slug '{site_slug}' already in use")
            site = Site(
                id=site_id or new_id(),
                owner_id=owner_id,
                name=name,
                slug=site_slug,
                store_id=store_id,
                base_url=base_url.rstrip('/'),
                primary_host=allocate_primary_host(site_slug, self.root_domain),
            )
            self.repository.add_site(site)

        logger.info(f"Created site '{name}' ({site.id}) at {site.primary_host}")
        return site

    def select_spaces(self, site_id: str, space_ids: List[str]) -> Site:
        """Replace the ordered list of spaces the site publishes.

        Raises:
            ValidationFailedError: If a space is missing or owned by someone else
        """
        ordered = list(dict.fromkeys(space_ids))
        with self.repository.transaction():
            site = self.repository.get_site(site_id)
            spaces = self.repository.get_spaces(ordered)
            if len(spaces) != len(ordered) or any(s.owner_id != site.owner_id for s in spaces):
                raise ValidationFailedError(
                    "spaces must exist and belong to the site's owner", "space_ids"
                )
            site = self.repository.update_site(site_id, selected_space_ids=ordered)

        logger.info(f"Site {site_id} now publishes {len(ordered)} space(s)")
        return site

    def add_domain(self, site_id: str, domain: str) -> Site:
        """Bind a custom domain to the site.

        Raises:
            ValidationFailedError: If the domain is malformed
            ConflictError: If another site already uses the domain
        """
        host = validate_domain(domain)
        with self.repository.transaction():
            site = self.repository.get_site(site_id)
            other = self.repository.find_site_by_host(host)
            if other is not None and other.id != site_id:
                raise ConflictError(f"Domain {host} is bound to site {other.id}")
            if host == site.primary_host or host in site.custom_domains:
                return site
            site = self.repository.update_site(site_id, custom_domains=[*site.custom_domains, host])

        logger.info(f"Bound domain {host} to site {site_id}")
        return site

    def remove_domain(self, site_id: str, domain: str) -> Site:
        """Unbind a custom domain; unknown domains are ignored."""
        host = validate_domain(domain)
        with self.repository.transaction():
            site = self.repository.get_site(site_id)
            remaining = [d for d in site.custom_domains if d != host]
            site = self.repository.update_site(site_id, custom_domains=remaining)
        logger.info(f"Removed domain {host} from site {site_id}")
        return site

    def update_appearance(
        self,
        site_id: str,
        layout: Optional[str] = None,
        logo_url_light: Optional[str] = None,
        logo_url_dark: Optional[str] = None,
        favicon_url: Optional[str] = None,
        theme: Optional[SiteTheme] = None,
    ) -> Site:
        """Update layout, branding and theme used by the next publish.

        Raises:
            ValidationFailedError: If the layout is unknown
        """
        changes: Dict[str, object] = {}
        if layout is not None:
            if layout not in LAYOUTS:
                raise ValidationFailedError(f"unknown layout {layout!r}", "layout")
            changes['layout'] = layout
        if logo_url_light is not None:
            changes['logo_url_light'] = logo_url_light or None
        if logo_url_dark is not None:
            changes['logo_url_dark'] = logo_url_dark or None
        if favicon_url is not None:
            changes['favicon_url'] = favicon_url or None
        if theme is not None:
            changes['theme'] = theme
        return self.repository.update_site(site_id, **changes)

    def set_buttons(self, site_id: str, buttons: List[SiteButton]) -> Site:
        """Replace the site's navigation buttons.

        Raises:
            ValidationFailedError: If a button has an unknown position
        """
        for button in buttons:
            if button.position not in BUTTON_POSITIONS:
                raise ValidationFailedError(f"unknown button position {button.position!r}", "position")
            if not button.label or not button.href:
                raise ValidationFailedError("buttons need a label and an href", "buttons")
        return self.repository.update_site(site_id, buttons=list(buttons))
