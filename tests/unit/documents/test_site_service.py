"""Unit tests for documents.site_service module."""

import re

import pytest

from docpub.documents import SiteService, SpaceService, allocate_primary_host
from docpub.errors import ConflictError, ValidationFailedError
from docpub.models import LAYOUT_TABS, SiteButton, SiteTheme


class TestAllocatePrimaryHost:
    """Test cases for allocate_primary_host."""

    def test_format(self):
        """Hosts are '{slug}-{6 hex}.{root}'."""
        assert re.fullmatch(r"acme-docs-[0-9a-f]{6}\.docpub\.site", allocate_primary_host("acme-docs"))

    def test_custom_root(self):
        """The root domain is configurable."""
        assert allocate_primary_host("x", "docs.test").endswith(".docs.test")


class TestSiteService:
    """Test cases for SiteService."""

    @pytest.fixture
    def service(self, repository):
        return SiteService(repository)

    @pytest.fixture
    def site(self, service):
        return service.create_site("org-1", "Acme Docs", "store-1", "https://cdn.example.com/")

    def test_create_site(self, site):
        """Sites get a slug, a primary host and a trimmed base URL."""
        assert site.slug == "acme-docs"
        assert site.primary_host.startswith("acme-docs-")
        assert site.base_url == "https://cdn.example.com"
        assert site.selected_space_ids == []

    def test_duplicate_site_slug(self, service, site):
        """Site slugs are unique within an owner."""
        with pytest.raises(ConflictError):
            service.create_site("org-1", "Acme Docs", "store-1", "https://cdn.example.com")

    def test_select_spaces_keeps_order(self, service, site, repository):
        """Selection keeps the given order and drops duplicates."""
        spaces = SpaceService(repository)
        guides = spaces.create_space("org-1", "Guides")
        reference = spaces.create_space("org-1", "Reference")

        updated = service.select_spaces(site.id, [reference.id, guides.id, reference.id])

        assert updated.selected_space_ids == [reference.id, guides.id]

    def test_select_foreign_space(self, service, site, repository):
        """Spaces of another owner cannot be selected."""
        foreign = SpaceService(repository).create_space("org-2", "Guides")
        with pytest.raises(ValidationFailedError):
            service.select_spaces(site.id, [foreign.id])

    def test_select_missing_space(self, service, site):
        """Unknown space ids are rejected."""
        with pytest.raises(ValidationFailedError):
            service.select_spaces(site.id, ["missing"])

    def test_add_domain(self, service, site):
        """Custom domains are normalized and bound once."""
        service.add_domain(site.id, "Docs.Acme.io")
        updated = service.add_domain(site.id, "docs.acme.io")
        assert updated.custom_domains == ["docs.acme.io"]
        assert updated.hosts[1] == "docs.acme.io"

    def test_domain_unique_across_sites(self, service, site):
        """A domain bound to one site cannot be bound to another."""
        other = service.create_site("org-1", "Other", "store-1", "https://cdn.example.com")
        service.add_domain(site.id, "docs.acme.io")
        with pytest.raises(ConflictError):
            service.add_domain(other.id, "docs.acme.io")

    def test_invalid_domain(self, service, site):
        """Malformed domains are rejected."""
        with pytest.raises(ValidationFailedError):
            service.add_domain(site.id, "not a domain")

    def test_remove_domain(self, service, site):
        """Removing unbinds the domain; unknown domains are ignored."""
        service.add_domain(site.id, "docs.acme.io")
        service.remove_domain(site.id, "other.acme.io")
        assert service.remove_domain(site.id, "docs.acme.io").custom_domains == []

    def test_update_appearance(self, service, site):
        """Layout, branding and theme are stored on the site."""
        theme = SiteTheme(light_tokens={"primary": "#112233"})
        updated = service.update_appearance(
            site.id, layout=LAYOUT_TABS, logo_url_light="https://a/logo.svg", theme=theme,
        )
        assert updated.layout == LAYOUT_TABS
        assert updated.logo_url_light == "https://a/logo.svg"
        assert updated.theme.light_tokens == {"primary": "#112233"}

    def test_unknown_layout(self, service, site):
        """Unknown layouts are rejected."""
        with pytest.raises(ValidationFailedError):
            service.update_appearance(site.id, layout="grid")

    def test_set_buttons_validates_position(self, service, site):
        """Buttons need a known position, a label and an href."""
        with pytest.raises(ValidationFailedError):
            service.set_buttons(site.id, [SiteButton(id="b1", label="Home", href="/", position="footer")])
        with pytest.raises(ValidationFailedError):
            service.set_buttons(site.id, [SiteButton(id="b1", label="", href="/")])
        updated = service.set_buttons(site.id, [SiteButton(id="b1", label="Home", href="/")])
        assert updated.buttons[0].position == "sidebar_top"
