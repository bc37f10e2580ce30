"""Unit tests for publish.manifest_builder module."""

import pytest

from docpub.models import LAYOUT_TABS, SiteButton, SiteTheme
from docpub.publish import ManifestBuilder, PageRef, RepositoryContentSource, TreeFlattener
from docpub.publish.manifest_builder import CONTENT_VERSION

PUBLISHED_AT = 1700000000000


class TestManifestBuilder:
    """Test cases for ManifestBuilder."""

    @pytest.fixture
    def flattened(self, seeded, repository):
        source = RepositoryContentSource(repository)
        return TreeFlattener().flatten(source.list_pages(seeded.site.selected_space_ids))

    @pytest.fixture
    def page_refs(self, flattened):
        return {
            page.id: PageRef(hash=f"h{i}", key=f"orgs/org-1/blobs/h{i}.json", size=10 + i, is_new=i % 2 == 0)
            for i, page in enumerate(flattened.flat_pages)
        }

    def test_manifest_shape(self, flattened, page_refs, seeded):
        """The manifest carries versions, routing, nav, counts and pages."""
        # Act
        artifacts = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT)
        manifest = artifacts.manifest

        # Assert
        assert manifest["version"] == 3
        assert manifest["contentVersion"] == CONTENT_VERSION
        assert manifest["buildId"] == "b1"
        assert manifest["publishedAt"] == PUBLISHED_AT
        assert manifest["routing"] == {"basePath": "/", "defaultSpace": "guides"}
        assert manifest["counts"] == {"pages": 4, "newBlobs": 2, "reusedBlobs": 2}
        assert list(manifest["pages"]) == [
            "/guides/getting-started/install",
            "/guides/getting-started/configure",
            "/guides/getting-started/upgrade",
            "/reference/overview",
        ]

    def test_page_entries(self, flattened, page_refs, seeded):
        """Page entries reference their blob and neighbors within the space."""
        manifest = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).manifest
        install = manifest["pages"]["/guides/getting-started/install"]

        assert install["title"] == "Install"
        assert install["space"] == "guides"
        assert install["blob"] == "orgs/org-1/blobs/h0.json"
        assert install["hash"] == "h0"
        assert install["kind"] == "page"
        assert install["neighbors"] == [
            "/guides/getting-started/configure",
            "/guides/getting-started/upgrade",
        ]
        assert "previous" not in install
        assert install["next"] == {"title": "Configure", "route": "/guides/getting-started/configure"}
        assert isinstance(install["lastModified"], int)

        overview = manifest["pages"]["/reference/overview"]
        assert overview["neighbors"] == []
        assert "previous" not in overview

    def test_nav_spaces(self, flattened, page_refs, seeded):
        """Nav spaces are ordered and point at their first page."""
        manifest = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).manifest
        guides, reference = manifest["nav"]["spaces"]
        assert guides["order"] == 1
        assert guides["style"] == "dropdown"
        assert guides["entry"] == "/guides/getting-started/install"
        assert reference["entry"] == "/reference/overview"

    def test_tabs_layout(self, flattened, page_refs, seeded):
        """The tabs layout marks spaces as tabs."""
        seeded.site.layout = LAYOUT_TABS
        manifest = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).manifest
        assert manifest["nav"]["spaces"][0]["style"] == "tab"

    def test_branding_falls_back_to_light_logo(self, flattened, page_refs, seeded):
        """The dark logo defaults to the light logo."""
        seeded.site.logo_url_light = "https://a/logo.svg"
        seeded.site.favicon_url = "https://a/favicon.ico"
        site = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).manifest["site"]
        assert site["branding"]["logo"] == {"light": "https://a/logo.svg", "dark": "https://a/logo.svg"}
        assert site["branding"]["favicon"] == {"url": "https://a/favicon.ico"}

    def test_tree_and_buttons(self, flattened, page_refs, seeded):
        """The tree nests items per space and groups buttons by position."""
        seeded.site.buttons = [
            SiteButton(id="b2", label="GitHub", href="https://github.com", position="topbar_right", rank=1),
            SiteButton(id="b1", label="Home", href="/", position="topbar_right", rank=0),
        ]
        tree = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).tree

        assert tree["version"] == 2
        assert tree["siteId"] == seeded.site.id
        assert [s["space"]["slug"] for s in tree["spaces"]] == ["guides", "reference"]
        group = tree["spaces"][0]["items"][0]
        assert group["kind"] == "group"
        assert [c["route"] for c in group["children"]] == [
            "/guides/getting-started/install",
            "/guides/getting-started/configure",
            "/guides/getting-started/upgrade",
        ]
        assert [b["id"] for b in tree["buttons"]["topbar_right"]] == ["b1", "b2"]
        assert tree["buttons"]["sidebar_top"] == []
        assert "style" not in tree["nav"]["spaces"][0]

    def test_theme(self, flattened, page_refs, seeded):
        """The theme payload carries light and dark tokens."""
        seeded.site.theme = SiteTheme(light_tokens={"a": "1"}, dark_tokens={"a": "2"}, vars={"radius": "4px"})
        theme = ManifestBuilder().build(flattened, page_refs, seeded.site, "b1", PUBLISHED_AT).theme
        assert theme == {
            "version": 1,
            "light": {"tokens": {"a": "1"}, "vars": {"radius": "4px"}},
            "dark": {"tokens": {"a": "2"}},
        }

    def test_missing_page_ref(self, flattened, seeded):
        """Every flattened page needs a blob reference."""
        with pytest.raises(KeyError):
            ManifestBuilder().build(flattened, {}, seeded.site, "b1", PUBLISHED_AT)

    def test_empty_site_defaults(self, seeded):
        """A site with no spaces falls back to the default space."""
        manifest = ManifestBuilder().build(TreeFlattener().flatten([]), {}, seeded.site, "b1", PUBLISHED_AT).manifest
        assert manifest["routing"]["defaultSpace"] == "docs"
        assert manifest["counts"] == {"pages": 0, "newBlobs": 0, "reusedBlobs": 0}
