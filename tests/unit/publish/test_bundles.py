"""Unit tests for publish.bundles module."""

from unittest.mock import Mock

import pytest

from docpub.models import DocumentType
from docpub.publish import FlatPage, PageBundler
from docpub.storage import serialize_json
from tests.fixtures.sample_content import SAMPLE_DOC_INSTALL


def flat_page(title="Install", doc_type=DocumentType.PAGE, **extra):
    return FlatPage(
        id="p1", title=title, slug=title.lower(), trail=["getting-started", title.lower()],
        space_id="s1", space_slug="guides", route=f"/guides/getting-started/{title.lower()}",
        type=doc_type, **extra,
    )


class TestPageBundler:
    """Test cases for PageBundler."""

    @pytest.fixture
    def source(self):
        source = Mock()
        source.load_content.return_value = SAMPLE_DOC_INSTALL
        return source

    def test_page_bundle(self, source):
        """Page bundles hold rendered output and the source document."""
        # Act
        bundle = PageBundler(source).bundle(flat_page())

        # Assert
        assert bundle["id"] == "p1"
        assert bundle["type"] == "page"
        assert bundle["rendered"]["html"].startswith('<h1 id="install">Install</h1>')
        assert bundle["rendered"]["toc"] == [{"level": 1, "text": "Install", "id": "install"}]
        assert bundle["plain"].startswith("Install Run")
        assert bundle["markdown"].startswith("# Install")
        assert bundle["source"] == SAMPLE_DOC_INSTALL
        source.load_content.assert_called_once_with("p1")

    def test_bundle_excludes_navigation_fields(self, source):
        """Renames and moves do not change the bundle bytes."""
        first = PageBundler(source).bundle(flat_page("Install"))
        second = PageBundler(source).bundle(flat_page("Setup", icon_name="rocket"))
        assert serialize_json(first) == serialize_json(second)

    def test_missing_content_is_empty(self, source):
        """Pages without content publish an empty document."""
        source.load_content.return_value = None
        bundle = PageBundler(source).bundle(flat_page())
        assert bundle["source"] == {"type": "doc", "content": []}
        assert bundle["rendered"] == {"html": "", "toc": []}

    def test_load_failure_recovered(self, source):
        """A failing content load publishes empty content."""
        source.load_content.side_effect = OSError("disk gone")
        bundle = PageBundler(source).bundle(flat_page())
        assert bundle["rendered"]["html"] == ""
        assert bundle["plain"] == ""

    def test_render_failure_recovered(self, source):
        """A failing renderer publishes empty content."""
        renderer = Mock()
        renderer.render.side_effect = RuntimeError("boom")
        bundle = PageBundler(source, renderer=renderer).bundle(flat_page())
        assert bundle["rendered"] == {"html": "", "toc": []}
        assert bundle["source"] == SAMPLE_DOC_INSTALL

    def test_api_bundle(self, source):
        """Api bundles reference the operation and skip rendering."""
        page = flat_page(
            "List", DocumentType.API,
            api_path="/pets", api_method="GET", api_spec_blob_key="orgs/o/blobs/h.json",
        )
        bundle = PageBundler(source).bundle(page)
        assert bundle["type"] == "api"
        assert bundle["apiPath"] == "/pets"
        assert bundle["apiMethod"] == "GET"
        assert bundle["apiSpecBlobKey"] == "orgs/o/blobs/h.json"
        assert bundle["source"] == {"type": "api", "content": []}
        source.load_content.assert_not_called()
