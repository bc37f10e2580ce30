"""Unit tests for docpub.models package."""

from docpub.models import (
    BUILD_TRANSITIONS,
    Build,
    BuildOperation,
    BuildStatus,
    Document,
    DocumentType,
    Site,
)


class TestDocument:
    """Test cases for Document."""

    def _doc(self, doc_type):
        return Document(
            id="d1", space_id="s1", parent_id=None, type=doc_type,
            slug="intro", title="Intro", rank="i",
        )

    def test_page_like_types(self):
        """Pages and api leaves produce published pages."""
        assert self._doc(DocumentType.PAGE).is_page_like
        assert self._doc(DocumentType.API).is_page_like
        assert not self._doc(DocumentType.GROUP).is_page_like
        assert not self._doc(DocumentType.API_SPEC).is_page_like
        assert not self._doc(DocumentType.API_TAG).is_page_like

    def test_spec_managed_types(self):
        """Api leaves and tags are owned by their spec."""
        assert self._doc(DocumentType.API).is_spec_managed
        assert self._doc(DocumentType.API_TAG).is_spec_managed
        assert not self._doc(DocumentType.PAGE).is_spec_managed

    def test_document_type_from_string(self):
        """Document types round-trip through their string values."""
        assert DocumentType("api_spec") is DocumentType.API_SPEC
        assert DocumentType.GROUP == "group"


class TestBuildStatus:
    """Test cases for BuildStatus."""

    def test_terminal_and_active(self):
        """Queued and running are active; success and failed are terminal."""
        assert BuildStatus.QUEUED.is_active
        assert BuildStatus.RUNNING.is_active
        assert BuildStatus.SUCCESS.is_terminal
        assert BuildStatus.FAILED.is_terminal
        assert not BuildStatus.RUNNING.is_terminal
        assert not BuildStatus.FAILED.is_active

    def test_terminal_states_have_no_transitions(self):
        """No transition leaves a terminal state."""
        assert BUILD_TRANSITIONS[BuildStatus.SUCCESS] == set()
        assert BUILD_TRANSITIONS[BuildStatus.FAILED] == set()
        assert BuildStatus.SUCCESS not in BUILD_TRANSITIONS[BuildStatus.QUEUED]

    def test_build_defaults(self):
        """A new build has zeroed counters and no target."""
        build = Build(
            site_id="s1", build_id="b1", owner_id="o1",
            operation=BuildOperation.PUBLISH, status=BuildStatus.QUEUED, actor_id="a1",
        )
        assert build.items_total == 0
        assert build.pages_written == 0
        assert build.target_build_id is None
        assert build.selected_space_ids_snapshot == ()


class TestSite:
    """Test cases for Site."""

    def test_hosts_primary_first(self):
        """Primary host comes before custom domains."""
        site = Site(
            id="s1", owner_id="o1", name="Docs", slug="docs", store_id="store",
            base_url="https://cdn", primary_host="docs-abc123.docpub.site",
            custom_domains=["docs.acme.io"],
        )
        assert site.hosts == ["docs-abc123.docpub.site", "docs.acme.io"]
