"""Unit tests for documents.document_service module."""

import pytest

from docpub.documents import DocumentService, SpaceService
from docpub.errors import DuplicateSlugError, NotFoundError, ValidationFailedError
from docpub.models import DocumentType


class TestDocumentService:
    """Shared fixtures for DocumentService tests."""

    @pytest.fixture
    def space(self, repository):
        return SpaceService(repository).create_space("org-1", "Guides")

    @pytest.fixture
    def service(self, repository):
        return DocumentService(repository)

    @pytest.fixture
    def group(self, repository, space):
        return repository.list_children(space.id, None)[0]


class TestCreateDocument(TestDocumentService):
    """Test create_document method."""

    def test_appends_with_increasing_ranks(self, service, space, group):
        """New documents go after their last sibling."""
        first = service.create_document(space.id, "Install", parent_id=group.id)
        second = service.create_document(space.id, "Configure", parent_id=group.id)
        assert first.rank < second.rank
        assert (first.slug, second.slug) == ("install", "configure")

    def test_slug_collision_suffixed(self, service, space, group):
        """Same-title siblings get suffixed slugs."""
        service.create_document(space.id, "Intro", parent_id=group.id)
        second = service.create_document(space.id, "Intro", parent_id=group.id)
        assert second.slug == "intro-1"

    def test_same_slug_allowed_under_other_parent(self, service, space, group):
        """Slugs are only unique among siblings."""
        page = service.create_document(space.id, "Intro", parent_id=group.id)
        nested = service.create_document(space.id, "Intro", parent_id=page.id)
        assert nested.slug == "intro"

    def test_stores_content(self, service, space, group, repository):
        """Initial content is persisted for pages."""
        content = {"type": "doc", "content": []}
        page = service.create_document(space.id, "Intro", parent_id=group.id, content=content)
        assert repository.get_content(page.id) == content

    def test_group_must_be_root(self, service, space, group):
        """Groups cannot be nested."""
        with pytest.raises(ValidationFailedError):
            service.create_document(space.id, "Nested", DocumentType.GROUP, parent_id=group.id)

    def test_api_types_rejected(self, service, space):
        """Api nodes are only created by importing a spec."""
        with pytest.raises(ValidationFailedError):
            service.create_document(space.id, "Op", DocumentType.API)

    def test_missing_space(self, service):
        """Unknown spaces raise NotFoundError."""
        with pytest.raises(NotFoundError):
            service.create_document("missing", "Intro")

    def test_parent_from_other_space(self, service, repository, group):
        """Parents must belong to the same space."""
        other = SpaceService(repository).create_space("org-1", "Other")
        with pytest.raises(ValidationFailedError):
            service.create_document(other.id, "Intro", parent_id=group.id)


class TestUpdateDocument(TestDocumentService):
    """Test update_document method."""

    def test_title_rederives_slug(self, service, space, group):
        """Renaming a page updates its slug."""
        page = service.create_document(space.id, "Intro", parent_id=group.id)
        updated = service.update_document(page.id, title="Quick Start")
        assert updated.slug == "quick-start"
        assert updated.title == "Quick Start"

    def test_explicit_slug_collision(self, service, space, group):
        """An explicit slug used by a sibling is rejected."""
        service.create_document(space.id, "Intro", parent_id=group.id)
        page = service.create_document(space.id, "Other", parent_id=group.id)
        with pytest.raises(DuplicateSlugError):
            service.update_document(page.id, slug="intro")

    def test_title_collision_suffixed(self, service, space, group):
        """A title collision is resolved with a suffix."""
        service.create_document(space.id, "Intro", parent_id=group.id)
        page = service.create_document(space.id, "Other", parent_id=group.id)
        assert service.update_document(page.id, title="Intro").slug == "intro-1"

    def test_clear_icon(self, service, space, group):
        """An empty icon name clears the icon."""
        page = service.create_document(space.id, "Intro", parent_id=group.id, icon_name="book")
        assert service.update_document(page.id, icon_name="").icon_name is None


class TestMoveDocument(TestDocumentService):
    """Test move_document method."""

    def test_move_between_siblings(self, service, space, group):
        """A page placed between two siblings sorts between them."""
        a = service.create_document(space.id, "A", parent_id=group.id)
        b = service.create_document(space.id, "B", parent_id=group.id)
        c = service.create_document(space.id, "C", parent_id=group.id)

        moved = service.move_document(c.id, group.id, before_id=a.id, after_id=b.id)

        assert a.rank < moved.rank < b.rank
        assert [d.title for d in service.list_tree(space.id)][1:] == ["A", "C", "B"]

    def test_move_to_front(self, service, space, group):
        """Giving only after_id places the page before that sibling."""
        a = service.create_document(space.id, "A", parent_id=group.id)
        b = service.create_document(space.id, "B", parent_id=group.id)
        moved = service.move_document(b.id, group.id, after_id=a.id)
        assert moved.rank < a.rank

    def test_non_adjacent_neighbors(self, service, space, group):
        """Neighbors that are not adjacent are rejected."""
        a = service.create_document(space.id, "A", parent_id=group.id)
        service.create_document(space.id, "B", parent_id=group.id)
        c = service.create_document(space.id, "C", parent_id=group.id)
        d = service.create_document(space.id, "D", parent_id=group.id)
        with pytest.raises(ValidationFailedError):
            service.move_document(d.id, group.id, before_id=a.id, after_id=c.id)

    def test_cycle_rejected(self, service, space, group):
        """A page cannot move under its own descendant."""
        parent = service.create_document(space.id, "Parent", parent_id=group.id)
        child = service.create_document(space.id, "Child", parent_id=parent.id)
        with pytest.raises(ValidationFailedError):
            service.move_document(parent.id, child.id)

    def test_reparent_suffixes_slug(self, service, space, group, repository):
        """Moving under a parent with a same-slug child suffixes the slug."""
        other = service.create_document(space.id, "Reference", parent_id=group.id)
        service.create_document(space.id, "Intro", parent_id=other.id)
        page = service.create_document(space.id, "Intro", parent_id=group.id)

        moved = service.move_document(page.id, other.id)

        assert moved.parent_id == other.id
        assert moved.slug == "intro-1"


class TestDeleteDocument(TestDocumentService):
    """Test delete_document method."""

    def test_deletes_subtree(self, service, space, group, repository):
        """Deleting a node removes all its descendants and content."""
        parent = service.create_document(space.id, "Parent", parent_id=group.id)
        child = service.create_document(space.id, "Child", parent_id=parent.id,
                                        content={"type": "doc", "content": []})
        service.create_document(space.id, "Grandchild", parent_id=child.id)

        removed = service.delete_document(group.id)

        assert removed == 4
        assert repository.list_documents(space.id) == []
        assert repository.get_content(child.id) is None


class TestSetContent(TestDocumentService):
    """Test set_content method."""

    def test_groups_have_no_content(self, service, group):
        """Content cannot be set on groups."""
        with pytest.raises(ValidationFailedError):
            service.set_content(group.id, {"type": "doc", "content": []})

    def test_replaces_content(self, service, space, group, repository):
        """Content is replaced for pages."""
        page = service.create_document(space.id, "Intro", parent_id=group.id)
        service.set_content(page.id, {"type": "doc", "content": [{"type": "paragraph"}]})
        assert repository.get_content(page.id)["content"] == [{"type": "paragraph"}]
