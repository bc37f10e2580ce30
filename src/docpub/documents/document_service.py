"""Create, update, move and delete documents in a space's tree.

Every mutation runs inside a Repository transaction so slug uniqueness and
subtree deletion are applied atomically.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from docpub.clock import utc_now_iso
from docpub.errors import DuplicateSlugError, ValidationFailedError
from docpub.models import Document, DocumentType, ROOT_ONLY_TYPES
from docpub.state import Repository

from .rank import rank_after, rank_between
from .slugs import DOCUMENT_SLUG_MAX_LENGTH, slugify, unique_slug

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def collect_subtree_ids(repository: Repository, document: Document) -> List[str]:
    """Ids of ``document`` and all its descendants, collected with a stack."""
    children: Dict[str, List[str]] = {}
    for candidate in repository.list_documents(document.space_id):
        if candidate.parent_id is not None:
            children.setdefault(candidate.parent_id, []).append(candidate.id)

    collected: List[str] = []
    stack = [document.id]
    while stack:
        current = stack.pop()
        collected.append(current)
        stack.extend(children.get(current, []))
    return collected


class DocumentService:
    """Editing operations over the document tree.

    Slugs are unique among siblings. Titles and parent moves re-derive the
    slug and resolve collisions with a numeric suffix; an explicit slug that
    collides is rejected. Groups may only live at root level, and nodes
    owned by an imported API spec are not editable here.

    Example:
        >>> service = DocumentService(repo)
        >>> doc = service.create_document(space.id, "Quick start", parent_id=group.id)
        >>> doc.slug
        'quick-start'
    """

    def __init__(self, repository: Repository):
        self.repository = repository

    def create_document(
        self,
        space_id: str,
        title: str,
        doc_type: DocumentType = DocumentType.PAGE,
        parent_id: Optional[str] = None,
        icon_name: Optional[str] = None,
        content: Optional[Dict[str, Any]] = None,
        source_key: Optional[str] = None,
    ) -> Document:
        """Create a document at the end of its parent's children.

        Raises:
            NotFoundError: If the space or parent does not exist
            ValidationFailedError: If the placement is not allowed
        """
        doc_type = DocumentType(doc_type)
        if doc_type not in (DocumentType.PAGE, DocumentType.GROUP):
            raise ValidationFailedError(
                f"{doc_type.value} documents are created by importing an API spec", "type"
            )

        with self.repository.transaction():
            self.repository.get_space(space_id)
            self._check_placement(space_id, doc_type, parent_id)

            siblings = self.repository.list_children(space_id, parent_id)
            slug = unique_slug(
                slugify(title, DOCUMENT_SLUG_MAX_LENGTH), (s.slug for s in siblings)
            )
            rank = rank_after(siblings[-1].rank if siblings else None)
            document = Document(
                id=new_id(),
                space_id=space_id,
                parent_id=parent_id,
                type=doc_type,
                slug=slug,
                title=title,
                rank=rank,
                icon_name=icon_name,
                source_key=source_key,
                updated_at=utc_now_iso(),
            )
            self.repository.add_document(document)
            if content is not None and doc_type == DocumentType.PAGE:
                self.repository.set_content(document.id, content)

        logger.info(f"Created {doc_type.value} '{title}' ({document.id}) in space {space_id}")
        return document

    def update_document(
        self,
        document_id: str,
        title: Optional[str] = None,
        slug: Optional[str] = None,
        icon_name: Optional[str] = None,
    ) -> Document:
        """Patch a document's title, slug or icon.

        A new title re-derives the slug unless an explicit slug is given.

        Raises:
            NotFoundError: If the document does not exist
            DuplicateSlugError: If an explicit slug is used by a sibling
            ValidationFailedError: If the document is spec-managed
        """
        with self.repository.transaction():
            document = self._get_editable(document_id)
            siblings = self._sibling_slugs(document, document.parent_id)

            if slug is not None:
                new_slug = slugify(slug, DOCUMENT_SLUG_MAX_LENGTH)
                if new_slug in siblings:
                    raise DuplicateSlugError(new_slug, document.parent_id)
                document.slug = new_slug
            elif title is not None and title != document.title:
                document.slug = unique_slug(slugify(title, DOCUMENT_SLUG_MAX_LENGTH), siblings)

            if title is not None:
                document.title = title
            if icon_name is not None:
                document.icon_name = icon_name or None
            document.updated_at = utc_now_iso()
            self.repository.save_document(document)

        logger.info(f"Updated document {document_id} (slug '{document.slug}')")
        return document

    def move_document(
        self,
        document_id: str,
        parent_id: Optional[str],
        before_id: Optional[str] = None,
        after_id: Optional[str] = None,
    ) -> Document:
        """Move a document under ``parent_id`` between two siblings.

        Args:
            document_id: Document to move
            parent_id: New parent (None for root level)
            before_id: Sibling that should precede the document
            after_id: Sibling that should follow the document

        With neither neighbor given the document goes to the end.

        Raises:
            ValidationFailedError: If the move would create a cycle, break
                placement rules or the neighbors are not adjacent siblings
        """
        with self.repository.transaction():
            document = self._get_editable(document_id)
            self._check_placement(document.space_id, document.type, parent_id)
            if parent_id is not None and parent_id in collect_subtree_ids(self.repository, document):
                raise ValidationFailedError("cannot move a document into its own subtree", "parent_id")

            siblings = [
                d for d in self.repository.list_children(document.space_id, parent_id)
                if d.id != document.id
            ]
            document.rank = self._rank_for_position(siblings, before_id, after_id)

            if parent_id != document.parent_id:
                taken = self._sibling_slugs(document, parent_id)
                document.slug = unique_slug(document.slug, taken)
                document.parent_id = parent_id

            document.updated_at = utc_now_iso()
            self.repository.save_document(document)

        logger.info(f"Moved document {document_id} under {parent_id or 'root'} (rank {document.rank})")
        return document

    def delete_document(self, document_id: str) -> int:
        """Delete a document and its entire subtree in one transaction.

        Returns:
            Number of documents deleted
        """
        with self.repository.transaction():
            document = self.repository.get_document(document_id)
            ids = collect_subtree_ids(self.repository, document)
            removed = self.repository.delete_documents(ids)

        logger.info(f"Deleted document {document_id} and {removed - 1} descendant(s)")
        return removed

    def set_content(self, document_id: str, structured_doc: Dict[str, Any]) -> Document:
        """Replace the persisted structured content of a page."""
        with self.repository.transaction():
            document = self._get_editable(document_id)
            if document.type != DocumentType.PAGE:
                raise ValidationFailedError(f"{document.type.value} documents have no content", "content")
            self.repository.set_content(document_id, structured_doc)
            document.updated_at = utc_now_iso()
            self.repository.save_document(document)
        return document

    def list_tree(self, space_id: str) -> List[Document]:
        """Documents of a space in depth-first, rank order."""
        documents = self.repository.list_documents(space_id)
        children: Dict[Optional[str], List[Document]] = {}
        for document in documents:
            children.setdefault(document.parent_id, []).append(document)

        ordered: List[Document] = []
        stack = list(reversed(children.get(None, [])))
        while stack:
            node = stack.pop()
            ordered.append(node)
            stack.extend(reversed(children.get(node.id, [])))
        return ordered

    def _get_editable(self, document_id: str) -> Document:
        document = self.repository.get_document(document_id)
        if document.is_spec_managed:
            raise ValidationFailedError(
                f"{document.type.value} documents are managed by their API spec", "document_id"
            )
        return document

    def _check_placement(self, space_id: str, doc_type: DocumentType, parent_id: Optional[str]) -> None:
        if parent_id is None:
            return
        if doc_type in ROOT_ONLY_TYPES:
            raise ValidationFailedError(f"{doc_type.value} documents must be at root level", "parent_id")
        parent = self.repository.get_document(parent_id)
        if parent.space_id != space_id:
            raise ValidationFailedError("parent belongs to another space", "parent_id")
        if parent.type not in (DocumentType.PAGE, DocumentType.GROUP):
            raise ValidationFailedError(
                f"documents cannot be placed under {parent.type.value} nodes", "parent_id"
            )

    def _sibling_slugs(self, document: Document, parent_id: Optional[str]) -> List[str]:
        return [
            d.slug for d in self.repository.list_children(document.space_id, parent_id)
            if d.id != document.id
        ]

    @staticmethod
    def _rank_for_position(
        siblings: List[Document],
        before_id: Optional[str],
        after_id: Optional[str],
    ) -> str:
        by_id = {s.id: i for i, s in enumerate(siblings)}
        for neighbor in (before_id, after_id):
            if neighbor is not None and neighbor not in by_id:
                raise ValidationFailedError(f"{neighbor} is not a sibling at the target position", "position")

        if before_id is None and after_id is None:
            return rank_after(siblings[-1].rank if siblings else None)

        if before_id is not None:
            index = by_id[before_id]
            if after_id is not None and by_id[after_id] != index + 1:
                raise ValidationFailedError("neighbors are not adjacent", "position")
            upper = siblings[index + 1].rank if index + 1 < len(siblings) else None
            return rank_between(siblings[index].rank, upper)

        index = by_id[after_id]
        lower = siblings[index - 1].rank if index > 0 else None
        return rank_between(lower, siblings[index].rank)
