"""Space lifecycle: create with a seed group, rename, cascade delete."""

import logging
from typing import Optional

from docpub.clock import utc_now_iso
from docpub.errors import ConflictError
from docpub.models import Document, DocumentType, Space
from docpub.state import Repository

from .document_service import new_id
from .rank import INITIAL_RANK
from .slugs import SPACE_SLUG_MAX_LENGTH, slugify

logger = logging.getLogger(__name__)

SEED_GROUP_TITLE = "Getting Started"


class SpaceService:
    """Create and delete spaces within an owner."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def create_space(
        self,
        owner_id: str,
        name: str,
        slug: Optional[str] = None,
        icon_name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Space:
        """Create a space holding one seed root group.

        Raises:
            ConflictError: If the owner already has a space with the slug
        """
        space_slug = slugify(slug or name, SPACE_SLUG_MAX_LENGTH)
        with self.repository.transaction():
            if self.repository.find_space_by_slug(owner_id, space_slug) is not None:
                raise ConflictError(f"Space slug '{space_slug}' already in use")
            space = Space(
                id=new_id(),
                owner_id=owner_id,
                slug=space_slug,
                name=name,
                icon_name=icon_name,
                description=description,
            )
            self.repository.add_space(space)
            self.repository.add_document(Document(
                id=new_id(),
                space_id=space.id,
                parent_id=None,
                type=DocumentType.GROUP,
                slug=slugify(SEED_GROUP_TITLE),
                title=SEED_GROUP_TITLE,
                rank=INITIAL_RANK,
                updated_at=utc_now_iso(),
            ))

        logger.info(f"Created space '{name}' ({space.id}) for owner {owner_id}")
        return space

    def rename_space(self, space_id: str, name: str, slug: Optional[str] = None) -> Space:
        """Change a space's name and optionally its slug.

        Raises:
            ConflictError: If the new slug is used by another space of the owner
        """
        with self.repository.transaction():
            space = self.repository.get_space(space_id)
            if slug is not None:
                new_slug = slugify(slug, SPACE_SLUG_MAX_LENGTH)
                existing = self.repository.find_space_by_slug(space.owner_id, new_slug)
                if existing is not None and existing.id != space.id:
                    raise ConflictError(f"Space slug '{new_slug}' already in use")
                space.slug = new_slug
            space.name = name
            self.repository.add_space(space)
        return space

    def delete_space(self, space_id: str) -> int:
        """Delete a space and all its documents in one transaction.

        Returns:
            Number of documents deleted
        """
        with self.repository.transaction():
            self.repository.get_space(space_id)
            ids = [d.id for d in self.repository.list_documents(space_id)]
            removed = self.repository.delete_documents(ids)
            self.repository.delete_space(space_id)

        logger.info(f"Deleted space {space_id} with {removed} document(s)")
        return removed
