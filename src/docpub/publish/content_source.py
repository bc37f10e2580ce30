"""Content sources the publish pipeline reads documents from.

A content source yields the selected spaces with their document trees and
the structured content of each page. The orchestrator depends only on this
interface: the editor-backed source reads the Repository, the
directory-backed source reads a checked-out content repository.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import yaml

from docpub.content_renderer import html_to_document
from docpub.documents.rank import rank_after
from docpub.documents.slugs import SPACE_SLUG_MAX_LENGTH, slugify, unique_slug
from docpub.errors import NotFoundError, ValidationFailedError
from docpub.models import Document, DocumentType, Space
from docpub.state import Repository

from .models import SpaceContent

logger = logging.getLogger(__name__)

INDEX_FILENAME = "docpub.yaml"


class ContentSource(ABC):
    """Capability every content source provides."""

    @abstractmethod
    def list_pages(self, space_ids: List[str]) -> List[SpaceContent]:
        """Selected spaces with their documents, in the given order.

        Ids that do not resolve to a space are skipped.
        """

    @abstractmethod
    def load_content(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Structured content of a page, or None when it has none."""


class RepositoryContentSource(ContentSource):
    """Editor-backed source reading persisted documents and content."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def list_pages(self, space_ids: List[str]) -> List[SpaceContent]:
        return [
            SpaceContent(space=space, documents=self.repository.list_documents(space.id))
            for space in self.repository.get_spaces(list(space_ids))
        ]

    def load_content(self, document_id: str) -> Optional[Dict[str, Any]]:
        return self.repository.get_content(document_id)


class DirectoryContentSource(ContentSource):
    """Repository-backed source reading a directory with a docpub.yaml index.

    The index lists spaces and their nested items::

        spaces:
          - slug: guides
            name: Guides
            items:
              - title: Getting Started
                type: group
                children:
                  - title: Install
                    file: guides/install.html

    Page files are structured documents (``.json``) or HTML fragments
    (``.html``). Space ids are the space slugs.
    """

    def __init__(self, root: str, owner_id: str = "local"):
        self.root = os.path.abspath(root)
        self.owner_id = owner_id
        self._spaces: Optional[Dict[str, SpaceContent]] = None
        self._files: Dict[str, str] = {}

    def list_pages(self, space_ids: List[str]) -> List[SpaceContent]:
        spaces = self._load_index()
        if not space_ids:
            return list(spaces.values())
        return [spaces[sid] for sid in space_ids if sid in spaces]

    def load_content(self, document_id: str) -> Optional[Dict[str, Any]]:
        self._load_index()
        relative = self._files.get(document_id)
        if relative is None:
            return None
        path = os.path.join(self.root, relative)
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
        if relative.endswith('.json'):
            return json.loads(raw)
        return html_to_document(raw)

    def _load_index(self) -> Dict[str, SpaceContent]:
        if self._spaces is not None:
            return self._spaces

        index_path = os.path.join(self.root, INDEX_FILENAME)
        if not os.path.exists(index_path):
            raise NotFoundError("Content index", index_path)
        with open(index_path, 'r', encoding='utf-8') as f:
            index = yaml.safe_load(f) or {}

        spaces: Dict[str, SpaceContent] = {}
        for entry in index.get('spaces') or []:
            if not isinstance(entry, dict) or not entry.get('name'):
                raise ValidationFailedError("each space needs a name", "spaces")
            slug = slugify(entry.get('slug') or entry['name'], SPACE_SLUG_MAX_LENGTH)
            if slug in spaces:
                raise ValidationFailedError(f"duplicate space slug {slug!r}", "spaces")
            space = Space(
                id=slug,
                owner_id=self.owner_id,
                slug=slug,
                name=entry['name'],
                icon_name=entry.get('icon'),
                description=entry.get('description'),
            )
            documents: List[Document] = []
            self._collect(space, entry.get('items') or [], None, documents)
            spaces[slug] = SpaceContent(space=space, documents=documents)

        self._spaces = spaces
        logger.info(f"Loaded {len(spaces)} space(s) from {index_path}")
        return spaces

    def _collect(
        self,
        space: Space,
        items: List[Any],
        parent: Optional[Document],
        documents: List[Document],
    ) -> None:
        rank: Optional[str] = None
        taken: List[str] = []
        for item in items:
            if not isinstance(item, dict) or not item.get('title'):
                raise ValidationFailedError("each item needs a title", "items")
            try:
                doc_type = DocumentType(item.get('type') or ('page' if item.get('file') else 'group'))
            except ValueError:
                raise ValidationFailedError(f"unknown item type {item.get('type')!r}", "type")
            if doc_type not in (DocumentType.PAGE, DocumentType.GROUP):
                raise ValidationFailedError(f"unsupported item type {doc_type.value}", "type")
            if doc_type == DocumentType.GROUP and parent is not None:
                raise ValidationFailedError("groups must be at root level", "type")

            slug = unique_slug(slugify(item.get('slug') or item['title']), taken)
            relative = self._check_file(item['file']) if item.get('file') else None
            taken.append(slug)
            rank = rank_after(rank)
            trail = (f"{parent.id}/" if parent else f"{space.slug}:") + slug
            document = Document(
                id=trail,
                space_id=space.id,
                parent_id=parent.id if parent else None,
                type=doc_type,
                slug=slug,
                title=item['title'],
                rank=rank,
                icon_name=item.get('icon'),
                source_key=item.get('file'),
                updated_at=self._modified_at(relative),
            )
            documents.append(document)
            if relative:
                self._files[document.id] = relative
            self._collect(space, item.get('children') or [], document, documents)

    def _check_file(self, relative: str) -> str:
        normalized = os.path.normpath(relative)
        if normalized.startswith('..') or os.path.isabs(normalized):
            raise ValidationFailedError(f"page file {relative!r} is outside the content root", "file")
        if not normalized.endswith(('.json', '.html')):
            raise ValidationFailedError(f"page file {relative!r} must be .json or .html", "file")
        return normalized

    def _modified_at(self, relative: Optional[str]) -> str:
        if not relative:
            return ""
        path = os.path.join(self.root, relative)
        try:
            mtime = os.path.getmtime(path)
        except OSError:
            return ""
        stamp = datetime.fromtimestamp(int(mtime), tz=timezone.utc)
        return stamp.isoformat().replace("+00:00", "Z")

