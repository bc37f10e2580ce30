"""OpenAPI importer.

Turns an OpenAPI document into a spec-managed subtree: one ``api_spec``
node, an ``api_tag`` node per tag and an ``api`` leaf per operation. The
parsed spec is stored as a content blob that every node references.
Re-importing replaces the previous subtree wholesale.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import yaml

from docpub.clock import utc_now_iso
from docpub.errors import ValidationFailedError
from docpub.models import Document, DocumentType
from docpub.state import Repository
from docpub.storage import ContentBlobStore

from .document_service import collect_subtree_ids, new_id
from .models import ApiImportResult, ApiOperation, ParsedApiSpec
from .rank import rank_after
from .slugs import slugify, unique_slug

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "options", "head", "trace")

# Sorts untagged operations after every declared tag
_UNDECLARED = float('inf')


def parse_openapi(spec_text: str) -> Dict[str, Any]:
    """Decode OpenAPI text (JSON or YAML) into a dict.

    Raises:
        ValidationFailedError: If the text is not a mapping with paths
    """
    try:
        if spec_text.lstrip().startswith('{'):
            raw = json.loads(spec_text)
        else:
            raw = yaml.safe_load(spec_text)
    except (ValueError, yaml.YAMLError) as e:
        raise ValidationFailedError(f"could not parse API spec: {e}", "spec")

    if not isinstance(raw, dict) or not isinstance(raw.get('paths'), dict):
        raise ValidationFailedError("API spec has no paths", "spec")
    return raw


def extract_operations(raw: Dict[str, Any]) -> ParsedApiSpec:
    """List a spec's operations in navigation order.

    Operations sort by declared tag order, then tag name, path and method.
    """
    info = raw.get('info') if isinstance(raw.get('info'), dict) else {}
    title = str(info.get('title') or 'API Reference')

    tag_order: List[str] = []
    for tag in raw.get('tags') or []:
        if isinstance(tag, dict) and tag.get('name'):
            tag_order.append(str(tag['name']))
    tag_index = {name: i for i, name in enumerate(tag_order)}

    operations: List[ApiOperation] = []
    for api_path, path_item in raw['paths'].items():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            op = path_item.get(method)
            if not isinstance(op, dict):
                continue
            summary = op.get('summary').strip() if isinstance(op.get('summary'), str) else ''
            operation_id = op.get('operationId').strip() if isinstance(op.get('operationId'), str) else ''
            tags = op.get('tags')
            operations.append(ApiOperation(
                path=str(api_path),
                method=method.upper(),
                title=summary or operation_id or f"{method.upper()} {api_path}",
                tag=str(tags[0]) if isinstance(tags, list) and tags else None,
                description=op.get('description') if isinstance(op.get('description'), str) else None,
            ))

    operations.sort(key=lambda o: (
        tag_index.get(o.tag, _UNDECLARED) if o.tag else _UNDECLARED,
        o.tag or '',
        o.path,
        o.method,
    ))

    # Tags used by operations but not declared keep first-seen order
    for operation in operations:
        if operation.tag and operation.tag not in tag_order:
            tag_order.append(operation.tag)

    return ParsedApiSpec(title=title, tag_order=tag_order, operations=operations)


class ApiSpecImporter:
    """Create or replace a spec-managed subtree from OpenAPI text.

    Example:
        >>> importer = ApiSpecImporter(repo, blob_store)
        >>> result = importer.import_spec(space.id, open("openapi.yaml").read())
        >>> len(result.operation_documents)
        12
    """

    def __init__(self, repository: Repository, blob_store: ContentBlobStore):
        self.repository = repository
        self.blob_store = blob_store

    def import_spec(
        self,
        space_id: str,
        spec_text: str,
        title: Optional[str] = None,
        replace_spec_id: Optional[str] = None,
    ) -> ApiImportResult:
        """Import an OpenAPI document into a space.

        Args:
            space_id: Space receiving the subtree
            spec_text: OpenAPI document as JSON or YAML text
            title: Title of the api_spec node (defaults to info.title)
            replace_spec_id: Existing api_spec node to replace in place

        Raises:
            ValidationFailedError: If the spec is malformed or the node to
                replace is not an api_spec
        """
        raw = parse_openapi(spec_text)
        parsed = extract_operations(raw)
        space = self.repository.get_space(space_id)

        # Uploaded before the transaction; blobs are never rolled back
        spec_blob = self.blob_store.put_json(space.owner_id, raw)

        with self.repository.transaction():
            replaced = 0
            if replace_spec_id is not None:
                previous = self.repository.get_document(replace_spec_id)
                if previous.type != DocumentType.API_SPEC or previous.space_id != space_id:
                    raise ValidationFailedError(f"{replace_spec_id} is not an API spec in this space", "replace_spec_id")
                rank = previous.rank
                replaced = self.repository.delete_documents(collect_subtree_ids(self.repository, previous))
                root_taken = [d.slug for d in self.repository.list_children(space_id, None)]
            else:
                roots = self.repository.list_children(space_id, None)
                rank = rank_after(roots[-1].rank if roots else None)
                root_taken = [d.slug for d in roots]

            now = utc_now_iso()
            spec_title = title or parsed.title
            spec_doc = self._add(
                space_id, None, DocumentType.API_SPEC, spec_title,
                unique_slug(slugify(spec_title), root_taken), rank, spec_blob.key, now,
            )
            result = ApiImportResult(spec_document=spec_doc, spec_blob_key=spec_blob.key, replaced=replaced)

            tag_docs: Dict[str, Document] = {}
            spec_children: List[str] = []
            last_rank: Optional[str] = None
            for tag in parsed.tag_order:
                last_rank = rank_after(last_rank)
                slug = unique_slug(slugify(tag), spec_children)
                spec_children.append(slug)
                tag_docs[tag] = self._add(
                    space_id, spec_doc.id, DocumentType.API_TAG, tag, slug, last_rank, spec_blob.key, now,
                )
                result.tag_documents.append(tag_docs[tag])

            tag_state: Dict[Optional[str], Dict[str, Any]] = {}
            for operation in parsed.operations:
                parent = tag_docs.get(operation.tag) if operation.tag else None
                state = tag_state.setdefault(operation.tag if parent else None, {'rank': None, 'slugs': []})
                if parent is None:
                    # Untagged operations follow the tag nodes under the spec
                    state['rank'] = rank_after(state['rank'] or last_rank)
                    taken = spec_children
                else:
                    state['rank'] = rank_after(state['rank'])
                    taken = state['slugs']
                slug = unique_slug(slugify(operation.title), taken)
                taken.append(slug)
                leaf = self._add(
                    space_id, parent.id if parent else spec_doc.id, DocumentType.API,
                    operation.title, slug, state['rank'], spec_blob.key, now,
                    api_path=operation.path, api_method=operation.method,
                )
                result.operation_documents.append(leaf)

        logger.info(
            f"Imported API spec '{spec_title}' into space {space_id}: "
            f"{len(result.tag_documents)} tag(s), {len(result.operation_documents)} operation(s)"
        )
        return result

    def _add(
        self,
        space_id: str,
        parent_id: Optional[str],
        doc_type: DocumentType,
        title: str,
        slug: str,
        rank: str,
        spec_blob_key: str,
        updated_at: str,
        api_path: Optional[str] = None,
        api_method: Optional[str] = None,
    ) -> Document:
        document = Document(
            id=new_id(),
            space_id=space_id,
            parent_id=parent_id,
            type=doc_type,
            slug=slug,
            title=title,
            rank=rank,
            api_path=api_path,
            api_method=api_method,
            api_spec_blob_key=spec_blob_key,
            updated_at=updated_at,
        )
        self.repository.add_document(document)
        return document

