"""Data models for document tree operations."""

from dataclasses import dataclass, field
from typing import List, Optional

from docpub.models import Document


@dataclass
class ApiOperation:
    """One operation parsed from an OpenAPI document.

    Attributes:
        path: Templated HTTP path (e.g. /pets/{id})
        method: Uppercase HTTP method
        title: Summary, operationId or "METHOD path"
        tag: First tag of the operation, if any
        description: Free-text description, if any
    """
    path: str
    method: str
    title: str
    tag: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ParsedApiSpec:
    """Operations of an OpenAPI document in navigation order."""
    title: str
    tag_order: List[str] = field(default_factory=list)
    operations: List[ApiOperation] = field(default_factory=list)


@dataclass
class ApiImportResult:
    """Documents created by importing an OpenAPI document.

    Attributes:
        spec_document: The api_spec root node
        tag_documents: api_tag nodes in navigation order
        operation_documents: api leaves in navigation order
        spec_blob_key: Storage key of the stored raw spec
        replaced: Number of documents removed from a previous import
    """
    spec_document: Document
    tag_documents: List[Document] = field(default_factory=list)
    operation_documents: List[Document] = field(default_factory=list)
    spec_blob_key: str = ""
    replaced: int = 0
