"""Parser for structured rich-text documents.

Converts editor JSON (a ``doc`` root with nested ``content``) into
ContentDocument and ContentNode objects.
"""

import json
import logging
from typing import Any, Dict

from .errors import MalformedContentError
from .nodes import ContentDocument, ContentMark, ContentNode

logger = logging.getLogger(__name__)

# Guard against pathological nesting in stored documents
MAX_DEPTH = 64


class DocumentParser:
    """Parser for structured documents."""

    def parse_document(self, doc_json: Any) -> ContentDocument:
        """Parse a structured document into a ContentDocument.

        Args:
            doc_json: The document as a dictionary (parsed JSON)

        Returns:
            ContentDocument with parsed content tree

        Raises:
            MalformedContentError: If the value is not a valid document
        """
        if not isinstance(doc_json, dict):
            raise MalformedContentError(
                f"Document must be a dictionary, got {type(doc_json).__name__}"
            )

        doc_type = doc_json.get("type")
        if doc_type != "doc":
            raise MalformedContentError(f"Expected type 'doc', got '{doc_type}'", "type")

        content_data = doc_json.get("content") or []
        if not isinstance(content_data, list):
            raise MalformedContentError("Document content must be a list", "content")

        content = [
            self._parse_node(node_data, f"content[{i}]", 1)
            for i, node_data in enumerate(content_data)
        ]
        return ContentDocument(content=content)

    def parse_from_string(self, doc_string: str) -> ContentDocument:
        """Parse a JSON string into a ContentDocument.

        Raises:
            MalformedContentError: If the string is not valid JSON or not a document
        """
        try:
            doc_json = json.loads(doc_string)
        except json.JSONDecodeError as e:
            raise MalformedContentError(f"Invalid JSON: {e}")
        return self.parse_document(doc_json)

    def _parse_node(self, node_data: Dict[str, Any], path: str, depth: int) -> ContentNode:
        if depth > MAX_DEPTH:
            raise MalformedContentError(f"Nesting deeper than {MAX_DEPTH} levels", path)
        if not isinstance(node_data, dict):
            raise MalformedContentError(
                f"Node must be a dictionary, got {type(node_data).__name__}", path
            )

        node_type = node_data.get("type")
        if not isinstance(node_type, str) or not node_type:
            raise MalformedContentError("Node is missing its type", path)

        text = node_data.get("text")
        if text is not None and not isinstance(text, str):
            raise MalformedContentError("Node text must be a string", path)

        attrs = node_data.get("attrs") or {}
        if not isinstance(attrs, dict):
            raise MalformedContentError("Node attrs must be a dictionary", path)

        marks_data = node_data.get("marks") or []
        if not isinstance(marks_data, list):
            raise MalformedContentError("Node marks must be a list", path)
        marks = []
        for mark in marks_data:
            if not isinstance(mark, dict) or not isinstance(mark.get("type"), str):
                raise MalformedContentError("Mark must be a dictionary with a type", path)
            mark_attrs = mark.get("attrs") or {}
            if not isinstance(mark_attrs, dict):
                raise MalformedContentError("Mark attrs must be a dictionary", path)
            marks.append(ContentMark(type=mark["type"], attrs=mark_attrs))

        content_data = node_data.get("content") or []
        if not isinstance(content_data, list):
            raise MalformedContentError("Node content must be a list", path)
        content = [
            self._parse_node(child, f"{path}.content[{i}]", depth + 1)
            for i, child in enumerate(content_data)
        ]

        return ContentNode(
            type=node_type,
            content=content,
            text=text,
            attrs=attrs,
            marks=marks,
        )
