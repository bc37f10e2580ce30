"""Data models for structured rich-text documents.

Documents arrive as editor JSON: a tree of nodes, each with a type,
optional child content, optional text (text leaves only), attributes and
formatting marks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NodeType(Enum):
    """Types of structured document nodes."""

    # Document root
    DOC = "doc"

    # Block nodes
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    TASK_LIST = "taskList"
    TASK_ITEM = "taskItem"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"
    CODE_BLOCK = "codeBlock"
    BLOCKQUOTE = "blockquote"
    HORIZONTAL_RULE = "horizontalRule"
    IMAGE = "image"

    # Inline nodes
    TEXT = "text"
    HARD_BREAK = "hardBreak"

    # Other
    UNKNOWN = "unknown"


class MarkType(Enum):
    """Types of inline formatting marks."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKE = "strike"
    UNDERLINE = "underline"
    CODE = "code"
    LINK = "link"
    UNKNOWN = "unknown"


@dataclass
class ContentMark:
    """Inline formatting applied to a text node.

    Attributes:
        type: Mark type (bold, italic, link, code, etc.)
        attrs: Mark-specific attributes (href for links)
    """

    type: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    @property
    def mark_type(self) -> MarkType:
        """Get the MarkType enum value."""
        try:
            return MarkType(self.type)
        except ValueError:
            return MarkType.UNKNOWN


@dataclass
class ContentNode:
    """A node in a structured document tree.

    Attributes:
        type: Node type (paragraph, heading, text, etc.)
        content: Child nodes
        text: Text content (text leaves only)
        attrs: Node attributes (heading level, code language, image src, ...)
        marks: Formatting marks (text leaves only)
    """

    type: str
    content: List["ContentNode"] = field(default_factory=list)
    text: Optional[str] = None
    attrs: Dict[str, Any] = field(default_factory=dict)
    marks: List[ContentMark] = field(default_factory=list)

    @property
    def node_type(self) -> NodeType:
        """Get the NodeType enum value."""
        try:
            return NodeType(self.type)
        except ValueError:
            return NodeType.UNKNOWN

    def get_text_content(self) -> str:
        """Concatenate the text of this node and all descendants."""
        if self.text is not None:
            return self.text
        return "".join(child.get_text_content() for child in self.content)

    def iter_text_leaves(self):
        """Yield text leaves in pre-order."""
        if self.node_type == NodeType.TEXT and self.text:
            yield self.text
        for child in self.content:
            yield from child.iter_text_leaves()


@dataclass
class ContentDocument:
    """A parsed structured document (the ``doc`` root)."""

    content: List[ContentNode] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check if the document has no content."""
        return not self.content
