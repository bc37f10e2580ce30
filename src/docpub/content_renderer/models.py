"""Result types produced by the content renderer."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class TocItem:
    """A table-of-contents entry for one heading.

    Attributes:
        level: Heading level (1-6)
        text: Heading text
        id: Stable anchor id, unique within the document
    """
    level: int
    text: str
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "text": self.text, "id": self.id}


@dataclass
class RenderedContent:
    """Rendered form of one structured document.

    Attributes:
        html: HTML fragment
        toc: Table of contents in document order
        plain: Text leaves joined by single spaces (for search indexing)
        markdown: Markdown export of the HTML fragment
    """
    html: str = ""
    toc: List[TocItem] = field(default_factory=list)
    plain: str = ""
    markdown: str = ""

    @property
    def headings(self) -> List[str]:
        """Heading texts in document order."""
        return [item.text for item in self.toc]
