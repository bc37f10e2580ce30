"""Renderer from structured documents to HTML, table of contents and plain text.

Rendering is a pure function of its input: no network or storage access,
and the same document always yields byte-identical output so content
hashes of rendered bundles are meaningful.
"""

import html
import logging
import re
from typing import Any, Dict, List, Optional, Set

from .errors import MalformedContentError
from .markdown_export import html_to_markdown
from .models import RenderedContent, TocItem
from .nodes import ContentDocument, ContentMark, ContentNode, MarkType, NodeType
from .parser import DocumentParser

logger = logging.getLogger(__name__)

# Heading anchor ids are truncated to this length
MAX_ANCHOR_LENGTH = 80

# URL schemes allowed in links and image sources
SAFE_URL_SCHEMES = ("http://", "https://", "mailto:", "/", "#", "./", "../")

_ANCHOR_STRIP = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")

# Simple block wrappers: node type -> tag
_BLOCK_TAGS = {
    NodeType.PARAGRAPH: "p",
    NodeType.BULLET_LIST: "ul",
    NodeType.LIST_ITEM: "li",
    NodeType.BLOCKQUOTE: "blockquote",
    NodeType.TABLE_ROW: "tr",
    NodeType.TABLE_HEADER: "th",
    NodeType.TABLE_CELL: "td",
}

_MARK_TAGS = {
    MarkType.BOLD: "strong",
    MarkType.ITALIC: "em",
    MarkType.STRIKE: "s",
    MarkType.UNDERLINE: "u",
    MarkType.CODE: "code",
}


def anchor_id(text: str) -> str:
    """Derive a heading anchor id from its text.

    Example:
        >>> anchor_id("Getting Started!")
        'getting-started'
    """
    slug = _ANCHOR_STRIP.sub("", text.strip().lower())
    slug = _WHITESPACE.sub("-", slug)
    return slug[:MAX_ANCHOR_LENGTH]


def _safe_url(url: Any) -> Optional[str]:
    if not isinstance(url, str):
        return None
    candidate = url.strip()
    if candidate.lower().startswith(SAFE_URL_SCHEMES):
        return candidate
    return None


def _attr(value: Any) -> str:
    return html.escape(str(value), quote=True)


class ContentRenderer:
    """Renders structured documents into HTML, TOC and plain text.

    The renderer never raises for bad input: an absent or malformed
    document renders as an empty document so that a single corrupt page
    cannot abort a whole build.

    Example:
        >>> renderer = ContentRenderer()
        >>> result = renderer.render({"type": "doc", "content": []})
        >>> result.html
        ''
    """

    def __init__(self, parser: Optional[DocumentParser] = None):
        self._parser = parser or DocumentParser()

    def render(self, structured_doc: Optional[Dict[str, Any]]) -> RenderedContent:
        """Render a structured document.

        Args:
            structured_doc: Editor JSON with a ``doc`` root, or None

        Returns:
            RenderedContent with html, toc, plain text and markdown
        """
        if structured_doc is None:
            return RenderedContent()

        try:
            document = self._parser.parse_document(structured_doc)
        except MalformedContentError as e:
            logger.warning(f"Rendering empty document for malformed content: {e}")
            return RenderedContent()

        return self.render_document(document)

    def render_document(self, document: ContentDocument) -> RenderedContent:
        """Render an already-parsed document."""
        toc = self.extract_toc(document)
        anchors = {id(node): item.id for node, item in zip(self._headings(document), toc)}
        body = "".join(self._render_node(node, anchors) for node in document.content)
        return RenderedContent(
            html=body,
            toc=toc,
            plain=self.extract_plain(document),
            markdown=html_to_markdown(body),
        )

    def extract_toc(self, document: ContentDocument) -> List[TocItem]:
        """Collect headings in document order with unique anchor ids."""
        toc: List[TocItem] = []
        seen: Set[str] = set()
        for heading in self._headings(document):
            level = self._heading_level(heading)
            text = heading.get_text_content()
            base = anchor_id(text) or f"h{level}"
            candidate = base
            suffix = 1
            while candidate in seen:
                candidate = f"{base}-{suffix}"
                suffix += 1
            seen.add(candidate)
            toc.append(TocItem(level=level, text=text, id=candidate))
        return toc

    def extract_plain(self, document: ContentDocument) -> str:
        """Join every text leaf (pre-order) with single spaces."""
        parts: List[str] = []
        for node in document.content:
            parts.extend(node.iter_text_leaves())
        return " ".join(parts)

    def _headings(self, document: ContentDocument) -> List[ContentNode]:
        found: List[ContentNode] = []
        stack = list(reversed(document.content))
        while stack:
            node = stack.pop()
            if node.node_type == NodeType.HEADING:
                found.append(node)
            stack.extend(reversed(node.content))
        return found

    @staticmethod
    def _heading_level(node: ContentNode) -> int:
        level = node.attrs.get("level", 1)
        if not isinstance(level, int):
            level = 1
        return min(max(level, 1), 6)

    def _render_children(self, node: ContentNode, anchors: Dict[int, str]) -> str:
        return "".join(self._render_node(child, anchors) for child in node.content)

    def _render_node(self, node: ContentNode, anchors: Dict[int, str]) -> str:
        node_type = node.node_type

        if node_type == NodeType.TEXT:
            return self._render_text(node)

        if node_type == NodeType.HARD_BREAK:
            return "<br>"

        if node_type == NodeType.HEADING:
            level = self._heading_level(node)
            anchor = anchors.get(id(node), "")
            inner = self._render_children(node, anchors)
            return f'<h{level} id="{_attr(anchor)}">{inner}</h{level}>'

        if node_type == NodeType.ORDERED_LIST:
            start = node.attrs.get("start", 1)
            start_attr = f' start="{int(start)}"' if isinstance(start, int) and start != 1 else ""
            return f"<ol{start_attr}>{self._render_children(node, anchors)}</ol>"

        if node_type == NodeType.TASK_LIST:
            return f'<ul data-type="taskList">{self._render_children(node, anchors)}</ul>'

        if node_type == NodeType.TASK_ITEM:
            checked = "true" if node.attrs.get("checked") else "false"
            return (
                f'<li data-type="taskItem" data-checked="{checked}">'
                f"{self._render_children(node, anchors)}</li>"
            )

        if node_type == NodeType.CODE_BLOCK:
            language = node.attrs.get("language")
            code = html.escape(node.get_text_content(), quote=False)
            if isinstance(language, str) and language:
                lang = _attr(language)
                return (
                    f'<pre data-language="{lang}"><code class="language-{lang}">'
                    f"{code}</code></pre>"
                )
            return f"<pre><code>{code}</code></pre>"

        if node_type == NodeType.HORIZONTAL_RULE:
            return "<hr>"

        if node_type == NodeType.IMAGE:
            return self._render_image(node)

        if node_type == NodeType.TABLE:
            return f"<table><tbody>{self._render_children(node, anchors)}</tbody></table>"

        tag = _BLOCK_TAGS.get(node_type)
        if tag:
            return f"<{tag}>{self._render_children(node, anchors)}</{tag}>"

        # Unknown nodes keep their children so no text is lost
        logger.debug(f"Rendering children of unknown node type: {node.type}")
        return self._render_children(node, anchors)

    def _render_text(self, node: ContentNode) -> str:
        rendered = html.escape(node.text or "", quote=False)
        for mark in reversed(node.marks):
            rendered = self._apply_mark(mark, rendered)
        return rendered

    @staticmethod
    def _apply_mark(mark: ContentMark, inner: str) -> str:
        mark_type = mark.mark_type
        if mark_type == MarkType.LINK:
            href = _safe_url(mark.attrs.get("href"))
            if href is None:
                return inner
            target = mark.attrs.get("target")
            target_attr = f' target="{_attr(target)}"' if target == "_blank" else ""
            return f'<a href="{_attr(href)}" rel="noopener nofollow"{target_attr}>{inner}</a>'
        tag = _MARK_TAGS.get(mark_type)
        if tag is None:
            return inner
        return f"<{tag}>{inner}</{tag}>"

    @staticmethod
    def _render_image(node: ContentNode) -> str:
        src = _safe_url(node.attrs.get("src"))
        if src is None:
            return ""
        parts = [f'src="{_attr(src)}"']
        for name in ("alt", "title", "width", "height"):
            value = node.attrs.get(name)
            if value is not None and value != "":
                parts.append(f'{name}="{_attr(value)}"')
        parts.append('loading="lazy"')
        return f"<img {' '.join(parts)}>"
