"""Import HTML fragments as structured documents.

Pages kept as HTML in a content repository are converted into the same
editor JSON the renderer consumes, so they hash and render like pages
written in the editor.
"""

import logging
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

logger = logging.getLogger(__name__)

_HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

_INLINE_MARKS = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "s": "strike",
    "del": "strike",
    "u": "underline",
    "code": "code",
}

_BLOCK_TAGS = {
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li", "pre",
    "blockquote", "hr", "table", "tr", "td", "th", "img", "div", "section",
    "article", "thead", "tbody", "tfoot",
}


class HtmlImporter:
    """Converts an HTML fragment into editor JSON.

    Example:
        >>> HtmlImporter().convert("<h1>Intro</h1><p>Hello <b>world</b></p>")["content"][0]["type"]
        'heading'
    """

    def __init__(self):
        self.parser = "lxml"

    def convert(self, html: str) -> Dict[str, Any]:
        """Convert an HTML fragment into a ``doc`` node."""
        soup = BeautifulSoup(html or "", self.parser)
        root = soup.body or soup
        return {"type": "doc", "content": self._blocks(root.children)}

    def _blocks(self, children) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        pending_inline: List[Dict[str, Any]] = []

        def flush():
            if any(n.get("type") != "text" or n.get("text", "").strip() for n in pending_inline):
                blocks.append({"type": "paragraph", "content": list(pending_inline)})
            pending_inline.clear()

        for child in children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, Tag) and child.name in _BLOCK_TAGS:
                flush()
                block = self._block(child)
                if isinstance(block, list):
                    blocks.extend(block)
                elif block is not None:
                    blocks.append(block)
            else:
                pending_inline.extend(self._inline(child, []))
        flush()
        return blocks

    def _block(self, tag: Tag):
        name = tag.name
        if name in _HEADINGS:
            return {
                "type": "heading",
                "attrs": {"level": _HEADINGS[name]},
                "content": self._inline_children(tag),
            }
        if name == "p":
            return {"type": "paragraph", "content": self._inline_children(tag)}
        if name in ("ul", "ol"):
            items = [self._list_item(li) for li in tag.find_all("li", recursive=False)]
            node: Dict[str, Any] = {
                "type": "bulletList" if name == "ul" else "orderedList",
                "content": items,
            }
            start = tag.get("start")
            if name == "ol" and start and str(start).isdigit():
                node["attrs"] = {"start": int(start)}
            return node
        if name == "li":
            return self._list_item(tag)
        if name == "pre":
            code = tag.find("code")
            language = self._code_language(code or tag)
            node = {"type": "codeBlock", "content": [{"type": "text", "text": tag.get_text()}]}
            if language:
                node["attrs"] = {"language": language}
            return node
        if name == "blockquote":
            return {"type": "blockquote", "content": self._blocks(tag.children)}
        if name == "hr":
            return {"type": "horizontalRule"}
        if name == "img":
            return self._image(tag)
        if name == "table":
            rows = [self._row(tr) for tr in tag.find_all("tr")]
            return {"type": "table", "content": rows}
        if name == "tr":
            return self._row(tag)
        # Containers (div, section, tbody, ...) contribute their children
        return self._blocks(tag.children)

    def _list_item(self, li: Tag) -> Dict[str, Any]:
        content = self._blocks(li.children)
        return {"type": "listItem", "content": content or [{"type": "paragraph", "content": []}]}

    def _row(self, tr: Tag) -> Dict[str, Any]:
        cells = []
        for cell in tr.find_all(["td", "th"], recursive=False):
            cells.append({
                "type": "tableHeader" if cell.name == "th" else "tableCell",
                "content": self._blocks(cell.children) or [{"type": "paragraph", "content": []}],
            })
        return {"type": "tableRow", "content": cells}

    @staticmethod
    def _image(tag: Tag) -> Optional[Dict[str, Any]]:
        src = tag.get("src")
        if not src:
            return None
        attrs = {"src": src}
        for name in ("alt", "title", "width", "height"):
            if tag.get(name):
                attrs[name] = tag.get(name)
        return {"type": "image", "attrs": attrs}

    @staticmethod
    def _code_language(tag: Tag) -> Optional[str]:
        if tag.get("data-language"):
            return tag["data-language"]
        for cls in tag.get("class") or []:
            if cls.startswith("language-"):
                return cls[len("language-"):]
        return None

    def _inline_children(self, tag: Tag) -> List[Dict[str, Any]]:
        nodes: List[Dict[str, Any]] = []
        for child in tag.children:
            nodes.extend(self._inline(child, []))
        return nodes

    def _inline(self, element, marks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if isinstance(element, Comment):
            return []
        if isinstance(element, NavigableString):
            text = " ".join(str(element).split())
            if not text:
                return []
            # Keep a single space between adjacent inline runs
            if str(element)[:1].isspace():
                text = " " + text
            if str(element)[-1:].isspace():
                text = text + " "
            node: Dict[str, Any] = {"type": "text", "text": text}
            if marks:
                node["marks"] = list(marks)
            return [node]
        if not isinstance(element, Tag):
            return []
        if element.name == "br":
            return [{"type": "hardBreak"}]
        if element.name == "img":
            image = self._image(element)
            return [image] if image else []

        child_marks = marks
        mark_type = _INLINE_MARKS.get(element.name)
        if mark_type:
            child_marks = marks + [{"type": mark_type}]
        elif element.name == "a" and element.get("href"):
            child_marks = marks + [{"type": "link", "attrs": {"href": element["href"]}}]

        nodes: List[Dict[str, Any]] = []
        for child in element.children:
            nodes.extend(self._inline(child, child_marks))
        return nodes


def html_to_document(html: str) -> Dict[str, Any]:
    """Convert an HTML fragment into editor JSON."""
    return HtmlImporter().convert(html)
