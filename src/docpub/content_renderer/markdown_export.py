"""Markdown export of rendered HTML using markdownify."""

from markdownify import MarkdownConverter as BaseMarkdownConverter


class _BundleMarkdownConverter(BaseMarkdownConverter):
    """markdownify converter with docs-bundle settings."""

    def __init__(self, **options):
        options.setdefault('heading_style', 'atx')  # Use # style headings
        options.setdefault('bullets', '-')
        options.setdefault('strong_em_symbol', '*')
        options.setdefault('code_language_callback', _code_language)
        super().__init__(**options)


def _code_language(el) -> str:
    """Read the code language recorded on a rendered <pre> element."""
    return el.get('data-language') or ''


def html_to_markdown(html: str) -> str:
    """Convert a rendered HTML fragment to markdown.

    Args:
        html: HTML produced by ContentRenderer

    Returns:
        Markdown text with surrounding blank lines stripped
    """
    if not html:
        return ""
    return _BundleMarkdownConverter().convert(html).strip()
