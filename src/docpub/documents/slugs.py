"""URL slug generation.

Slugs are lowercase ASCII words joined by dashes. Sibling collisions are
resolved by appending a base-36 counter.
"""

import re
from typing import Iterable

DOCUMENT_SLUG_MAX_LENGTH = 120
SPACE_SLUG_MAX_LENGTH = 80

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(text: str, max_length: int = DOCUMENT_SLUG_MAX_LENGTH) -> str:
    """Convert free text into a URL slug.

    Example:
        >>> slugify("Hello, World!")
        'hello-world'
        >>> slugify("???")
        'untitled'
    """
    slug = _NON_SLUG_CHARS.sub('-', (text or '').strip().lower()).strip('-')
    slug = slug[:max_length].strip('-')
    return slug or 'untitled'


def _to_base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return ''.join(reversed(digits))


def unique_slug(base: str, taken: Iterable[str], max_length: int = DOCUMENT_SLUG_MAX_LENGTH) -> str:
    """Return ``base`` or the first ``base-N`` not present in ``taken``.

    Example:
        >>> unique_slug("intro", {"intro", "intro-1"})
        'intro-2'
    """
    taken_set = set(taken)
    if base not in taken_set:
        return base
    attempt = 1
    while True:
        suffix = f"-{_to_base36(attempt)}"
        candidate = base[:max_length - len(suffix)].rstrip('-') + suffix
        if candidate not in taken_set:
            return candidate
        attempt += 1
