"""Sortable, collision-resistant build ids.

An id is a 9-character base-36 millisecond timestamp followed by 6 random
hex characters. Within a process the timestamp part strictly increases,
so ids sort in creation order even when the clock stalls or steps back.
"""

import secrets
import threading

from docpub.clock import now_ms

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
TIMESTAMP_WIDTH = 9
RANDOM_HEX_CHARS = 6

_lock = threading.Lock()
_last_ms = 0


def _base36(number: int, width: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return ''.join(reversed(digits)).rjust(width, '0')


def new_build_id() -> str:
    """Generate a new build id.

    Example:
        >>> len(new_build_id())
        15
    """
    global _last_ms
    with _lock:
        stamp = max(now_ms(), _last_ms + 1)
        _last_ms = stamp
    return _base36(stamp, TIMESTAMP_WIDTH) + secrets.token_hex(RANDOM_HEX_CHARS // 2)
