"""Dense lexicographic rank keys for sibling ordering.

Ranks are strings over the base-36 alphabet ``0-9a-z`` that sort in
sibling order with plain string comparison. A new key can always be
generated strictly between two existing keys, growing by one character
only when no single-character gap is left. Valid keys never end in ``0``;
that is what guarantees a key below any existing key always exists.
"""

from typing import Optional

from docpub.errors import ValidationFailedError

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
BASE = len(DIGITS)

# Rank given to the first child of an empty parent
INITIAL_RANK = DIGITS[BASE // 2]


def validate_rank(key: str) -> None:
    """Check that ``key`` is a usable rank.

    Raises:
        ValidationFailedError: If the key is empty, contains characters
            outside the alphabet or ends in '0'
    """
    if not key:
        raise ValidationFailedError("rank must not be empty", "rank")
    for char in key:
        if char not in DIGITS:
            raise ValidationFailedError(f"invalid rank character {char!r} in {key!r}", "rank")
    if key.endswith(DIGITS[0]):
        raise ValidationFailedError(f"rank {key!r} must not end in '0'", "rank")


def _midpoint(lo: str, hi: Optional[str]) -> str:
    """Key strictly between ``lo`` ('' = lowest) and ``hi`` (None = highest)."""
    if hi is not None:
        # Strip the shared prefix, reading missing lo digits as '0'
        n = 0
        while (lo[n] if n < len(lo) else DIGITS[0]) == hi[n]:
            n += 1
        if n > 0:
            return hi[:n] + _midpoint(lo[n:], hi[n:])

    digit_lo = DIGITS.index(lo[0]) if lo else 0
    digit_hi = DIGITS.index(hi[0]) if hi is not None else BASE

    if digit_hi - digit_lo > 1:
        return DIGITS[(digit_lo + digit_hi) // 2]

    # Adjacent digits
    if hi is not None and len(hi) > 1:
        return hi[0]
    return DIGITS[digit_lo] + _midpoint(lo[1:], None)


def rank_between(before: Optional[str], after: Optional[str]) -> str:
    """Generate a rank strictly between two neighbors.

    Args:
        before: Rank of the left neighbor, or None for no lower bound
        after: Rank of the right neighbor, or None for no upper bound

    Returns:
        A valid rank r with before < r < after

    Raises:
        ValidationFailedError: If a bound is invalid or before >= after

    Example:
        >>> rank_between(None, None)
        'i'
        >>> rank_between('a', 'b')
        'ai'
    """
    if before is not None:
        validate_rank(before)
    if after is not None:
        validate_rank(after)
    if before is not None and after is not None and before >= after:
        raise ValidationFailedError(f"rank {before!r} is not below {after!r}", "rank")

    key = _midpoint(before or "", after)
    validate_rank(key)
    return key


def rank_before(key: Optional[str]) -> str:
    """Rank sorting before ``key`` (or the initial rank when None)."""
    return rank_between(None, key)


def rank_after(key: Optional[str]) -> str:
    """Rank sorting after ``key`` (or the initial rank when None)."""
    return rank_between(key, None)
