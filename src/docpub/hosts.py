"""Hostname normalization and validation."""

import re

from docpub.errors import ValidationFailedError

# One RFC 1123 label: alphanumerics and inner dashes, at most 63 chars
_LABEL = re.compile(r'^(?!-)[a-z0-9-]{1,63}(?<!-)$')

MAX_HOST_LENGTH = 253


def normalize_host(host: str) -> str:
    """Lowercase a hostname and strip any port and trailing dot.

    Example:
        >>> normalize_host("Docs.Example.com:8443")
        'docs.example.com'
    """
    return (host or '').strip().lower().split(':')[0].rstrip('.')


def validate_domain(host: str) -> str:
    """Normalize and validate a custom domain.

    Returns:
        The normalized hostname

    Raises:
        ValidationFailedError: If the hostname is malformed
    """
    normalized = normalize_host(host)
    if not normalized:
        raise ValidationFailedError("domain must not be empty", "domain")
    if len(normalized) > MAX_HOST_LENGTH:
        raise ValidationFailedError(f"domain {normalized!r} is too long", "domain")
    labels = normalized.split('.')
    if len(labels) < 2:
        raise ValidationFailedError(f"domain {normalized!r} needs at least one dot", "domain")
    for label in labels:
        if not _LABEL.match(label):
            raise ValidationFailedError(f"domain {normalized!r} has an invalid label {label!r}", "domain")
    return normalized
