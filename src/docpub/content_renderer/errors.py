"""Exceptions raised while parsing structured documents."""

from typing import Optional

from docpub.errors import ValidationFailedError


class MalformedContentError(ValidationFailedError):
    """Raised when a structured document does not have the expected shape."""

    def __init__(self, message: str, node_path: Optional[str] = None):
        super().__init__(message, field=node_path)
        self.node_path = node_path
