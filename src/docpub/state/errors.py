"""Exceptions raised while loading or saving persisted state."""

from typing import Optional

from docpub.errors import PublishError


class StateError(PublishError):
    """Raised when a state file cannot be decoded into records.

    Attributes:
        table: State table holding the bad value (None for file-level problems)
        detail: What was wrong, without the table prefix
    """

    def __init__(self, detail: str, table: Optional[str] = None):
        where = f" in table '{table}'" if table else ""
        super().__init__(f"Malformed state{where}: {detail}")
        self.table = table
        self.detail = detail


class StateFilesystemError(PublishError):
    """Raised when the state file or its directory cannot be accessed."""

    def __init__(self, state_path: str, operation: str, reason: Optional[str] = None):
        message = f"Could not {operation.replace('_', ' ')} state at {state_path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.state_path = state_path
        self.operation = operation
        self.reason = reason
