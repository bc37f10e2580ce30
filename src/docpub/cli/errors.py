"""CLI-specific exceptions for docpub commands."""

from typing import Optional

from docpub.errors import PublishError


class CLIError(PublishError):
    """Base exception for CLI errors."""
    pass


class ConfigNotFoundError(CLIError):
    """Raised when the workspace configuration file is missing.

    Usually means ``docpub init`` has not been run in this directory.
    """

    def __init__(self, config_path: str):
        super().__init__(
            f"Config file not found: {config_path}. Run 'docpub init' first."
        )
        self.config_path = config_path


class ConfigError(CLIError):
    """Raised when the workspace config has an invalid or missing value.

    Attributes:
        config_field: Dotted path of the offending key (None for file-level problems)
    """

    def __init__(self, message: str, config_field: Optional[str] = None):
        where = f" '{config_field}'" if config_field else ""
        super().__init__(f"Invalid workspace config{where}: {message}")
        self.config_field = config_field


class ConfigFilesystemError(CLIError):
    """Raised when the config file or its directory cannot be accessed."""

    def __init__(self, config_path: str, operation: str, reason: Optional[str] = None):
        message = f"Could not {operation.replace('_', ' ')} config at {config_path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.config_path = config_path
        self.operation = operation
        self.reason = reason


class InitError(CLIError):
    """Raised when workspace initialization fails."""
