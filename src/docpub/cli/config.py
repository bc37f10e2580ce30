"""YAML workspace configuration loading and validation.

This module loads and saves ``.docpub/config.yaml``, the file that binds a
working directory to one site, its storage backend and its state file.
"""

import os
from typing import Any, Dict

import yaml

from .errors import ConfigError, ConfigFilesystemError, ConfigNotFoundError
from .models import BACKEND_FILESYSTEM, BACKEND_HTTP, StorageConfig, WorkspaceConfig


class ConfigLoader:
    """Handles workspace config loading, validation, and saving.

    Configuration file structure:
        site_id: "3f2a..."
        actor_id: "local-user"
        storage:
          backend: filesystem        # or http
          root: .docpub/objects      # filesystem backend only
          base_url: https://cdn.example.com/docs
        state_path: .docpub/state.yaml
        max_workers: 8
        content_dir: ./docs          # optional
    """

    DEFAULT_CONFIG_PATH = ".docpub/config.yaml"

    # Required top-level config fields
    REQUIRED_TOP_LEVEL_FIELDS = {'site_id', 'actor_id'}

    # Storage backends accepted in the storage section
    BACKENDS = {BACKEND_FILESYSTEM, BACKEND_HTTP}

    # Default values for optional fields
    DEFAULTS = {
        'state_path': '.docpub/state.yaml',
        'max_workers': 8,
        'content_dir': None,
    }

    @classmethod
    def load(cls, config_path: str) -> WorkspaceConfig:
        """Load and parse configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            WorkspaceConfig with defaults applied

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigFilesystemError: If the file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigNotFoundError(config_path)
        except PermissionError:
            raise ConfigFilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise ConfigFilesystemError(config_path, 'read', str(e))

        try:
            config_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(config_dict)

    @classmethod
    def save(cls, config_path: str, config: WorkspaceConfig) -> None:
        """Save configuration to a YAML file.

        Raises:
            ConfigFilesystemError: If the file cannot be written
        """
        storage_dict: Dict[str, Any] = {'backend': config.storage.backend}
        if config.storage.backend == BACKEND_FILESYSTEM:
            storage_dict['root'] = config.storage.root
        if config.storage.base_url:
            storage_dict['base_url'] = config.storage.base_url

        config_dict: Dict[str, Any] = {
            'site_id': config.site_id,
            'actor_id': config.actor_id,
            'storage': storage_dict,
            'state_path': config.state_path,
            'max_workers': config.max_workers,
        }
        if config.content_dir:
            config_dict['content_dir'] = config.content_dir

        yaml_str = yaml.safe_dump(
            config_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        config_dir = os.path.dirname(config_path)
        if config_dir:
            try:
                os.makedirs(config_dir, exist_ok=True)
            except OSError as e:
                raise ConfigFilesystemError(config_dir, 'create_directory', str(e))

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
        except PermissionError:
            raise ConfigFilesystemError(config_path, 'write', 'Permission denied')
        except OSError as e:
            raise ConfigFilesystemError(config_path, 'write', str(e))

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> WorkspaceConfig:
        missing_fields = cls.REQUIRED_TOP_LEVEL_FIELDS - set(config_dict.keys())
        if missing_fields:
            raise ConfigError(
                f"Missing required fields: {', '.join(sorted(missing_fields))}"
            )

        for field_name in sorted(cls.REQUIRED_TOP_LEVEL_FIELDS):
            value = config_dict[field_name]
            if not isinstance(value, str) or not value.strip():
                raise ConfigError("must be a non-empty string", field_name)

        max_workers = config_dict.get('max_workers', cls.DEFAULTS['max_workers'])
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
            raise ConfigError("must be a positive integer", 'max_workers')

        state_path = config_dict.get('state_path', cls.DEFAULTS['state_path'])
        if not isinstance(state_path, str) or not state_path:
            raise ConfigError("must be a non-empty string", 'state_path')

        content_dir = config_dict.get('content_dir', cls.DEFAULTS['content_dir'])
        if content_dir is not None and not isinstance(content_dir, str):
            raise ConfigError("must be a string", 'content_dir')

        return WorkspaceConfig(
            site_id=config_dict['site_id'],
            actor_id=config_dict['actor_id'],
            storage=cls._parse_storage(config_dict.get('storage')),
            state_path=state_path,
            max_workers=max_workers,
            content_dir=content_dir,
        )

    @classmethod
    def _parse_storage(cls, storage_raw: Any) -> StorageConfig:
        if storage_raw is None:
            return StorageConfig()
        if not isinstance(storage_raw, dict):
            raise ConfigError(
                f"must be a dictionary, got {type(storage_raw).__name__}", 'storage'
            )

        backend = storage_raw.get('backend', BACKEND_FILESYSTEM)
        if backend not in cls.BACKENDS:
            raise ConfigError(
                f"unknown backend '{backend}' (expected one of: {', '.join(sorted(cls.BACKENDS))})",
                'storage.backend'
            )

        root = storage_raw.get('root', StorageConfig.root)
        if not isinstance(root, str) or not root:
            raise ConfigError("must be a non-empty string", 'storage.root')

        base_url = storage_raw.get('base_url')
        if base_url is not None and not isinstance(base_url, str):
            raise ConfigError("must be a string", 'storage.base_url')
        if backend == BACKEND_HTTP and not base_url:
            raise ConfigError("is required for the http backend", 'storage.base_url')

        return StorageConfig(backend=backend, root=root, base_url=base_url)
