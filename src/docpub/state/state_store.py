"""State file loading and saving.

This module persists the Repository tables to a YAML file so the CLI can
run publishes across invocations. A missing or empty state file is treated
as a fresh workspace.
"""

import os
import tempfile
from dataclasses import asdict
from typing import Any, Dict, List

import yaml

from docpub.models import (
    Build,
    BuildOperation,
    BuildStatus,
    ContentBlob,
    Document,
    DocumentType,
    Membership,
    Site,
    SiteButton,
    SiteTheme,
    Space,
)

from .errors import StateError, StateFilesystemError
from .repository import Repository

# Top-level tables written to the state file
STATE_TABLES = ('spaces', 'documents', 'contents', 'sites', 'builds', 'blobs', 'members')


class StateStore:
    """Handles state file loading and saving.

    State file structure:
        spaces: [{id, owner_id, slug, name, ...}]
        documents: [{id, space_id, parent_id, type, slug, title, rank, ...}]
        contents: {document_id: {type: doc, content: [...]}}
        sites: [{id, owner_id, ..., selected_space_ids: [...]}]
        builds: [{site_id, build_id, status, ...}]
        blobs: [{tenant_id, hash, key, size, ref_count, last_used_at}]
        members: [{owner_id, actor_id, role}]
    """

    DEFAULT_STATE_DIR = '.docpub'
    DEFAULT_STATE_FILE = 'state.yaml'

    @classmethod
    def load(cls, state_path: str) -> Repository:
        """Load a repository from a YAML state file.

        Raises:
            StateFilesystemError: If the file cannot be read (except when missing)
            StateError: If the state file is malformed
        """
        try:
            with open(state_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return Repository()
        except PermissionError:
            raise StateFilesystemError(state_path, 'read', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(state_path, 'read', str(e))

        if not content.strip():
            return Repository()

        try:
            state_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StateError(f"Invalid YAML syntax: {str(e)}")

        if state_dict is None:
            return Repository()

        if not isinstance(state_dict, dict):
            raise StateError(
                f"State must be a YAML dictionary, got {type(state_dict).__name__}"
            )

        return cls._parse_state(state_dict)

    @classmethod
    def save(cls, state_path: str, repository: Repository) -> None:
        """Write the repository to a YAML state file atomically.

        Raises:
            StateFilesystemError: If the file cannot be written
        """
        yaml_str = yaml.safe_dump(
            cls._dump_state(repository),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )

        state_dir = os.path.dirname(state_path) or '.'
        try:
            os.makedirs(state_dir, exist_ok=True)
        except OSError as e:
            raise StateFilesystemError(state_dir, 'create_directory', str(e))

        try:
            fd, temp_path = tempfile.mkstemp(dir=state_dir, prefix='.state-', suffix='.yaml')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
            os.replace(temp_path, state_path)
        except PermissionError:
            raise StateFilesystemError(state_path, 'write', 'Permission denied')
        except OSError as e:
            raise StateFilesystemError(state_path, 'write', str(e))

    @classmethod
    def _dump_state(cls, repository: Repository) -> Dict[str, Any]:
        with repository.reading():
            return {
                'spaces': [asdict(s) for s in repository.spaces.values()],
                'documents': [
                    {**asdict(d), 'type': d.type.value} for d in repository.documents.values()
                ],
                'contents': dict(repository.contents),
                'sites': [asdict(s) for s in repository.sites.values()],
                'builds': [
                    {
                        **asdict(b),
                        'status': b.status.value,
                        'operation': b.operation.value,
                        'selected_space_ids_snapshot': list(b.selected_space_ids_snapshot),
                    }
                    for b in repository.builds.values()
                ],
                'blobs': [asdict(b) for b in repository.blobs.values()],
                'members': [asdict(m) for m in repository.members],
            }

    @classmethod
    def _parse_state(cls, state_dict: Dict[str, Any]) -> Repository:
        for table in STATE_TABLES:
            value = state_dict.get(table)
            expected = dict if table == 'contents' else list
            if value is not None and not isinstance(value, expected):
                raise StateError(
                    f"expected a {expected.__name__}, got {type(value).__name__}",
                    table,
                )

        repository = Repository()
        try:
            for row in cls._rows(state_dict, 'spaces'):
                repository.add_space(Space(**row))
            for row in cls._rows(state_dict, 'documents'):
                repository.add_document(Document(**{**row, 'type': DocumentType(row['type'])}))
            for document_id, value in (state_dict.get('contents') or {}).items():
                repository.set_content(str(document_id), value)
            for row in cls._rows(state_dict, 'sites'):
                buttons = [SiteButton(**b) for b in row.pop('buttons', None) or []]
                theme = SiteTheme(**(row.pop('theme', None) or {}))
                repository.add_site(Site(**row, buttons=buttons, theme=theme))
            for row in cls._rows(state_dict, 'builds'):
                build = Build(**{
                    **row,
                    'status': BuildStatus(row['status']),
                    'operation': BuildOperation(row['operation']),
                    'selected_space_ids_snapshot': tuple(row.get('selected_space_ids_snapshot') or ()),
                })
                repository.builds[build.build_id] = build
            for row in cls._rows(state_dict, 'blobs'):
                blob = ContentBlob(**row)
                repository.blobs[(blob.tenant_id, blob.hash)] = blob
            for row in cls._rows(state_dict, 'members'):
                repository.add_member(Membership(**row))
        except (TypeError, ValueError, KeyError) as e:
            raise StateError(f"Invalid record: {e}")
        return repository

    @staticmethod
    def _rows(state_dict: Dict[str, Any], table: str) -> List[Dict[str, Any]]:
        rows = state_dict.get(table) or []
        for row in rows:
            if not isinstance(row, dict):
                raise StateError(f"Rows must be dictionaries, got {type(row).__name__}", table)
        return [dict(row) for row in rows]
