"""
Configuration model and loading for the notesync application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError


logger = logging.getLogger(__name__)


CONFIG_NAME = 'notesync-config.json'


class SyncConfig(BaseModel):
    """
    Settings for one notes synchronization run
    """

    github_repo_url: str = Field(min_length=1)
    notes_directory: str = Field(min_length=1)
    branch_name: Optional[str] = None

    force_push: bool = False

    github_token: Optional[str] = None
    github_app_id: Optional[str] = None
    github_installation_id: Optional[str] = None
    github_keyfile: Optional[str] = None

    model_config = {'frozen': True, 'extra': 'ignore'}


    @field_validator('branch_name', 'github_token', 'github_app_id',
                     'github_installation_id', 'github_keyfile', mode='before')
    def blank_is_none(cls, v: Any) -> Any:
        """
        An empty string is treated the same as an absent value.
        """

        if isinstance(v, str) and not v.strip():
            return None
        return v


    @field_validator('notes_directory')
    def expand_notes_directory(cls, v: str) -> str:
        return os.path.expanduser(v)


    def branch(self, hostname: str) -> str:
        """
        The branch to sync on: the configured override, or the hostname.
        """

        return self.branch_name or hostname


def _config_from_env() -> Dict[str, Any]:
    """
    Build configuration overrides from NOTESYNC_* environment variables.
    """

    result = {}
    pairs = (
        ('NOTESYNC_REPO_URL', 'github_repo_url'),
        ('NOTESYNC_NOTES_DIRECTORY', 'notes_directory'),
        ('NOTESYNC_BRANCH_NAME', 'branch_name'),
        ('NOTESYNC_FORCE_PUSH', 'force_push'),
        ('NOTESYNC_GITHUB_TOKEN', 'github_token'),
        ('NOTESYNC_GITHUB_APP_ID', 'github_app_id'),
        ('NOTESYNC_GITHUB_INSTALLATION_ID', 'github_installation_id'),
        ('NOTESYNC_GITHUB_KEYFILE', 'github_keyfile'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            result[config_key] = value

    return result


def config_path(path: Union[str, Path, None] = None, home: Union[str, Path, None] = None) -> Path:
    """
    Resolve the configuration file location. A relative path is taken
    relative to home, which defaults to the user's home directory.
    """

    if path is None:
        path = os.environ.get('NOTESYNC_CONFIG', CONFIG_NAME)

    path = Path(path).expanduser()
    if not path.is_absolute():
        path = Path(home if home is not None else Path.home()) / path
    return path


def load_config(path: Union[str, Path, None] = None, home: Union[str, Path, None] = None) -> SyncConfig:
    """
    Load and validate the configuration file, applying any environment
    overrides. Raises ConfigError if the file is missing or invalid.
    """

    full_path = config_path(path, home)

    try:
        with open(full_path, 'r') as f:
            if full_path.suffix in ('.yaml', '.yml'):
                config_data = yaml.safe_load(f)
            else:
                config_data = json.load(f)

    except FileNotFoundError as e:
        raise ConfigError(f'Config file not found: {full_path}') from e
    except OSError as e:
        raise ConfigError(f'Cannot read config file {full_path}: {e}') from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f'Malformed config file {full_path}: {e}') from e

    if not isinstance(config_data, dict):
        raise ConfigError(f'Config file {full_path} does not contain an object')

    config_data.update(_config_from_env())

    try:
        config = SyncConfig.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(f'Invalid config file {full_path}: {e}') from e

    logger.debug(f'Loaded configuration from {full_path}')
    return config


# The end.
