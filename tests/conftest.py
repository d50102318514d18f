"""
Shared pytest fixtures for notesync tests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import os
import tempfile
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from preoccupied.notesync.config import SyncConfig
from preoccupied.notesync.engine import Engine, Repository
from preoccupied.notesync.exceptions import RepositoryNotFoundError


class FakeRepository(Repository):
    """
    In-memory repository. Tests set the *_error attributes to make
    the corresponding operation fail.
    """

    def __init__(self, path: str, branches=None, current: Optional[str] = 'master'):
        self.path = path
        self.remotes: Dict[str, str] = {}
        self.branches = set(branches or ())
        self.current = current
        self.changes: List[str] = []
        self.staged: List[str] = []
        self.commits: List[dict] = []
        self.pushed = 0

        self.calls: List[tuple] = []

        self.remote_error: Optional[Exception] = None
        self.checkout_error: Optional[Exception] = None
        self.create_error: Optional[Exception] = None
        self.commit_error: Optional[Exception] = None
        self.pull_error: Optional[Exception] = None
        self.pull_changed = False
        self.push_error: Optional[Exception] = None


    def create_remote(self, name, url):
        self.calls.append(('create_remote', name, url))
        if self.remote_error:
            raise self.remote_error
        self.remotes[name] = url


    def status(self):
        self.calls.append(('status',))
        return list(self.changes)


    def stage_all(self):
        self.calls.append(('stage_all',))
        self.staged, self.changes = self.changes, []


    def commit(self, message, author):
        self.calls.append(('commit', message, author))
        if self.commit_error:
            raise self.commit_error

        self.commits.append({
            'id': f'c{len(self.commits) + 1:040d}',
            'message': message,
            'author': author,
            'branch': self.current,
            'files': self.staged,
        })
        self.staged = []
        return self.commits[-1]['id']


    def checkout(self, branch, create=False):
        self.calls.append(('checkout', branch, create))
        if create:
            if self.create_error:
                raise self.create_error
            if branch in self.branches:
                raise ValueError(f'branch {branch} already exists')
            self.branches.add(branch)
        elif self.checkout_error or branch not in self.branches:
            raise self.checkout_error or ValueError(f'no branch {branch}')
        self.current = branch


    def pull(self, remote, branch):
        self.calls.append(('pull', remote, branch))
        if self.pull_error:
            raise self.pull_error
        return self.pull_changed


    def push(self, remote, branch, force=False, progress=None):
        self.calls.append(('push', remote, branch, force))
        if self.push_error:
            raise self.push_error

        changed = len(self.commits) > self.pushed
        self.pushed = len(self.commits)
        return changed


class FakeEngine(Engine):
    """
    In-memory engine holding FakeRepository instances keyed by path
    """

    def __init__(self):
        self.repos: Dict[str, FakeRepository] = {}
        self.open_error: Optional[Exception] = None
        self.init_error: Optional[Exception] = None
        self.inits: List[str] = []


    def open(self, path):
        if self.open_error:
            raise self.open_error
        if path not in self.repos:
            raise RepositoryNotFoundError(f'repository does not exist at {path}')
        return self.repos[path]


    def init(self, path):
        if self.init_error:
            raise self.init_error
        self.inits.append(path)
        repo = self.repos[path] = FakeRepository(path, current='master')
        return repo


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for tests.
    """

    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def sync_config(temp_dir):
    """
    A configuration whose notes directory lives in temp_dir
    """

    return SyncConfig(
        github_repo_url='https://github.com/test/notes.git',
        notes_directory=os.path.join(temp_dir, 'notes'),
    )


@pytest.fixture
def existing_repo(fake_engine, sync_config):
    """
    An already provisioned repository in the notes directory, on master
    """

    os.makedirs(sync_config.notes_directory)
    repo = FakeRepository(sync_config.notes_directory, branches={'master'})
    repo.remotes['origin'] = sync_config.github_repo_url
    fake_engine.repos[sync_config.notes_directory] = repo
    return repo


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 9, 14, 30, 5)


@pytest.fixture
def mock_env_vars(monkeypatch):
    """
    Clear notesync environment variables for testing.
    """

    env_vars_to_clear = [
        'NOTESYNC_CONFIG',
        'NOTESYNC_LOG_LEVEL',
        'NOTESYNC_REPO_URL',
        'NOTESYNC_NOTES_DIRECTORY',
        'NOTESYNC_BRANCH_NAME',
        'NOTESYNC_FORCE_PUSH',
        'NOTESYNC_GITHUB_TOKEN',
        'NOTESYNC_GITHUB_APP_ID',
        'NOTESYNC_GITHUB_INSTALLATION_ID',
        'NOTESYNC_GITHUB_KEYFILE',
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    return monkeypatch


# The end.
