"""
The notes synchronization sequence.

A run provisions the local repository, switches to the machine
branch, pulls, commits any local changes, and pushes. Provisioning
and branch failures end the run; every other failure is logged and
the sequence carries on.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
import sys
from datetime import datetime
from typing import Callable, Literal, Optional, TextIO

from pydantic import BaseModel

from .config import SyncConfig
from .engine import Engine, Repository, Signature, unmerged_paths
from .exceptions import (
    BranchError, CommitError, PullWarning, PushError,
    RemoteEmptyError, RemoteSetupError, RepoProvisionError,
    RepositoryNotFoundError,
)
from .github import authenticated_url, config_token


logger = logging.getLogger(__name__)


REMOTE_NAME = 'origin'

AUTHOR_NAME = 'Notes Sync'
AUTHOR_EMAIL = 'sync@notesync.local'

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


class SyncResult(BaseModel):
    """
    Outcome of one synchronization run
    """

    branch: str
    pull: Literal['updated', 'up-to-date', 'empty-remote', 'failed']
    commit: Literal['committed', 'clean', 'failed']
    commit_id: Optional[str] = None
    push: Literal['pushed', 'up-to-date', 'skipped', 'failed']


def commit_message(hostname: str, when: datetime) -> str:
    return f'Sync: {hostname} [{when.strftime(TIMESTAMP_FORMAT)}]'


class NoteSync:
    """
    Synchronizes the configured notes directory with its remote.

    The hostname, the clock, and the progress stream are supplied by
    the caller so that branch names and commit messages are
    reproducible.
    """

    def __init__(
            self,
            config: SyncConfig,
            engine: Engine,
            hostname: str,
            now: Callable[[], datetime] = datetime.now,
            progress: Optional[TextIO] = None):

        self.config = config
        self.engine = engine
        self.hostname = hostname
        self.now = now
        self.progress = progress if progress is not None else sys.stdout

        self._remote: Optional[str] = None


    @property
    def remote(self) -> str:
        """
        The pull and push target. This is the origin remote, or the
        configured URL with a token embedded when one is available.
        """

        if self._remote is None:
            try:
                token = config_token(self.config)
            except Exception as e:
                logger.warning(f'Could not obtain a GitHub token, using {REMOTE_NAME} as configured: {e}')
                token = None

            if token:
                self._remote = authenticated_url(self.config.github_repo_url, token)
            else:
                self._remote = REMOTE_NAME

        return self._remote


    def provision(self) -> Repository:
        """
        Open the repository in the notes directory, creating the
        directory and initializing a repository with an origin remote
        as needed.
        """

        notes_dir = self.config.notes_directory

        if not os.path.isdir(notes_dir):
            logger.info(f'Creating directory: {notes_dir}')
            try:
                os.makedirs(notes_dir, exist_ok=True)
            except OSError as e:
                raise RepoProvisionError(f'Cannot create {notes_dir}: {e}') from e

        try:
            return self.engine.open(notes_dir)

        except RepositoryNotFoundError:
            pass

        except Exception as e:
            raise RepoProvisionError(f'Failed to open repo: {e}') from e

        logger.info('Initializing new Git repository...')
        try:
            repo = self.engine.init(notes_dir)
        except Exception as e:
            raise RepoProvisionError(f'Init Failed: {e}') from e

        try:
            self.setup_remote(repo)
        except RemoteSetupError as e:
            logger.warning(f'Remote setup: {e}')

        return repo


    def setup_remote(self, repo: Repository) -> None:
        try:
            repo.create_remote(REMOTE_NAME, self.config.github_repo_url)
        except Exception as e:
            raise RemoteSetupError(str(e)) from e


    def ensure_branch(self, repo: Repository) -> str:
        """
        Check out the machine branch, creating it if it does not exist.
        """

        branch = self.config.branch(self.hostname)

        try:
            repo.checkout(branch, create=False)
            return branch
        except Exception as e:
            logger.debug(f'Checkout of {branch} failed: {e}')

        logger.info(f'Creating branch for machine: {branch}')
        try:
            repo.checkout(branch, create=True)
        except Exception as e:
            raise BranchError(f'Cannot check out or create {branch}: {e}') from e

        return branch


    def pull(self, repo: Repository, branch: str) -> str:
        logger.info('Pulling latest changes from remote...')

        try:
            changed = repo.pull(self.remote, branch)

        except RemoteEmptyError:
            logger.info('Remote repository is empty, nothing to pull.')
            return 'empty-remote'

        except Exception as e:
            raise PullWarning(str(e)) from e

        if not changed:
            logger.info('Local is already up to date with remote.')
            return 'up-to-date'

        logger.info('Pulled remote changes.')
        return 'updated'


    def commit(self, repo: Repository) -> Optional[str]:
        """
        Stage and commit every local change. Returns the new commit id,
        or None when the working tree is clean.
        """

        try:
            status = repo.status()
            if not status:
                logger.info('Working tree clean. Nothing to commit.')
                return None

            conflicted = unmerged_paths(status)
            if conflicted:
                raise CommitError(f'Refusing to commit unresolved merge conflicts in: {", ".join(conflicted)}')

            repo.stage_all()

            when = self.now()
            author = Signature(name=AUTHOR_NAME, email=AUTHOR_EMAIL, when=when)
            commit_id = repo.commit(commit_message(self.hostname, when), author)

        except CommitError:
            raise
        except Exception as e:
            raise CommitError(str(e)) from e

        logger.info('Changes committed locally.')
        return commit_id


    def push(self, repo: Repository, branch: str) -> str:
        logger.info('Syncing to GitHub...')

        if self.config.force_push:
            logger.debug('Force push is enabled, conflicting remote history will be overwritten')

        try:
            changed = repo.push(self.remote, branch,
                                force=self.config.force_push,
                                progress=self.progress)
        except Exception as e:
            raise PushError(str(e)) from e

        if not changed:
            logger.info('GitHub is already up to date.')
            return 'up-to-date'

        logger.info('Push successful!')
        return 'pushed'


    def sync(self) -> SyncResult:
        """
        Run the full sequence once. RepoProvisionError and BranchError
        propagate; the other stages only log their failures.
        """

        repo = self.provision()
        branch = self.ensure_branch(repo)

        try:
            pull_status = self.pull(repo, branch)
        except PullWarning as e:
            logger.warning(f'Pull Warning: {e} (Proceeding anyway...)')
            pull_status = 'failed'

        commit_id = None
        try:
            commit_id = self.commit(repo)
        except CommitError as e:
            logger.error(f'Commit Failed: {e}')
            return SyncResult(branch=branch, pull=pull_status,
                              commit='failed', push='skipped')

        try:
            push_status = self.push(repo, branch)
        except PushError as e:
            logger.error(f'Push Failed: {e}')
            push_status = 'failed'

        return SyncResult(
            branch=branch,
            pull=pull_status,
            commit='committed' if commit_id else 'clean',
            commit_id=commit_id,
            push=push_status,
        )


# The end.
