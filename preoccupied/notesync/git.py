"""
Git command-line implementation of the notesync engine interface.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
import subprocess
from typing import Dict, List, Optional, TextIO

from .engine import Engine, Repository, Signature
from .exceptions import GitCommandError, RemoteEmptyError, RepositoryNotFoundError, redact


logger = logging.getLogger(__name__)


# output is parsed for "Already up to date", so pin the locale, and
# never block an unattended run on a credential prompt
GIT_ENV = {
    'LC_ALL': 'C',
    'GIT_TERMINAL_PROMPT': '0',
}


def run(
        *args: str,
        cwd: str = None,
        env: Optional[Dict[str, str]] = None,
        stderr=subprocess.PIPE) -> subprocess.CompletedProcess:

    logger.debug(f'Running {redact(" ".join(args))} in {cwd}')

    full_env = dict(os.environ)
    full_env.update(GIT_ENV)
    if env:
        full_env.update(env)

    process = subprocess.run(
        args,
        cwd=cwd,
        env=full_env,
        stdout=subprocess.PIPE,
        stderr=stderr,
        text=True
    )
    if process.returncode != 0:
        raise GitCommandError(process.returncode, args,
                              output=process.stdout, stderr=process.stderr)
    return process


def _streamable(stream: Optional[TextIO]) -> bool:
    """
    True when stream is backed by a file descriptor a subprocess can
    write to directly
    """

    if stream is None:
        return False
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True


class GitRepository(Repository):
    """
    A repository driven through git subprocesses
    """

    def __init__(
            self,
            path: str,
            user_name: Optional[str] = None,
            user_email: Optional[str] = None):

        self.path = path
        self.user_name = user_name
        self.user_email = user_email


    def _git(self, *args: str, env: Optional[Dict[str, str]] = None, **kwargs) -> subprocess.CompletedProcess:
        identity = []
        if self.user_name:
            identity.extend(('-c', f'user.name={self.user_name}'))
        if self.user_email:
            identity.extend(('-c', f'user.email={self.user_email}'))

        return run('git', *identity, *args, cwd=self.path, env=env, **kwargs)


    def create_remote(self, name: str, url: str) -> None:
        self._git('remote', 'add', name, url)


    def status(self) -> List[str]:
        out = self._git('status', '--porcelain', '--untracked-files=all').stdout
        return [line for line in out.splitlines() if line.strip()]


    def stage_all(self) -> None:
        self._git('add', '--all')


    def commit(self, message: str, author: Signature) -> str:
        when = author.when.isoformat()
        self._git(
            'commit', '--quiet',
            '-m', message,
            f'--author={author.name} <{author.email}>',
            f'--date={when}',
            env={'GIT_COMMITTER_DATE': when})

        return self._git('rev-parse', 'HEAD').stdout.strip()


    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self._git('checkout', '-b', branch)
        else:
            # the trailing -- keeps a same-named file from being checked out
            self._git('checkout', branch, '--')


    def _merging(self) -> bool:
        return os.path.exists(os.path.join(self.path, '.git', 'MERGE_HEAD'))


    def pull(self, remote: str, branch: str) -> bool:
        refs = self._git('ls-remote', remote).stdout
        if not refs.strip():
            raise RemoteEmptyError('remote repository is empty')

        # fast-forward only: a diverged branch fails rather than merging
        try:
            out = self._git('pull', '--ff-only', remote, branch).stdout
        except GitCommandError:
            if self._merging():
                self._git('merge', '--abort')
            raise

        return not ('Already up to date' in out or 'Already up-to-date' in out)


    def has_branch(self, branch: str) -> bool:
        """
        True when branch has at least one commit. An unborn branch
        checked out in a fresh repository does not count.
        """

        try:
            self._git('rev-parse', '--verify', '--quiet', f'refs/heads/{branch}')
        except GitCommandError:
            return False
        return True


    def push(
            self,
            remote: str,
            branch: str,
            force: bool = False,
            progress: Optional[TextIO] = None) -> bool:

        if not self.has_branch(branch):
            # nothing committed yet, so nothing to send
            return False

        args = ['push', '--porcelain']
        if force:
            args.append('--force')

        # git's transfer status goes straight to a real stream while the
        # push runs, unless the target carries credentials to redact
        stream = _streamable(progress) and redact(remote) == remote
        if stream:
            args.append('--progress')
        args.extend((remote, f'refs/heads/{branch}:refs/heads/{branch}'))

        if stream:
            progress.flush()
            process = self._git(*args, stderr=progress)
        else:
            process = self._git(*args)

        if progress is not None:
            for text in (process.stderr, process.stdout):
                if text:
                    progress.write(redact(text))
            progress.flush()

        flags = [line[0] for line in process.stdout.splitlines()
                 if '\t' in line and line[0] in ' +-*=!']

        if '!' in flags:
            # older git exits zero on a rejected porcelain push
            raise GitCommandError(1, ('git', *args),
                                  output=process.stdout,
                                  stderr=process.stderr or process.stdout)

        return any(flag != '=' for flag in flags)


class GitEngine(Engine):
    """
    Opens and initializes repositories with the git command-line tool
    """

    def __init__(self, user_name: Optional[str] = None, user_email: Optional[str] = None):
        self.user_name = user_name
        self.user_email = user_email


    def _repository(self, path: str) -> GitRepository:
        return GitRepository(path, user_name=self.user_name, user_email=self.user_email)


    def open(self, path: str) -> GitRepository:
        if not os.path.exists(os.path.join(path, '.git')):
            raise RepositoryNotFoundError(f'repository does not exist at {path}')

        repo = self._repository(path)

        # fails on a corrupt or unreadable .git
        repo._git('rev-parse', '--git-dir')
        return repo


    def init(self, path: str) -> GitRepository:
        run('git', 'init', '--quiet', path)
        return self._repository(path)


# The end.
