"""
Exception types for the notesync application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import re
import subprocess


_CREDENTIALS_RE = re.compile(r'(://)[^/@\s]+@')


def redact(text: str) -> str:
    """
    Strip any user:password credentials embedded in URLs within text
    """

    return _CREDENTIALS_RE.sub(r'\1***@', text)


class NotesyncError(Exception):
    """
    Base class for notesync failures
    """


class ConfigError(NotesyncError):
    """
    The configuration file is missing, unreadable, or invalid
    """


class RepoProvisionError(NotesyncError):
    """
    The notes directory or its repository could not be created or opened
    """


class RemoteSetupError(NotesyncError):
    """
    The origin remote could not be added to a freshly initialized repository
    """


class PullWarning(NotesyncError):
    """
    Pulling from the remote failed. The run continues.
    """


class CommitError(NotesyncError):
    """
    Staging or committing local changes failed. Push is skipped.
    """


class PushError(NotesyncError):
    """
    Pushing to the remote failed.
    """


class BranchError(NotesyncError):
    """
    The machine branch could neither be checked out nor created.
    """


class RepositoryNotFoundError(NotesyncError):
    """
    No repository exists at the given path
    """


class RemoteEmptyError(NotesyncError):
    """
    The remote repository has no commits yet
    """


class GitCommandError(subprocess.CalledProcessError):
    """
    A git subprocess exited with a non-zero status
    """

    @property
    def subcommand(self) -> str:
        """
        The git subcommand that failed, skipping any leading -c or -C options
        """

        args = iter(self.cmd[1:])
        for arg in args:
            if arg in ('-c', '-C'):
                next(args, None)
                continue
            return arg
        return ''


    def __str__(self):
        stderr = self.stderr or ''
        if isinstance(stderr, bytes):
            stderr = stderr.decode('utf-8', 'replace')
        stderr = redact(stderr.strip())

        msg = f'git {self.subcommand} exited with status {self.returncode}'
        return f'{msg}: {stderr}' if stderr else msg


# The end.
