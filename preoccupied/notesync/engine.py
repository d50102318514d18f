"""
Capability interface for the version-control engine used by notesync.

The sync sequence only ever talks to these two abstract classes, so
it can be driven against the git command-line implementation in
:mod:`preoccupied.notesync.git` or against an in-memory stand-in.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, TextIO

from pydantic import BaseModel


# two-letter status codes of paths left unmerged by a conflicted merge
UNMERGED_CODES = frozenset(('DD', 'AU', 'UD', 'UA', 'DU', 'AA', 'UU'))


def unmerged_paths(status: List[str]) -> List[str]:
    """
    The paths in porcelain status entries that carry unresolved merge
    conflicts
    """

    return [entry[3:] for entry in status if entry[:2] in UNMERGED_CODES]


class Signature(BaseModel):
    """
    Author identity and timestamp for a commit
    """

    name: str
    email: str
    when: datetime


class Repository(ABC):
    """
    A local repository with a working tree
    """

    path: str


    @abstractmethod
    def create_remote(self, name: str, url: str) -> None:
        """
        Add a remote called name pointing at url.
        """


    @abstractmethod
    def status(self) -> List[str]:
        """
        Return one entry per changed, added, deleted, or untracked path
        in the working tree. An empty list means the tree is clean.
        """


    def is_clean(self) -> bool:
        return not self.status()


    def unmerged(self) -> List[str]:
        """
        Return the paths with unresolved merge conflicts.
        """

        return unmerged_paths(self.status())


    @abstractmethod
    def stage_all(self) -> None:
        """
        Stage every change in the working tree, including new and
        deleted files.
        """


    @abstractmethod
    def commit(self, message: str, author: Signature) -> str:
        """
        Commit the staged changes and return the new commit id.
        """


    @abstractmethod
    def checkout(self, branch: str, create: bool = False) -> None:
        """
        Switch the working tree to branch, creating it from the current
        HEAD when create is True.
        """


    @abstractmethod
    def pull(self, remote: str, branch: str) -> bool:
        """
        Fetch branch from remote and fast-forward the current branch to it.

        Returns False when the local branch was already up to date.
        Raises RemoteEmptyError when the remote holds no commits at all.
        """


    @abstractmethod
    def push(
            self,
            remote: str,
            branch: str,
            force: bool = False,
            progress: Optional[TextIO] = None) -> bool:
        """
        Push branch to remote, writing any transfer output to progress.

        Returns False when the remote was already up to date.
        """


class Engine(ABC):
    """
    Opens and creates repositories
    """

    @abstractmethod
    def open(self, path: str) -> Repository:
        """
        Open the repository whose working tree is exactly path.

        Raises RepositoryNotFoundError when there is none.
        """


    @abstractmethod
    def init(self, path: str) -> Repository:
        """
        Initialize a new, empty repository at path.
        """


# The end.
