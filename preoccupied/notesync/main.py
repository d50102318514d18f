"""
Command-line entry point for the notesync application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
import socket
import sys
from typing import Optional

from .config import load_config
from .exceptions import BranchError, ConfigError, RepoProvisionError
from .git import GitEngine
from .sync import AUTHOR_EMAIL, AUTHOR_NAME, NoteSync, SyncResult


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = os.environ.get('NOTESYNC_LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stdout,
        format='%(levelname)s: %(message)s'
    )


def run() -> Optional[SyncResult]:
    """
    Load the configuration and run one synchronization. Every failure
    is logged and the function returns normally.
    """

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f'Configuration Error: {e}')
        return None

    engine = GitEngine(user_name=AUTHOR_NAME, user_email=AUTHOR_EMAIL)
    notesync = NoteSync(config, engine, hostname=socket.gethostname())

    try:
        return notesync.sync()

    except RepoProvisionError as e:
        logger.error(f'Repository Error: {e}')

    except BranchError as e:
        logger.error(f'Branch Error: {e}')

    return None


def main() -> None:
    configure_logging()
    run()


if __name__ == '__main__':
    main()


# The end.
