"""
Notes directory synchronization with a remote git repository.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from preoccupied.notesync.config import SyncConfig, load_config
from preoccupied.notesync.sync import NoteSync, SyncResult


__all__ = ['NoteSync', 'SyncConfig', 'SyncResult', 'load_config']


# The end.
