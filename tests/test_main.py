"""
Unit tests for the command-line entry point.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from unittest.mock import patch

from preoccupied.notesync import main
from preoccupied.notesync.exceptions import BranchError, ConfigError, RepoProvisionError
from preoccupied.notesync.sync import SyncResult


class TestRun:
    """
    Tests for main.run()
    """

    def test_run_config_error(self, caplog):
        """
        Test a configuration error is logged and no repository work happens.
        """

        with patch('preoccupied.notesync.main.load_config',
                   side_effect=ConfigError('Config file not found: /home/x/notesync-config.json')), \
             patch('preoccupied.notesync.main.NoteSync') as mock_notesync:

            assert main.run() is None

        mock_notesync.assert_not_called()
        assert 'Configuration Error: Config file not found' in caplog.text

    def test_run_success(self, sync_config):
        """
        Test run loads the config and returns the sync result.
        """

        result = SyncResult(branch='laptop', pull='up-to-date', commit='clean', push='up-to-date')

        with patch('preoccupied.notesync.main.load_config', return_value=sync_config), \
             patch('preoccupied.notesync.main.socket.gethostname', return_value='laptop'), \
             patch('preoccupied.notesync.main.NoteSync') as mock_notesync:

            mock_notesync.return_value.sync.return_value = result
            assert main.run() is result

        args, kwargs = mock_notesync.call_args
        assert args[0] is sync_config
        assert isinstance(args[1], main.GitEngine)
        assert kwargs == {'hostname': 'laptop'}

    def test_run_provision_error(self, sync_config, caplog):
        """
        Test a provisioning failure is logged and ends the run.
        """

        with patch('preoccupied.notesync.main.load_config', return_value=sync_config), \
             patch('preoccupied.notesync.main.NoteSync') as mock_notesync:

            mock_notesync.return_value.sync.side_effect = RepoProvisionError('Init Failed: denied')
            assert main.run() is None

        assert 'Repository Error: Init Failed: denied' in caplog.text

    def test_run_branch_error(self, sync_config, caplog):
        """
        Test a branch failure is logged and ends the run.
        """

        with patch('preoccupied.notesync.main.load_config', return_value=sync_config), \
             patch('preoccupied.notesync.main.NoteSync') as mock_notesync:

            mock_notesync.return_value.sync.side_effect = BranchError('bad ref name')
            assert main.run() is None

        assert 'Branch Error: bad ref name' in caplog.text


def test_main_returns_none():
    """
    Test main() configures logging and always returns None.
    """

    with patch('preoccupied.notesync.main.configure_logging') as mock_logging, \
         patch('preoccupied.notesync.main.run', side_effect=lambda: None) as mock_run:

        assert main.main() is None

    mock_logging.assert_called_once()
    mock_run.assert_called_once()


# The end.
