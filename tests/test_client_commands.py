"""Tests for client command handlers."""

from unittest.mock import Mock

from client.commands import execute, handle_group, handle_share, handle_upload, handle_view
from client.constants import HELP_TEXT
from client.models import GroupCommand, HelpCommand, ShareCommand, UploadCommand, ViewCommand
from client.upload_client import UploadCoordinator, UploadedFile, UploadFailedError
from common.passwords import hash_password


def make_uploaded(**overrides):
    values = dict(
        asset_id=7,
        download_url='https://github.com/o/r/releases/download/f_1/clip.txt',
        name='clip.txt',
        size=2048,
        file_id='f_1',
    )
    values.update(overrides)
    return UploadedFile(**values)


def test_handle_upload(sample_file):
    """Test upload command handler with mocked client."""
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.upload.return_value = make_uploaded()

    cmd = UploadCommand(path=str(sample_file), password='secret', file_id='f_1')
    result = handle_upload(cmd, client=mock_client)

    assert 'File ID: f_1' in result
    assert '2.00 KiB' in result
    args, kwargs = mock_client.upload.call_args
    assert args[1] == 'clip.txt'
    assert kwargs['password_hash'] == hash_password('secret')
    assert kwargs['file_id'] == 'f_1'
    assert callable(kwargs['progress'])


def test_handle_upload_missing_file(tmp_path):
    """Test upload of a path that does not exist."""
    mock_client = Mock(spec=UploadCoordinator)

    result = handle_upload(UploadCommand(path=str(tmp_path / 'nope.bin')), client=mock_client)

    assert result.startswith('Error: File not found')
    mock_client.upload.assert_not_called()


def test_handle_upload_failure(sample_file):
    """Test upload failure is reported, not raised."""
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.upload.side_effect = UploadFailedError('Chunk 2/3 failed: boom')

    result = handle_upload(UploadCommand(path=str(sample_file)), client=mock_client)

    assert result == 'Upload failed: Chunk 2/3 failed: boom'


def test_handle_view():
    """Test view command lists files."""
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.lookup.return_value = [
        {'fileId': 'f_1', 'fileName': 'a.mp4', 'fileSize': 10, 'downloadUrl': 'https://x/a.mp4'},
        {'fileId': 'f_2', 'fileName': 'b.mp4', 'fileSize': 20, 'downloadUrl': 'https://x/b.mp4'},
    ]

    result = handle_view(ViewCommand(id_param='f_1,f_2', password='pw'), client=mock_client)

    assert result.splitlines()[0] == 'Found 2 file(s):'
    assert 'b.mp4' in result
    mock_client.lookup.assert_called_once_with('f_1,f_2', 'pw')


def test_handle_view_failure():
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.lookup.side_effect = UploadFailedError('Incorrect password.', code='INVALID_PASSWORD')

    result = handle_view(ViewCommand(id_param='Ab3dE9'), client=mock_client)

    assert result == 'Lookup failed: Incorrect password.'


def test_handle_share():
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.create_view.return_value = {'id': 'Ab3dE9', 'shareUrl': 'https://s/d/Ab3dE9'}

    result = handle_share(ShareCommand(file_ids=('f_1', 'f_2')), client=mock_client)

    assert 'View Ab3dE9 created' in result
    assert 'https://s/d/Ab3dE9' in result
    mock_client.create_view.assert_called_once_with(['f_1', 'f_2'], None)


def test_handle_group():
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.create_group.return_value = {'id': 'album', 'fileIds': ['f_1', 'f_2']}

    result = handle_group(GroupCommand(group_id='album', file_ids=('f_1', 'f_2'), password='pw'), client=mock_client)

    assert result == 'Group album created with 2 file(s)'
    mock_client.create_group.assert_called_once_with('album', ['f_1', 'f_2'], 'pw')


def test_handle_group_taken():
    mock_client = Mock(spec=UploadCoordinator)
    mock_client.create_group.side_effect = UploadFailedError('That group id is already taken.')

    result = handle_group(GroupCommand(group_id='album', file_ids=('f_1',)), client=mock_client)

    assert result.startswith('Group creation failed')


def test_execute_dispatches_help():
    assert execute(HelpCommand(), client=Mock(spec=UploadCoordinator)) == HELP_TEXT
