"""Command handler functions for client operations."""

from pathlib import Path
from typing import Callable, Dict, Optional

from client.config import Config
from client.constants import DEFAULT_CONFIG_PATH, HELP_TEXT
from client.models import (
    CommandRequest,
    GroupCommand,
    HelpCommand,
    ShareCommand,
    UploadCommand,
    ViewCommand,
)
from client.upload_client import UploadCoordinator, UploadFailedError
from client.utils import ProgressPrinter, format_file_size
from common.logging_config import get_logger
from common.passwords import hash_password

logger = get_logger(__name__)


_client: Optional[UploadCoordinator] = None


def get_client() -> UploadCoordinator:
    """
    Get or create global UploadCoordinator instance.
    """
    global _client
    if _client is None:
        logger.debug("Creating new UploadCoordinator instance")
        _client = UploadCoordinator(Config(DEFAULT_CONFIG_PATH))
    return _client


def handle_upload(cmd: UploadCommand, client: Optional[UploadCoordinator] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and options
        client: Optional UploadCoordinator for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()

    path = Path(cmd.path)
    if not path.is_file():
        return f"Error: File not found: {cmd.path}"

    logger.info(f"Executing upload command: {path.name}")
    try:
        uploaded = client.upload(
            path,
            path.name,
            destination=cmd.destination,
            mime_type=cmd.mime_type,
            password_hash=hash_password(cmd.password) if cmd.password else None,
            file_id=cmd.file_id,
            progress=ProgressPrinter(path.name),
        )
    except (UploadFailedError, OSError) as e:
        logger.error(f"Upload of {path.name} failed: {e}")
        return f"Upload failed: {e}"

    return (
        f"Uploaded {uploaded.name} ({format_file_size(uploaded.size)})\n"
        f"File ID: {uploaded.file_id}\n"
        f"Download URL: {uploaded.download_url}"
    )


def handle_view(cmd: ViewCommand, client: Optional[UploadCoordinator] = None) -> str:
    """
    Handle 'view' command.

    Returns:
        Formatted list of files, or an error message
    """
    if client is None:
        client = get_client()
    try:
        files = client.lookup(cmd.id_param, cmd.password)
    except UploadFailedError as e:
        return f"Lookup failed: {e}"

    lines = [f"Found {len(files)} file(s):"]
    for entry in files:
        lines.append(
            f"  {entry['fileId']}  {entry['fileName']}  {format_file_size(entry['fileSize'])}  {entry['downloadUrl']}"
        )
    return "\n".join(lines)


def handle_share(cmd: ShareCommand, client: Optional[UploadCoordinator] = None) -> str:
    """
    Handle 'share' command.
    """
    if client is None:
        client = get_client()
    try:
        view = client.create_view(list(cmd.file_ids), cmd.password)
    except UploadFailedError as e:
        return f"Share failed: {e}"
    return f"View {view['id']} created\nShare URL: {view.get('shareUrl') or '-'}"


def handle_group(cmd: GroupCommand, client: Optional[UploadCoordinator] = None) -> str:
    """
    Handle 'group' command.
    """
    if client is None:
        client = get_client()
    try:
        group = client.create_group(cmd.group_id, list(cmd.file_ids), cmd.password)
    except UploadFailedError as e:
        return f"Group creation failed: {e}"
    return f"Group {group['id']} created with {len(group['fileIds'])} file(s)"


def handle_help(cmd: HelpCommand, client: Optional[UploadCoordinator] = None) -> str:
    return HELP_TEXT


COMMAND_HANDLERS: Dict[str, Callable[..., str]] = {
    "upload": handle_upload,
    "view": handle_view,
    "share": handle_share,
    "group": handle_group,
    "help": handle_help,
}


def execute(cmd: CommandRequest, client: Optional[UploadCoordinator] = None) -> str:
    return COMMAND_HANDLERS[cmd.command](cmd, client)
