"""Command parser for client arguments."""

import shlex
from typing import Dict, List, Tuple

from client.models import (
    CommandRequest,
    GroupCommand,
    HelpCommand,
    ShareCommand,
    UploadCommand,
    ViewCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


UPLOAD_OPTIONS = {"--to": "destination", "--password": "password", "--mime": "mime_type", "--id": "file_id"}
PASSWORD_OPTION = {"--password": "password"}


def parse_command(input_line: str) -> CommandRequest:
    """Parse a command line string into a CommandRequest object.

    Raises:
        ParseError: If command syntax is invalid
    """
    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")
    return parse_args(tokens)


def parse_args(tokens: List[str]) -> CommandRequest:
    """Parse already-split arguments (e.g. ``sys.argv[1:]``).

    Args:
        tokens: Command name followed by its arguments

    Returns:
        CommandRequest object (one of Upload/View/Share/Group/Help)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "view":
        return _parse_view(tokens[1:])
    elif command_name == "share":
        return _parse_share(tokens[1:])
    elif command_name == "group":
        return _parse_group(tokens[1:])
    elif command_name in ("help", "--help", "-h"):
        return HelpCommand()
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _split_options(args: List[str], allowed: Dict[str, str]) -> Tuple[List[str], Dict[str, str]]:
    """Separate ``--flag value`` pairs from positional arguments."""
    positional = []
    options = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith("--"):
            if arg not in allowed:
                raise ParseError(f"Unknown option: {arg}")
            if i + 1 >= len(args):
                raise ParseError(f"{arg} requires a value")
            options[allowed[arg]] = args[i + 1]
            i += 2
        else:
            positional.append(arg)
            i += 1
    return positional, options


def _parse_upload(args: List[str]) -> UploadCommand:
    """Parse 'upload <path> [options]' command."""
    positional, options = _split_options(args, UPLOAD_OPTIONS)
    if len(positional) != 1:
        raise ParseError("upload requires exactly one file path")
    return UploadCommand(path=positional[0], **options)


def _parse_view(args: List[str]) -> ViewCommand:
    """Parse 'view <id>[,<id>...] [--password <pw>]' command."""
    positional, options = _split_options(args, PASSWORD_OPTION)
    if not positional:
        raise ParseError("view requires at least one id")
    return ViewCommand(id_param=",".join(positional), **options)


def _parse_share(args: List[str]) -> ShareCommand:
    """Parse 'share <file-id>... [--password <pw>]' command."""
    positional, options = _split_options(args, PASSWORD_OPTION)
    if not positional:
        raise ParseError("share requires at least one file id")
    return ShareCommand(file_ids=tuple(positional), **options)


def _parse_group(args: List[str]) -> GroupCommand:
    """Parse 'group <group-id> <file-id>... [--password <pw>]' command."""
    positional, options = _split_options(args, PASSWORD_OPTION)
    if len(positional) < 2:
        raise ParseError("group requires a group id and at least one file id")
    return GroupCommand(group_id=positional[0], file_ids=tuple(positional[1:]), **options)
