"""Command request data types for the client."""

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union


@dataclass(frozen=True)
class UploadCommand:
    """Upload one local file."""

    path: str
    destination: Optional[str] = None
    password: Optional[str] = None
    mime_type: Optional[str] = None
    file_id: Optional[str] = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ViewCommand:
    """Look up files by id expression."""

    id_param: str
    password: Optional[str] = None
    command: Literal["view"] = "view"


@dataclass(frozen=True)
class ShareCommand:
    """Create a short-id view over files."""

    file_ids: Tuple[str, ...]
    password: Optional[str] = None
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class GroupCommand:
    """Create a named group of files."""

    group_id: str
    file_ids: Tuple[str, ...]
    password: Optional[str] = None
    command: Literal["group"] = "group"


@dataclass(frozen=True)
class HelpCommand:
    command: Literal["help"] = "help"


CommandRequest = Union[UploadCommand, ViewCommand, ShareCommand, GroupCommand, HelpCommand]
