"""Tagged request bodies for the action endpoint."""

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, RootModel

from server.schemas.catalog import CreateGroupRequest, CreateViewRequest
from server.schemas.common import CamelModel
from server.schemas.releases import CreateReleaseRequest
from server.schemas.uploads import DirectJsonUploadRequest, FinalizeUploadRequest


class CreateReleaseAction(CreateReleaseRequest):
    action: Literal["create-release"]


class UploadAssetAction(DirectJsonUploadRequest):
    action: Literal["upload-asset"]


class FinalizeChunksAction(FinalizeUploadRequest):
    action: Literal["finalize-chunks"]


class CreateViewAction(CreateViewRequest):
    action: Literal["create-view"]


class CreateGroupAction(CreateGroupRequest):
    action: Literal["create-group"]


class GetFilesAction(CamelModel):
    action: Literal["get-files"]
    id: str = Field(min_length=1)
    pwd: Optional[str] = None


Action = Annotated[
    Union[
        CreateReleaseAction,
        UploadAssetAction,
        FinalizeChunksAction,
        CreateViewAction,
        CreateGroupAction,
        GetFilesAction,
    ],
    Field(discriminator="action"),
]


class ActionRequest(RootModel[Action]):
    """Envelope for ``POST /api/actions``; ``root`` is the concrete action."""
