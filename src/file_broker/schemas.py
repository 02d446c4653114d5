####################################
# --- Broker data model schemas --- #
####################################

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class FetchType(str, Enum):
    """How a loaded file's content is returned to the eval frame."""
    TEXT = "text"
    BINARY = "binary"


class Frequency(str, Enum):
    """Refresh schedule of a file source."""
    NEVER = "never"
    DAILY = "daily"
    WEEKLY = "weekly"


class MessageKind(str, Enum):
    """Tags of the messages sent back to the eval frame."""
    SUCCESS = "REQUESTED_FILE_OPERATION_SUCCESS"
    ERROR = "REQUESTED_FILE_OPERATION_ERROR"


class RequestType(str, Enum):
    """Operations the eval frame can request over the websocket channel."""
    LOAD_FILE = "LOAD_FILE"
    SAVE_FILE = "SAVE_FILE"
    DELETE_FILE = "DELETE_FILE"


class FileRecord(BaseModel):
    """A file known to the notebook."""
    id: int = Field(description="Store-assigned file id.")
    filename: str = Field(
        description="Name of the file within the notebook.",
        json_schema_extra={"example": "data.csv"},
    )
    last_updated: str = Field(description="ISO timestamp of the last save.")

    model_config = ConfigDict(frozen=True)


class FileSource(BaseModel):
    """A remote URL periodically fetched into a notebook file."""
    id: int
    source_url: str
    destination_filename: str
    frequency: Optional[Frequency] = None

    model_config = ConfigDict(frozen=True)


class NotebookInfo(BaseModel):
    """Snapshot of the local notebook state consulted by the orchestrators."""
    notebook_id: str = "default"
    files: List[FileRecord] = Field(default_factory=list)
    file_sources: List[FileSource] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class LoadOptions(BaseModel):
    """Options bag of a load request.

    `fetchType` is kept as a raw value so that unrecognized values reach the
    orchestrator and get reported instead of failing model validation.
    """
    fetch_type: Any = Field(default=None, alias="fetchType")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SaveOptions(BaseModel):
    """Options bag of a save request."""
    overwrite: bool = False
    data: Union[str, bytes] = ""

    @field_validator("overwrite", mode="before")
    @classmethod
    def coerce_overwrite(cls, value: Any) -> bool:
        """Only a truthy `overwrite` allows replacing an existing file."""
        return bool(value)

    model_config = ConfigDict(extra="ignore")


class SavedFileMetadata(BaseModel):
    """Response body of a successful store save."""
    filename: str
    id: int
    last_updated: str


class FileRequestMessage(BaseModel):
    """A file request as sent by the eval frame over the websocket channel."""
    request_type: str = Field(alias="requestType")
    filename: Optional[str] = None
    file_request_id: Optional[str] = Field(default=None, alias="fileRequestID")
    request_options: Optional[dict] = Field(default=None, alias="requestOptions")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "requestType": "LOAD_FILE",
                "filename": "data.csv",
                "fileRequestID": "file-request-id-0",
                "requestOptions": {"fetchType": "text"},
            }
        },
    )


class Outcome(BaseModel):
    """The single result reported for an accepted request."""
    kind: MessageKind
    file_request_id: Any
    response: Any = None
    reason: Optional[str] = None

    def body(self) -> dict:
        """Message body in the shape the eval frame expects."""
        if self.kind is MessageKind.SUCCESS:
            return {"response": self.response, "fileRequestID": self.file_request_id}
        return {"reason": self.reason, "fileRequestID": self.file_request_id}


class GetFilesResponse(BaseModel):
    """Response model for `GET /v1/notebooks/:notebook_id/files`."""
    notebook_id: str
    files: List[FileRecord]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "notebook_id": "default",
                "files": [
                    {
                        "id": 0,
                        "filename": "file1.csv",
                        "last_updated": "2019-04-03T16:51:45.075609+00:00",
                    }
                ],
            }
        }
    )
