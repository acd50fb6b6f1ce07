"""Wire-level models for the StreamTape API.

Holds endpoint paths, the response envelope shape and the immutable
request descriptor handed to the request layer.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, TypedDict, Union

from streamtape.domain.errors import StreamTapeError

DEFAULT_BASE_URL = "https://api.streamtape.com"


class HttpStatus:
    """HTTP status codes with a dedicated meaning in the API."""
    OK = 200
    BAD_REQUEST = 400
    FORBIDDEN = 403
    NOT_FOUND = 404
    BANDWIDTH_EXCEEDED = 509


class Endpoints:
    """Relative paths of every API operation."""
    # Account
    ACCOUNT_INFO = "/account/info"

    # Files and folders
    FILE_INFO = "/file/info"
    FILE_LIST_FOLDER = "/file/listfolder"
    FILE_CREATE_FOLDER = "/file/createfolder"
    FILE_RENAME_FOLDER = "/file/renamefolder"
    FILE_DELETE_FOLDER = "/file/deletefolder"
    FILE_RENAME = "/file/rename"
    FILE_MOVE = "/file/move"
    FILE_DELETE = "/file/delete"
    FILE_RUNNING_CONVERTS = "/file/runningconverts"
    FILE_FAILED_CONVERTS = "/file/failedconverts"
    FILE_GET_SPLASH = "/file/getsplash"

    # Downloads
    FILE_DL_TICKET = "/file/dlticket"
    FILE_DL = "/file/dl"

    # Uploads
    FILE_UPLOAD = "/file/ul"
    REMOTE_UPLOAD_ADD = "/remotedl/add"
    REMOTE_UPLOAD_REMOVE = "/remotedl/remove"
    REMOTE_UPLOAD_STATUS = "/remotedl/status"


QueryValue = Union[str, int, float, bool]


class ApiEnvelope(TypedDict):
    """Universal response wrapper: ``{"status": 200, "msg": "OK", "result": ...}``."""
    status: int
    msg: str
    result: Any


@dataclass(frozen=True)
class RequestDescriptor:
    """One API call: HTTP method, path and query parameters.

    Parameters whose value is ``None`` are dropped, so optional arguments
    never reach the query string. Empty strings are sent as given.
    """
    method: str
    path: str
    params: Mapping[str, QueryValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.path:
            raise StreamTapeError.validation("Request path must not be empty")
        cleaned = {}
        for key, value in self.params.items():
            if value is None:
                continue
            if not isinstance(value, (str, int, float, bool)):
                raise StreamTapeError.validation(
                    f"Query parameter '{key}' must be a string, number or boolean, got {type(value).__name__}"
                )
            cleaned[key] = value
        object.__setattr__(self, "params", MappingProxyType(cleaned))

    @classmethod
    def get(cls, path: str, **params: Optional[QueryValue]) -> "RequestDescriptor":
        """Builds a GET descriptor, the only method the API uses."""
        return cls("GET", path, params)


def join_ids(ids: Union[str, Iterable[str]]) -> str:
    """Serializes one id or an iterable of ids as a comma-joined string."""
    if isinstance(ids, str):
        return ids
    return ",".join(str(i) for i in ids)
