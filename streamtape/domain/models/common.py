"""Defines common Value Objects and result records used across the client.

The TypedDicts mirror the ``result`` payloads returned by the API; they are
plain dicts at runtime.
"""

from typing import Any, Callable, Dict, List, NewType, Optional, TypedDict, Union

# === Identifiers ===
FileId = NewType("FileId", str)              # Public file/link id, e.g. "a1B2c3D4"
FolderId = NewType("FolderId", str)
RemoteUploadId = NewType("RemoteUploadId", str)
DownloadTicketToken = NewType("DownloadTicketToken", str)
FilePath = NewType("FilePath", str)          # Path on the local disk


# === Account ===
class AccountInfo(TypedDict):
    apiid: str
    email: str
    signup_at: str


# === Downloads ===
class DownloadTicket(TypedDict):
    """Short-lived token authorizing a download link exchange."""
    ticket: str
    wait_time: int            # seconds to wait before the ticket becomes valid
    valid_until: str


class DownloadLink(TypedDict):
    name: str
    size: int
    url: str


# === Files and folders ===
class FileInfo(TypedDict):
    id: str
    name: str
    size: int
    type: str
    converted: bool
    status: int


class FolderEntry(TypedDict):
    id: str
    name: str


class FolderFile(TypedDict):
    name: str
    size: int
    link: str
    created_at: int
    downloads: int
    linkid: str
    convert: str


class FolderContent(TypedDict):
    folders: List[FolderEntry]
    files: List[FolderFile]


class ConvertStatus(TypedDict):
    name: str
    folderid: str
    status: str
    progress: float
    retries: int
    link: str
    linkid: str


class Thumbnail(TypedDict):
    url: str


# === Uploads ===
class UploadUrl(TypedDict):
    url: str
    valid_until: str


class RemoteUpload(TypedDict):
    id: str
    folderid: str


class RemoteUploadStatus(TypedDict):
    """Progress record of a server-side fetch-and-store job."""
    id: str
    remoteurl: str
    status: str               # "new", "downloading", "finished", "error", ...
    bytes_loaded: Optional[int]
    bytes_total: Optional[int]
    folderid: str
    added: str
    last_update: str
    extid: Union[bool, str]
    url: Union[bool, str]     # False until the upload produced a file link


FileInfoMap = Dict[str, FileInfo]
RemoteUploadStatusMap = Dict[str, RemoteUploadStatus]

# Callbacks
UploadProgressCallback = Callable[[float], Any]                  # fraction 0.0..1.0
RemoteUploadProgressCallback = Callable[[RemoteUploadStatus], Any]
