"""Data set, USS file and file system operations."""

from zosctl.files.attributes import ZosFilesAttributes
from zosctl.files.constants import FILES_CONFIG, CreateDataSetType, FilesConfig, TransferMode
from zosctl.files.create import Create, build_options
from zosctl.files.delete import Delete
from zosctl.files.download import Download
from zosctl.files.invoke import Invoke
from zosctl.files.list import List
from zosctl.files.response import BatchTransferResult, UploadResult, ZosFilesResponse
from zosctl.files.search import Search, SearchItem, SearchMatch
from zosctl.files.upload import FilesMap, Upload

__all__ = [
    "FILES_CONFIG",
    "BatchTransferResult",
    "Create",
    "CreateDataSetType",
    "Delete",
    "Download",
    "FilesConfig",
    "FilesMap",
    "Invoke",
    "List",
    "Search",
    "SearchItem",
    "SearchMatch",
    "TransferMode",
    "Upload",
    "UploadResult",
    "ZosFilesAttributes",
    "ZosFilesResponse",
    "build_options",
]
