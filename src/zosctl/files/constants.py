"""Constants for the z/OSMF data set and file REST services."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class FilesConfig:
    """Resource paths and limits for z/OSMF file services."""

    resource: str = "/zosmf/restfiles"
    res_ds_files: str = "/ds"
    res_ds_members: str = "/member"
    res_uss_files: str = "/fs"
    res_zfs_files: str = "/mfs/zfs"
    res_mfs: str = "/mfs"
    res_ams: str = "/ams"

    max_alloc_quantity: int = 16777215
    min_retain_days: int = 0
    max_retain_days: int = 93000
    max_ams_line: int = 255
    max_member_length: int = 8

    vsam_dsorg_choices: tuple[str, ...] = ("INDEXED", "NUMBERED", "NONINDEXED", "LINEAR")
    vsam_alcunit_choices: tuple[str, ...] = ("CYL", "TRK", "MB", "KB", "REC")

    default_file_extension: str = "txt"


FILES_CONFIG = FilesConfig()


class CreateDataSetType(str, Enum):
    """Kinds of data set that Create.data_set knows defaults for."""

    PARTITIONED = "PARTITIONED"
    SEQUENTIAL = "SEQUENTIAL"
    CLASSIC = "CLASSIC"
    C = "C"
    BINARY = "BINARY"
    BLANK = "BLANK"


class TransferMode(str, Enum):
    BINARY = "binary"
    TEXT = "text"


def _frozen(values: dict[str, Any]) -> MappingProxyType:
    return MappingProxyType(values)


DATA_SET_DEFAULTS: MappingProxyType = _frozen(
    {
        CreateDataSetType.PARTITIONED: _frozen(
            {
                "alcunit": "CYL",
                "dsorg": "PO",
                "primary": 1,
                "dirblk": 5,
                "recfm": "FB",
                "blksize": 6160,
                "lrecl": 80,
            }
        ),
        CreateDataSetType.SEQUENTIAL: _frozen(
            {
                "alcunit": "CYL",
                "dsorg": "PS",
                "primary": 1,
                "recfm": "FB",
                "blksize": 6160,
                "lrecl": 80,
            }
        ),
        CreateDataSetType.CLASSIC: _frozen(
            {
                "alcunit": "CYL",
                "dsorg": "PO",
                "primary": 1,
                "recfm": "FB",
                "blksize": 6160,
                "lrecl": 80,
                "dirblk": 25,
            }
        ),
        CreateDataSetType.C: _frozen(
            {
                "dsorg": "PO",
                "alcunit": "CYL",
                "primary": 1,
                "recfm": "VB",
                "blksize": 32760,
                "lrecl": 260,
                "dirblk": 25,
            }
        ),
        CreateDataSetType.BINARY: _frozen(
            {
                "dsorg": "PO",
                "alcunit": "CYL",
                "primary": 10,
                "recfm": "U",
                "blksize": 27998,
                "lrecl": 27998,
                "dirblk": 25,
            }
        ),
        CreateDataSetType.BLANK: _frozen({}),
    }
)

VSAM_DEFAULTS: MappingProxyType = _frozen({"dsorg": "INDEXED", "alcunit": "KB", "primary": 840})

ZFS_DEFAULTS: MappingProxyType = _frozen({"perms": 755, "cylsPri": 10, "cylsSec": 2, "timeout": 20})

DATA_SET_DSNTYPES = ("BASIC", "EXTPREF", "EXTREQ", "HFS", "LARGE", "PDS", "LIBRARY", "PIPE")
DATA_SET_RECFMS = ("D", "DB", "DBS", "DS", "F", "FB", "FBS", "FS", "V", "VB", "VBS", "VS", "U")
VARIABLE_RECFMS = ("V", "VB", "VBS", "VS")
