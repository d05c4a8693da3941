"""Helpers shared by the file operations."""

import os
import posixpath
import re
from pathlib import Path
from urllib.parse import quote

from zosctl.files.constants import FILES_CONFIG
from zosctl.rest_client import ZosmfHeaders

DSN_SEP = "."

_MEMBER_INVALID_CHARS = re.compile(r"[^A-Z0-9@#$]")
_LEADING_DIGITS = re.compile(r"^\d+")


def encode(value: str) -> str:
    """Percent-encode a path segment the way z/OSMF expects."""
    return quote(str(value), safe="!*'()")


def get_dirs_from_data_set(data_set_name: str) -> str:
    """Map a data set name to a relative local directory path.

    Examples:
        >>> get_dirs_from_data_set("USER.DATA.SET")
        'user/data/set'
        >>> get_dirs_from_data_set("USER.PDS(MEMBER)")
        'user/pds/member'
    """
    local = data_set_name.replace(DSN_SEP, "/").lower()
    if "(" in local and ")" in local:
        local = local.replace("(", "/", 1)
        local = local[:-1]
    return local


def get_file_list_from_path(
    input_path: str | Path, full_path: bool = True, ignore_hidden: bool = True
) -> list[str]:
    """List the regular files named by input_path.

    A file yields itself; a directory yields its immediate files (no
    recursion), skipping names that begin with "." when ignore_hidden.
    """
    path = Path(input_path).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path

    if path.is_dir():
        files = []
        for entry in sorted(os.listdir(path)):
            entry_path = path / entry
            if not entry_path.is_file() or entry_path.is_symlink():
                continue
            if ignore_hidden and entry.startswith("."):
                continue
            files.append(str(entry_path) if full_path else entry)
        return files

    if path.is_file():
        return [str(path) if full_path else str(input_path)]
    return []


def generate_member_name(file_name: str) -> str:
    """Derive a PDS member name from a local file name.

    Examples:
        >>> generate_member_name("/tmp/my-file.txt")
        'MYFILE'
        >>> generate_member_name("1abc.cbl")
        'ABC'
    """
    name = os.path.basename(file_name).upper()
    stem, _ = os.path.splitext(name)
    stem = _MEMBER_INVALID_CHARS.sub("", stem)
    stem = _LEADING_DIGITS.sub("", stem)
    return stem[: FILES_CONFIG.max_member_length]


def is_data_set_name_masked(data_set_name: str) -> bool:
    return bool(re.search(r"[*%]", data_set_name))


def normalize_newlines(data: bytes) -> bytes:
    return data.replace(b"\r\n", b"\n")


def sanitize_uss_path(uss_path: str) -> str:
    """Normalize a USS path, drop its leading slash and percent-encode it."""
    normalized = posixpath.normpath(uss_path)
    if normalized.startswith("/"):
        normalized = normalized[1:]
    return encode(normalized)


def split_member(data_set_name: str) -> tuple[str, str | None]:
    """Split "DSN(MEMBER)" into ("DSN", "MEMBER")."""
    if data_set_name.endswith(")") and "(" in data_set_name:
        index = data_set_name.index("(")
        return data_set_name[:index], data_set_name[index + 1 : -1]
    return data_set_name, None


def data_transfer_headers(
    binary: bool = False,
    record: bool = False,
    encoding: str | None = None,
    response_timeout: int | None = None,
) -> dict[str, str]:
    """Headers selecting the z/OSMF data type for a read."""
    headers: dict[str, str] = {}
    if binary:
        headers.update(ZosmfHeaders.X_IBM_BINARY)
    elif record:
        headers.update(ZosmfHeaders.X_IBM_RECORD)
    elif encoding:
        headers["X-IBM-Data-Type"] = (
            ZosmfHeaders.X_IBM_TEXT["X-IBM-Data-Type"] + ZosmfHeaders.X_IBM_TEXT_ENCODING + encoding
        )

    # z/OSMF truncates gzipped binary data, so compression is text only
    if not binary and not record:
        headers.update(ZosmfHeaders.ACCEPT_ENCODING)

    if response_timeout is not None:
        headers[ZosmfHeaders.X_IBM_RESPONSE_TIMEOUT] = str(response_timeout)
    return headers


def recall_header(recall: str | None) -> dict[str, str]:
    if not recall:
        return {}
    value = recall.lower()
    if value == "wait":
        return dict(ZosmfHeaders.X_IBM_MIGRATED_RECALL_WAIT)
    if value == "error":
        return dict(ZosmfHeaders.X_IBM_MIGRATED_RECALL_ERROR)
    return dict(ZosmfHeaders.X_IBM_MIGRATED_RECALL_NO_WAIT)


def response_timeout_header(response_timeout: int | None) -> dict[str, str]:
    if response_timeout is None:
        return {}
    return {ZosmfHeaders.X_IBM_RESPONSE_TIMEOUT: str(response_timeout)}
