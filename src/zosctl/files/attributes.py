"""Parsing of .zosattributes files.

Each non-blank, non-comment line reads:

    <pattern> <local-encoding | binary | -> [remote-encoding]

Patterns use shell-style wildcards. A pattern without a "/" matches the
file's base name at any depth; a pattern with a "/" is matched against the
path relative to the attributes file's directory, and also matches anything
beneath a directory it names. When several lines match, the last one wins.
A local encoding of "-" means the file is not uploaded.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from zosctl.errors import ValidationError
from zosctl.files import messages
from zosctl.files.constants import TransferMode

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "ISO8859-1"
BINARY = "binary"
SKIP = "-"


@dataclass(frozen=True)
class FileAttributes:
    ignore: bool
    local_encoding: str | None = None
    remote_encoding: str | None = None


class ZosFilesAttributes:
    """Per-file transfer rules read from a .zosattributes file."""

    def __init__(self, contents: str, base_path: str | None = None):
        self.base_path = base_path
        # "./work", "work/" and "/abs/work" all name the same directory
        self._base = os.path.abspath(base_path) if base_path else None
        self._rules: list[tuple[str, FileAttributes]] = []
        self._parse(contents)

    @classmethod
    def from_file(cls, path: str | Path, base_path: str | None = None) -> "ZosFilesAttributes":
        """Load attributes from a file.

        Raises:
            ValidationError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        if not path.exists():
            raise ValidationError(messages.ATTRIBUTES_FILE_MISSING.format(file=path))
        try:
            contents = path.read_text()
        except OSError as e:
            raise ValidationError(
                messages.ATTRIBUTES_FILE_UNREADABLE.format(file=path, message=e)
            ) from e
        return cls(contents, base_path)

    def _parse(self, contents: str) -> None:
        for line_number, raw_line in enumerate(contents.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) < 2 or len(fields) > 3:
                raise ValidationError(messages.ATTRIBUTES_SYNTAX_ERROR.format(line=line_number))

            pattern, local_encoding = fields[0], fields[1]
            if local_encoding == SKIP:
                self._rules.append((pattern, FileAttributes(ignore=True)))
            else:
                remote_encoding = fields[2] if len(fields) == 3 else None
                self._rules.append(
                    (pattern, FileAttributes(False, local_encoding, remote_encoding))
                )
        logger.debug(f"Parsed {len(self._rules)} attribute rules")

    def file_should_be_uploaded(self, path: str) -> bool:
        attributes = self._find_last_matching(path)
        if attributes is None:
            return True
        return not attributes.ignore

    def get_file_transfer_mode(self, path: str, default_binary: bool | None = None) -> TransferMode:
        """Binary when local and remote encodings agree; text otherwise.

        Unmatched files transfer in binary unless default_binary is False.
        """
        attributes = self._find_last_matching(path)
        if attributes is None or attributes.ignore:
            if default_binary is False:
                return TransferMode.TEXT
            return TransferMode.BINARY

        if attributes.local_encoding == BINARY:
            return TransferMode.BINARY
        if attributes.local_encoding == attributes.remote_encoding:
            return TransferMode.BINARY
        return TransferMode.TEXT

    def get_remote_encoding(self, path: str) -> str | None:
        attributes = self._find_last_matching(path)
        if attributes is None:
            return DEFAULT_ENCODING
        return attributes.remote_encoding

    def get_local_encoding(self, path: str) -> str | None:
        attributes = self._find_last_matching(path)
        if attributes is None:
            return DEFAULT_ENCODING
        return attributes.local_encoding

    def _find_last_matching(self, path: str) -> FileAttributes | None:
        relative = self._relative(path)
        match = None
        for pattern, attributes in self._rules:
            if _matches(pattern, relative):
                match = attributes
        return match

    def _relative(self, path: str) -> str:
        path = str(path)
        if self._base is not None:
            absolute = os.path.abspath(path)
            if absolute == self._base:
                return ""
            if absolute.startswith(self._base.rstrip(os.sep) + os.sep):
                path = os.path.relpath(absolute, self._base)
        return path.replace(os.sep, "/")


def _matches(pattern: str, relative_path: str) -> bool:
    if not relative_path:
        return False
    directory_pattern = pattern.endswith("/")
    pattern = pattern.strip("/")
    parts = relative_path.strip("/").split("/")

    if "/" not in pattern:
        if directory_pattern:
            # A directory name at any depth, and everything beneath it
            return any(fnmatch.fnmatchcase(part, pattern) for part in parts)
        return fnmatch.fnmatchcase(parts[-1], pattern)

    # The path itself, or any parent directory, may match
    for end in range(len(parts), 0, -1):
        if fnmatch.fnmatchcase("/".join(parts[:end]), pattern):
            return True
    return False
