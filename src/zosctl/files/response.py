"""Result types returned by file operations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ZosFilesResponse:
    """Outcome of a file operation.

    Attributes:
        success: Whether the operation completed
        command_response: Message suitable for display
        api_response: Parsed z/OSMF response or per-item results
        error_message: Failure text when success is False
    """

    success: bool
    command_response: str = ""
    api_response: Any = None
    error_message: str | None = None


@dataclass
class UploadResult:
    """Per-file outcome of a batch upload.

    success is None for files that were skipped because an earlier upload
    in the same batch failed.
    """

    success: bool | None
    source: str
    target: str
    error: Exception | None = None
    etag: str | None = None


@dataclass
class BatchTransferResult:
    """Aggregate of independent per-item transfers."""

    results: list[UploadResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed(self) -> list[UploadResult]:
        return [r for r in self.results if r.success is False]

    @property
    def succeeded(self) -> list[UploadResult]:
        return [r for r in self.results if r.success]
