"""Download data sets, members and USS files to the local file system."""

import logging
import os
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path

from zosctl.batch_executor import BatchExecutor
from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.files import messages
from zosctl.files.attributes import ZosFilesAttributes
from zosctl.files.constants import FILES_CONFIG, FilesConfig, TransferMode
from zosctl.files.list import List
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import (
    data_transfer_headers,
    encode,
    get_dirs_from_data_set,
    sanitize_uss_path,
)
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

_RECORD_RANGE = re.compile(r"^\d+-\d*$|^\d+,\d+$")


def normalize_extension(extension: str | None) -> str:
    """Return ".ext" for "ext" or ".ext", and "" for an empty extension."""
    if not extension:
        return ""
    extension = extension.strip()
    return extension if extension.startswith(".") else "." + extension


def download_headers(
    binary: bool = False,
    record: bool = False,
    encoding: str | None = None,
    local_encoding: str | None = None,
    record_range: str | None = None,
    return_etag: bool = False,
    response_timeout: int | None = None,
) -> dict[str, str]:
    headers = data_transfer_headers(binary, record, encoding, response_timeout)
    if not binary and not record:
        if local_encoding:
            headers["Content-Type"] = local_encoding
        else:
            headers.update(ZosmfHeaders.TEXT_PLAIN)
    if record_range:
        if not _RECORD_RANGE.match(record_range):
            raise ValidationError(messages.RECORD_RANGE_INVALID)
        headers[ZosmfHeaders.X_IBM_RECORD_RANGE] = record_range
    if return_etag:
        headers.update(ZosmfHeaders.X_IBM_RETURN_ETAG)
    return headers


def _stream_to_file(
    session: Session, resource: str, headers: dict[str, str], path: Path, normalize_newlines: bool
):
    """Stream resource into path, replacing an existing file only once the transfer completes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + ".part")
    try:
        with open(temp_path, "wb") as stream:
            response = ZosmfRestClient.get_streamed(
                session, resource, headers, stream, normalize_newlines=normalize_newlines
            )
        os.replace(temp_path, path)
    except (ZosError, OSError):
        temp_path.unlink(missing_ok=True)
        raise
    return response


@dataclass
class UssDirDownloadResult:
    downloaded: list[str] = field(default_factory=list)
    skipped_existing: list[str] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)

    def summary(self, directory: str | None) -> str:
        lines = []
        if self.downloaded:
            lines.append(
                f"{len(self.downloaded)} file(s) downloaded successfully to {directory or './'}"
            )
        if self.skipped_existing:
            lines.append(
                f"{len(self.skipped_existing)} file(s) skipped because they already exist."
            )
            lines.extend(f"    {name}" for name in self.skipped_existing)
            lines.append("\nRerun the command with --overwrite to download the files listed above.")
        if self.failed:
            lines.append(f"{len(self.failed)} file(s) failed to download:")
            lines.extend(f"    {name}" for name in self.failed)
            lines.append("")
            lines.extend(str(e) for e in self.failed.values())
        return "\n".join(lines) + "\n"


@dataclass
class DataSetsDownloadResult:
    downloaded: list[str] = field(default_factory=list)
    failed_archived: list[str] = field(default_factory=list)
    failed_unsupported: list[str] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)

    @property
    def failure_count(self) -> int:
        return len(self.failed_archived) + len(self.failed_unsupported) + len(self.failed)

    def summary(self, directory: str | None, fail_fast: bool) -> str:
        lines = []
        if self.downloaded:
            lines.append(
                f"{len(self.downloaded)} data set(s) downloaded successfully to {directory or './'}"
            )
        if self.failure_count:
            lines.append(f"{self.failure_count} data set(s) failed to download:")
            if self.failed_archived:
                lines.append(f"{len(self.failed_archived)} failed because they are archived")
                lines.extend(f"    {name}" for name in self.failed_archived)
            if self.failed_unsupported:
                lines.append(f"{len(self.failed_unsupported)} failed because they are an unsupported type")
                lines.extend(f"    {name}" for name in self.failed_unsupported)
            if self.failed:
                lines.append(f"{len(self.failed)} failed because of an uncaught error")
                lines.extend(f"    {name}" for name in self.failed)
                lines.append("")
                lines.extend(str(e) for e in self.failed.values())
            if fail_fast:
                lines.append("\nSome data sets may have been skipped because --fail-fast is true.")
                lines.append(
                    "To ignore errors and continue downloading, rerun the command with --no-fail-fast."
                )
        return "\n".join(lines) + "\n"


class Download:
    """Download operations under /zosmf/restfiles."""

    @classmethod
    def data_set(
        cls,
        session: Session,
        data_set_name: str,
        file: str | None = None,
        extension: str | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        local_encoding: str | None = None,
        volume: str | None = None,
        record_range: str | None = None,
        preserve_original_letter_case: bool = False,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Download a sequential data set or member to a local file.

        Without file, the destination mirrors the data set name:
        "USER.DATA(MEM)" lands in user/data/mem.txt. An existing local file
        is replaced only once the transfer succeeds.
        """
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)

        resource = config.resource + config.res_ds_files
        if volume:
            resource += f"/-({encode(volume)})"
        resource += f"/{encode(data_set_name)}"

        headers = download_headers(
            binary, record, encoding, local_encoding, record_range, return_etag, response_timeout
        )

        if file:
            destination = file
        else:
            generated = get_dirs_from_data_set(data_set_name)
            if preserve_original_letter_case:
                generated = generated.upper()
            ext = config.default_file_extension if extension is None else extension
            destination = generated + normalize_extension(ext)

        logger.debug(f"Downloading {resource} to {destination}")
        try:
            response = _stream_to_file(
                session, resource, headers, Path(destination), normalize_newlines=not (binary or record)
            )
        except ZosError:
            logger.error(f"Failed to download {data_set_name}")
            raise

        api_response = {}
        if return_etag:
            api_response["etag"] = response.headers.get("ETag") or response.headers.get("etag")
        return ZosFilesResponse(
            success=True,
            command_response=messages.DATASET_DOWNLOADED.format(path=destination),
            api_response=api_response,
        )

    @classmethod
    def all_members(
        cls,
        session: Session,
        data_set_name: str,
        directory: str | None = None,
        extension: str | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        volume: str | None = None,
        preserve_original_letter_case: bool = False,
        fail_fast: bool = True,
        max_concurrent_requests: int | None = 1,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Download every member of a PDS into a directory.

        Raises:
            ZosError: One or more members failed; details name each member
        """
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)

        listing = List.all_members(
            session, data_set_name, response_timeout=response_timeout, config=config
        ).api_response
        members = [item["member"] for item in listing.get("items", [])]
        if not members:
            return ZosFilesResponse(
                success=False, command_response=messages.NO_MEMBERS_FOUND, api_response=listing
            )

        if directory:
            base_dir = directory
        else:
            base_dir = get_dirs_from_data_set(data_set_name)
            if preserve_original_letter_case:
                base_dir = base_dir.upper()
        ext = normalize_extension(config.default_file_extension if extension is None else extension)

        failures: dict[str, Exception] = {}

        def download_member(member: str) -> None:
            file_name = member if preserve_original_letter_case else member.lower()
            try:
                cls.data_set(
                    session,
                    f"{data_set_name}({member})",
                    file=os.path.join(base_dir, file_name + ext),
                    binary=binary,
                    record=record,
                    encoding=encoding,
                    volume=volume,
                    response_timeout=response_timeout,
                    config=config,
                )
            except ZosError as e:
                failures[file_name] = e
                if fail_fast:
                    raise

        BatchExecutor(max_concurrent_requests).execute(download_member, members)

        if failures:
            raise ZosError(
                messages.MEMBERS_DOWNLOAD_FAILED
                + "\n".join(failures)
                + "\n\n"
                + "\n".join(str(e) for e in failures.values()),
                additional_details="\n".join(failures),
                cause_errors=list(failures.values()),
            )

        return ZosFilesResponse(
            success=True,
            command_response=messages.MEMBERS_DOWNLOADED.format(path=base_dir),
            api_response=listing,
        )

    @classmethod
    def all_data_sets(
        cls,
        session: Session,
        data_sets: list[dict],
        directory: str | None = None,
        extension: str | None = None,
        extension_map: dict[str, str] | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        volume: str | None = None,
        preserve_original_letter_case: bool = False,
        fail_fast: bool = True,
        max_concurrent_requests: int | None = 1,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Download listed data sets: sequential ones to files, partitioned ones to directories.

        data_sets are items of a data set listing with attributes (see
        List.data_sets_matching_pattern). Items without a dsorg are archived
        or aliases and are skipped, as are organizations other than PS, PO
        and PO-E. extension_map chooses the extension by low-level qualifier.
        Partitioned data sets are downloaded one after another, each with up
        to max_concurrent_requests members in flight; sequential ones are
        downloaded in parallel.

        Raises:
            ValidationError: data_sets is empty
            ZosError: A download failed, or with fail_fast a data set had to
                be skipped; additional_details holds the summary
        """
        if not data_sets:
            raise ValidationError(messages.NO_DATASETS_IN_LIST)

        result = DataSetsDownloadResult()
        pds_tasks: list[tuple[dict, str, str]] = []
        ps_tasks: list[tuple[dict, str]] = []

        for item in data_sets:
            dsname = item["dsname"]
            llq = dsname.rsplit(".", 1)[-1]
            if not preserve_original_letter_case:
                llq = llq.lower()
            ext = (extension_map or {}).get(llq, extension)
            ext = ext.lstrip(".") if ext else ext
            dsorg = item.get("dsorg")

            if item.get("error") is not None:
                result.failed[dsname] = item["error"]
            elif not dsorg:
                item["status"] = f"Skipped: Archived data set or alias - type {item.get('vol')}."
                result.failed_archived.append(dsname)
            elif dsorg in ("PO", "PO-E"):
                target = get_dirs_from_data_set(dsname)
                if preserve_original_letter_case:
                    target = target.upper()
                if directory:
                    target = os.path.join(directory, target)
                pds_tasks.append((item, target, ext))
            elif dsorg == "PS":
                suffix = config.default_file_extension if ext is None else ext
                file_name = f"{dsname}.{suffix}" if suffix else dsname
                if not preserve_original_letter_case:
                    file_name = file_name.lower()
                ps_tasks.append((item, os.path.join(directory, file_name) if directory else file_name))
            else:
                item["status"] = f"Skipped: Unsupported data set - type {dsorg}."
                result.failed_unsupported.append(dsname)

        if result.failure_count and fail_fast:
            raise ZosError(
                messages.DATASETS_DOWNLOAD_FAILED + "\n".join(
                    result.failed_archived + result.failed_unsupported + list(result.failed)
                ),
                additional_details=result.summary(directory, fail_fast),
            )

        def record_failure(dsname: str, error: ZosError) -> None:
            result.failed[dsname] = error
            if fail_fast:
                raise ZosError(
                    f"Failed to download {dsname}",
                    additional_details=result.summary(directory, fail_fast),
                    cause_errors=error,
                ) from error

        for item, target, ext in pds_tasks:
            try:
                response = cls.all_members(
                    session,
                    item["dsname"],
                    directory=target,
                    extension=ext,
                    binary=binary,
                    record=record,
                    encoding=encoding,
                    volume=volume,
                    preserve_original_letter_case=preserve_original_letter_case,
                    fail_fast=fail_fast,
                    max_concurrent_requests=max_concurrent_requests,
                    response_timeout=response_timeout,
                    config=config,
                )
            except ZosError as e:
                record_failure(item["dsname"], e)
                continue
            result.downloaded.append(item["dsname"])
            members = [m["member"] for m in response.api_response.get("items", [])]
            item["status"] = response.command_response
            if members:
                item["status"] += f"\nMembers: {', '.join(members)};"
            else:
                os.makedirs(target, exist_ok=True)

        def download_sequential(task: tuple[dict, str]) -> None:
            item, file = task
            try:
                response = cls.data_set(
                    session,
                    item["dsname"],
                    file=file,
                    binary=binary,
                    record=record,
                    encoding=encoding,
                    volume=volume,
                    response_timeout=response_timeout,
                    config=config,
                )
            except ZosError as e:
                record_failure(item["dsname"], e)
                return
            result.downloaded.append(item["dsname"])
            item["status"] = response.command_response

        BatchExecutor(max_concurrent_requests).execute(download_sequential, ps_tasks)

        if result.failed:
            raise ZosError(
                messages.DATASETS_DOWNLOAD_FAILED + "\n".join(result.failed),
                additional_details=result.summary(directory, fail_fast),
                cause_errors=list(result.failed.values()),
            )

        success = result.failure_count == 0
        return ZosFilesResponse(
            success=success,
            command_response=result.summary(directory, fail_fast),
            api_response=data_sets,
            error_message=None if success else messages.SOME_DOWNLOADS_FAILED,
        )

    @classmethod
    def uss_file(
        cls,
        session: Session,
        uss_file_name: str,
        file: str | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        local_encoding: str | None = None,
        record_range: str | None = None,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Download a USS file; by default into the current directory under its base name."""
        expect_non_blank(uss_file_name, messages.MISSING_USS_FILE_NAME)
        if record:
            raise ValidationError(messages.UNSUPPORTED_DATA_TYPE)

        destination = file or posixpath.basename(posixpath.normpath(uss_file_name))
        resource = f"{config.resource}{config.res_uss_files}/{sanitize_uss_path(uss_file_name)}"
        headers = download_headers(
            binary, False, encoding, local_encoding, record_range, return_etag, response_timeout
        )

        logger.debug(f"Downloading {resource} to {destination}")
        try:
            response = _stream_to_file(
                session, resource, headers, Path(destination), normalize_newlines=not binary
            )
        except ZosError:
            logger.error(f"Failed to download {uss_file_name}")
            raise

        api_response = {}
        if return_etag:
            api_response["etag"] = response.headers.get("ETag") or response.headers.get("etag")
        return ZosFilesResponse(
            success=True,
            command_response=messages.USS_FILE_DOWNLOADED.format(path=destination),
            api_response=api_response,
        )

    @classmethod
    def uss_dir(
        cls,
        session: Session,
        uss_dir_name: str,
        directory: str | None = None,
        binary: bool = False,
        encoding: str | None = None,
        include_hidden: bool = False,
        overwrite: bool = False,
        fail_fast: bool = True,
        attributes: ZosFilesAttributes | None = None,
        max_concurrent_requests: int | None = 1,
        depth: int | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Download a USS directory tree.

        Directories in the listing are created locally; regular files are
        downloaded unless they already exist locally and overwrite is off.
        """
        expect_non_blank(uss_dir_name, messages.MISSING_USS_DIRECTORY_NAME)
        working_directory = directory or os.getcwd()
        result = UssDirDownloadResult()

        listing = List.file_list(
            session, uss_dir_name, name="*", depth=depth, response_timeout=response_timeout, config=config
        ).api_response

        tasks: list[tuple[str, dict]] = []
        for item in listing.get("items", []):
            name = item.get("name", "")
            if name in (".", "..", "..."):
                continue
            if not include_hidden and re.search(r"(^|/)\.", name):
                continue
            mode = item.get("mode", "")
            if mode.startswith("-"):
                if attributes is not None and not attributes.file_should_be_uploaded(name):
                    continue
                file_options = {"binary": binary, "encoding": encoding}
                if attributes is not None:
                    file_binary = attributes.get_file_transfer_mode(name, binary) == TransferMode.BINARY
                    file_options = {"binary": file_binary, "encoding": None}
                    if not file_binary:
                        file_options["encoding"] = attributes.get_remote_encoding(name)
                        file_options["local_encoding"] = attributes.get_local_encoding(name)
                tasks.append((name, file_options))
            elif mode.startswith("d"):
                os.makedirs(os.path.join(working_directory, name), exist_ok=True)

        def download_file(task: tuple[str, dict]) -> None:
            name, file_options = task
            destination = os.path.join(working_directory, name)
            if os.path.exists(destination) and not overwrite:
                result.skipped_existing.append(name)
                return
            try:
                cls.uss_file(
                    session,
                    posixpath.join(uss_dir_name, name),
                    file=destination,
                    response_timeout=response_timeout,
                    config=config,
                    **file_options,
                )
                result.downloaded.append(name)
            except ZosError as e:
                result.failed[name] = e
                if fail_fast:
                    raise

        try:
            BatchExecutor(max_concurrent_requests).execute(download_file, tasks)
        except ZosError as e:
            raise ZosError(
                f"Failed to download {', '.join(result.failed) or uss_dir_name}",
                additional_details=result.summary(directory),
                cause_errors=e,
            ) from e

        success = not result.failed
        summary = result.summary(directory)
        return ZosFilesResponse(
            success=success,
            command_response=summary,
            api_response=result,
            error_message=None if success else summary,
        )
