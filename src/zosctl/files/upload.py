"""Upload local content to data sets and USS files.

Data set uploads of several files run one at a time because z/OSMF holds an
enqueue on the target PDS; the first failure stops the batch and the
remaining files are reported as not attempted.

USS directory uploads treat every file as an independent transfer. The
transfer mode of each file is decided in this order:

1. a .zosattributes rule matching the file
2. the file-name map, when the file is listed in it
3. the uniform binary flag
"""

import logging
import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path

from zosctl.batch_executor import BatchExecutor
from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.files import messages
from zosctl.files.attributes import BINARY, ZosFilesAttributes
from zosctl.files.constants import FILES_CONFIG, FilesConfig, TransferMode
from zosctl.files.create import Create
from zosctl.files.list import List
from zosctl.files.response import BatchTransferResult, UploadResult, ZosFilesResponse
from zosctl.files.utils import (
    encode,
    generate_member_name,
    get_file_list_from_path,
    is_data_set_name_masked,
    normalize_newlines,
    recall_header,
    response_timeout_header,
    sanitize_uss_path,
    split_member,
)
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

PDS_DSORGS = ("PO", "PO-E")


@dataclass(frozen=True)
class FilesMap:
    """Transfer mode override for specific file names."""

    binary: bool
    file_names: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TransferOptions:
    """Per-request transfer settings resolved for one upload."""

    binary: bool = False
    record: bool = False
    encoding: str | None = None
    local_encoding: str | None = None


def upload_headers(
    options: TransferOptions,
    response_timeout: int | None = None,
    recall: str | None = None,
    etag: str | None = None,
    return_etag: bool = False,
) -> dict[str, str]:
    """Headers for a PUT of file content.

    Examples:
        >>> upload_headers(TransferOptions(binary=True))["Content-Type"]
        'application/octet-stream'
        >>> upload_headers(TransferOptions(encoding="IBM-1047"))["X-IBM-Data-Type"]
        'text;fileEncoding=IBM-1047'
    """
    headers: dict[str, str] = {}
    if options.binary:
        headers.update(ZosmfHeaders.OCTET_STREAM)
        headers.update(ZosmfHeaders.X_IBM_BINARY)
    elif options.record:
        headers.update(ZosmfHeaders.X_IBM_RECORD)
    else:
        data_type = ZosmfHeaders.X_IBM_TEXT["X-IBM-Data-Type"]
        if options.encoding:
            data_type += ZosmfHeaders.X_IBM_TEXT_ENCODING + options.encoding
        headers["X-IBM-Data-Type"] = data_type
        if options.local_encoding:
            headers["Content-Type"] = options.local_encoding
        else:
            headers.update(ZosmfHeaders.TEXT_PLAIN)

    headers.update(ZosmfHeaders.ACCEPT_ENCODING)
    headers.update(response_timeout_header(response_timeout))
    headers.update(recall_header(recall))
    if etag:
        headers[ZosmfHeaders.IF_MATCH] = etag
    if return_etag:
        headers.update(ZosmfHeaders.X_IBM_RETURN_ETAG)
    return headers


class Upload:
    """Upload operations under /zosmf/restfiles."""

    # -- data sets -------------------------------------------------------

    @classmethod
    def buffer_to_data_set(
        cls,
        session: Session,
        buffer: bytes,
        data_set_name: str,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        volume: str | None = None,
        recall: str | None = None,
        etag: str | None = None,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Write a buffer to a sequential data set or member.

        Text buffers have \\r\\n line ends converted to \\n first.
        """
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)

        resource = config.resource + config.res_ds_files
        if volume:
            resource += f"/-({encode(volume)})"
        resource += f"/{encode(data_set_name)}"

        if not binary and not record:
            buffer = normalize_newlines(buffer)

        options = TransferOptions(binary=binary, record=record, encoding=encoding)
        headers = upload_headers(options, response_timeout, recall, etag, return_etag)
        logger.debug(f"Uploading {len(buffer)} bytes to {data_set_name}")
        response = ZosmfRestClient.put_expect_full_response(session, resource, headers, buffer)

        api_response = {}
        if return_etag:
            api_response["etag"] = response.headers.get("ETag") or response.headers.get("etag")
        return ZosFilesResponse(
            success=True, command_response=messages.DATASET_UPLOADED, api_response=api_response
        )

    @classmethod
    def file_to_data_set(
        cls, session: Session, input_file: str, data_set_name: str, **options
    ) -> ZosFilesResponse:
        """Upload one local file to a sequential data set or member.

        Raises:
            ValidationError: input_file is not a regular file
        """
        logger.info(f"Uploading file {input_file} to {data_set_name}")
        expect_non_blank(input_file, messages.MISSING_INPUT_FILE)
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)
        if not Path(input_file).is_file():
            raise ValidationError(messages.MISSING_INPUT_FILE, additional_details=str(input_file))
        return cls.path_to_data_set(session, input_file, data_set_name, **options)

    @classmethod
    def dir_to_pds(
        cls, session: Session, input_dir: str, data_set_name: str, **options
    ) -> ZosFilesResponse:
        """Upload every file in a directory to members of a PDS.

        Raises:
            ValidationError: input_dir is missing or not a directory
        """
        logger.info(f"Uploading directory {input_dir} to {data_set_name}")
        expect_non_blank(input_dir, messages.MISSING_INPUT_DIR)
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)
        path = Path(input_dir)
        if not path.exists():
            raise ValidationError(messages.MISSING_INPUT_DIR, additional_details=str(input_dir))
        if not path.is_dir():
            raise ValidationError(messages.PATH_IS_NOT_DIRECTORY.format(path=input_dir))
        return cls.path_to_data_set(session, input_dir, data_set_name, **options)

    @classmethod
    def path_to_data_set(
        cls,
        session: Session,
        input_path: str,
        data_set_name: str,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        volume: str | None = None,
        recall: str | None = None,
        etag: str | None = None,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Upload a file, or all files of a directory, to a data set.

        For a PDS each file becomes a member named after the file unless the
        target already names a member. Uploads run sequentially and stop at
        the first failure; files after it get a result with success None.

        Returns:
            ZosFilesResponse whose api_response is the list of UploadResult.
            On failure success is False and command_response holds the error.
        """
        logger.info(f"Uploading path {input_path} to {data_set_name}")
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)

        if is_data_set_name_masked(data_set_name):
            raise ValidationError(messages.UNSUPPORTED_MASKING_IN_DATASET_NAME)

        files = get_file_list_from_path(input_path)

        data_set_name, member_name = split_member(data_set_name)
        if member_name is not None and Path(input_path).is_dir():
            raise ValidationError(messages.UPLOAD_DIRECTORY_TO_MEMBER)

        is_pds = False
        listing = List.data_set(
            session,
            data_set_name,
            attributes=True,
            max_length=1,
            start=data_set_name,
            recall="wait",
            config=config,
        ).api_response
        if listing and listing.get("returnedRows"):
            for item in listing.get("items") or []:
                if item.get("dsname", "").upper() != data_set_name.upper():
                    continue
                if item.get("dsorg") in PDS_DSORGS:
                    is_pds = True
                elif len(files) > 1:
                    raise ValidationError(messages.UPLOAD_DIRECTORY_TO_PS)
                break

        if is_pds and member_name is None:
            for file_path in files:
                if not generate_member_name(file_path):
                    raise ValidationError(messages.MEMBER_NAME_INVALID.format(file=file_path))

        results: list[UploadResult] = []
        upload_error: Exception | None = None
        for file_path in files:
            target = data_set_name
            if is_pds:
                target = f"{target}({member_name or generate_member_name(file_path)})"
            target = target.upper()

            if upload_error is not None:
                results.append(UploadResult(success=None, source=file_path, target=target))
                continue

            try:
                response = cls.buffer_to_data_set(
                    session,
                    Path(file_path).read_bytes(),
                    target,
                    binary=binary,
                    record=record,
                    encoding=encoding,
                    volume=volume,
                    recall=recall,
                    etag=etag,
                    return_etag=return_etag,
                    response_timeout=response_timeout,
                    config=config,
                )
                logger.info(f"Uploaded {file_path} to {target}")
                results.append(
                    UploadResult(
                        success=True,
                        source=file_path,
                        target=target,
                        etag=response.api_response.get("etag") if return_etag else None,
                    )
                )
            except (ZosError, OSError) as e:
                logger.error(f"Failed to upload {file_path} to {target}")
                results.append(UploadResult(success=False, source=file_path, target=target, error=e))
                upload_error = e

        if upload_error is not None:
            message = upload_error.message if isinstance(upload_error, ZosError) else str(upload_error)
            return ZosFilesResponse(
                success=False,
                command_response=message,
                api_response=results,
                error_message=message,
            )
        return ZosFilesResponse(
            success=True, command_response=messages.DATASET_UPLOADED, api_response=results
        )

    # -- USS -------------------------------------------------------------

    @classmethod
    def buffer_to_uss_file(
        cls,
        session: Session,
        uss_name: str,
        buffer: bytes,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        local_encoding: str | None = None,
        etag: str | None = None,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Write a buffer to a USS file and tag it with its encoding."""
        if record:
            raise ValidationError(messages.UNSUPPORTED_DATA_TYPE)
        expect_non_blank(uss_name, messages.MISSING_USS_FILE_NAME)

        resource = f"{config.resource}{config.res_uss_files}/{sanitize_uss_path(uss_name)}"
        if not binary:
            buffer = normalize_newlines(buffer)

        options = TransferOptions(binary=binary, encoding=encoding, local_encoding=local_encoding)
        headers = upload_headers(
            options, response_timeout, etag=etag, return_etag=return_etag
        )
        logger.debug(f"Uploading {len(buffer)} bytes to {uss_name}")
        response = ZosmfRestClient.put_expect_full_response(session, resource, headers, buffer)

        if encoding:
            cls.chtag(session, uss_name, "text", encoding, config=config)
        elif binary:
            cls.chtag(session, uss_name, BINARY, config=config)

        api_response = {}
        if return_etag:
            api_response["etag"] = response.headers.get("ETag") or response.headers.get("etag")
        return ZosFilesResponse(
            success=True, command_response=messages.USS_FILE_UPLOADED, api_response=api_response
        )

    @classmethod
    def file_to_uss_file(
        cls,
        session: Session,
        input_file: str,
        uss_name: str,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        local_encoding: str | None = None,
        etag: str | None = None,
        return_etag: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Upload one local file to a USS file.

        Returns:
            ZosFilesResponse whose api_response is an UploadResult
        """
        expect_non_blank(input_file, messages.MISSING_INPUT_FILE)
        expect_non_blank(uss_name, messages.MISSING_USS_FILE_NAME)
        if record:
            raise ValidationError(messages.UNSUPPORTED_DATA_TYPE)
        if not Path(input_file).is_file():
            raise ValidationError(messages.MISSING_INPUT_FILE, additional_details=str(input_file))

        response = cls.buffer_to_uss_file(
            session,
            uss_name,
            Path(input_file).read_bytes(),
            binary=binary,
            encoding=encoding,
            local_encoding=local_encoding,
            etag=etag,
            return_etag=return_etag,
            response_timeout=response_timeout,
            config=config,
        )
        result = UploadResult(
            success=True,
            source=str(input_file),
            target=uss_name,
            etag=response.api_response.get("etag") if return_etag else None,
        )
        return ZosFilesResponse(
            success=True, command_response=messages.USS_FILE_UPLOADED, api_response=result
        )

    @classmethod
    def chtag(
        cls,
        session: Session,
        uss_name: str,
        tag_type: str,
        codeset: str | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> None:
        """Set the file tag of a USS file ("text" with a codeset, or "binary")."""
        resource = f"{config.resource}{config.res_uss_files}/{sanitize_uss_path(uss_name)}"
        payload = {"request": "chtag", "action": "set", "type": tag_type}
        if codeset:
            payload["codeset"] = codeset
        ZosmfRestClient.put_expect_json(session, resource, dict(ZosmfHeaders.APPLICATION_JSON), payload)

    @classmethod
    def is_directory_exist(
        cls, session: Session, uss_name: str, config: FilesConfig = FILES_CONFIG
    ) -> bool:
        """Whether a USS directory exists; any error listing it counts as no."""
        resource = (
            f"{config.resource}{config.res_uss_files}?path={encode('/')}{sanitize_uss_path(uss_name)}"
        )
        try:
            response = ZosmfRestClient.get_expect_json(
                session, resource, dict(ZosmfHeaders.ACCEPT_ENCODING)
            )
        except ZosError as e:
            logger.debug(f"Directory {uss_name} not found: {e.message}")
            return False
        return bool(response and response.get("items"))

    @classmethod
    def dir_to_uss_dir(
        cls,
        session: Session,
        input_directory: str,
        uss_name: str,
        binary: bool = False,
        record: bool = False,
        recursive: bool = False,
        include_hidden: bool = False,
        files_map: FilesMap | None = None,
        attributes: ZosFilesAttributes | None = None,
        max_concurrent_requests: int | None = 1,
        response_timeout: int | None = None,
        progress_callback=None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Upload a local directory to a USS directory.

        Each file is uploaded independently with at most
        max_concurrent_requests uploads in flight (None or 0: no limit).
        Missing remote directories are created first.

        Returns:
            ZosFilesResponse whose api_response is a BatchTransferResult;
            success is True only if every attempted file was uploaded.
        """
        expect_non_blank(input_directory, messages.MISSING_INPUT_DIR)
        expect_non_blank(uss_name, messages.MISSING_USS_DIRECTORY_NAME)
        if record:
            raise ValidationError(messages.UNSUPPORTED_DATA_TYPE)
        if not Path(input_directory).is_dir():
            raise ValidationError(messages.MISSING_INPUT_DIR, additional_details=str(input_directory))

        directory_failures: list[UploadResult] = []
        jobs = cls._plan_directory(
            session,
            input_directory,
            uss_name,
            binary,
            recursive,
            include_hidden,
            files_map,
            attributes,
            response_timeout,
            config,
            directory_failures,
        )

        def upload_one(job: tuple[str, str, bool]) -> UploadResult:
            local_path, remote_path, file_binary = job
            return cls._upload_file(
                session, local_path, remote_path, file_binary, attributes, response_timeout, config
            )

        executor = BatchExecutor(max_concurrent_requests)
        results = directory_failures + [
            r for r in executor.execute(upload_one, jobs, progress_callback) if r is not None
        ]
        batch = BatchTransferResult(results)

        if batch.success:
            command_response = messages.USS_DIR_UPLOADED
        else:
            command_response = messages.USS_DIR_UPLOAD_PARTIAL.format(
                failed=len(batch.failed), total=len(results)
            )
            logger.error(command_response)
        return ZosFilesResponse(
            success=batch.success,
            command_response=command_response,
            api_response=batch,
            error_message=None if batch.success else command_response,
        )

    @classmethod
    def _plan_directory(
        cls,
        session: Session,
        input_directory: str,
        uss_name: str,
        binary: bool,
        recursive: bool,
        include_hidden: bool,
        files_map: FilesMap | None,
        attributes: ZosFilesAttributes | None,
        response_timeout: int | None,
        config: FilesConfig,
        failures: list[UploadResult],
    ) -> list[tuple[str, str, bool]]:
        """Create remote directories and return (local, remote, binary) per file.

        A directory that cannot be created is recorded in failures and its
        contents are left out of the plan.
        """
        if not cls.is_directory_exist(session, uss_name, config):
            try:
                Create.uss(
                    session, uss_name, "directory", response_timeout=response_timeout, config=config
                )
            except ZosError as e:
                logger.error(f"Failed to create directory {uss_name}: {e}")
                failures.append(
                    UploadResult(success=False, source=input_directory, target=uss_name, error=e)
                )
                return []

        jobs = []
        for file_name in get_file_list_from_path(
            input_directory, full_path=False, ignore_hidden=not include_hidden
        ):
            file_binary = binary
            if files_map is not None and file_name in files_map.file_names:
                file_binary = files_map.binary
            jobs.append(
                (
                    os.path.normpath(os.path.join(input_directory, file_name)),
                    posixpath.join(uss_name, file_name),
                    file_binary,
                )
            )

        if not recursive:
            return jobs

        subdirectories = [
            entry
            for entry in sorted(os.listdir(input_directory))
            if os.path.isdir(os.path.join(input_directory, entry))
            and (include_hidden or not entry.startswith("."))
        ]
        if attributes is not None:
            subdirectories = [
                d
                for d in subdirectories
                if attributes.file_should_be_uploaded(os.path.join(input_directory, d))
            ]

        for directory in subdirectories:
            jobs.extend(
                cls._plan_directory(
                    session,
                    os.path.normpath(os.path.join(input_directory, directory)),
                    posixpath.join(uss_name, directory),
                    binary,
                    recursive,
                    include_hidden,
                    files_map,
                    attributes,
                    response_timeout,
                    config,
                    failures,
                )
            )
        return jobs

    @classmethod
    def _upload_file(
        cls,
        session: Session,
        local_path: str,
        uss_path: str,
        binary: bool,
        attributes: ZosFilesAttributes | None,
        response_timeout: int | None,
        config: FilesConfig,
    ) -> UploadResult | None:
        """Upload one file of a directory; None when attributes say to skip it."""
        encoding = None
        local_encoding = None
        if attributes is not None:
            if not attributes.file_should_be_uploaded(local_path):
                logger.debug(f"Skipping {local_path}")
                return None
            binary = attributes.get_file_transfer_mode(local_path, binary) == TransferMode.BINARY
            remote_encoding = attributes.get_remote_encoding(local_path)
            if remote_encoding is not None and remote_encoding != BINARY:
                encoding = remote_encoding
            if not binary:
                local_encoding = attributes.get_local_encoding(local_path)

        try:
            response = cls.file_to_uss_file(
                session,
                local_path,
                uss_path,
                binary=binary,
                encoding=encoding,
                local_encoding=local_encoding,
                response_timeout=response_timeout,
                config=config,
            )
        except (ZosError, OSError) as e:
            logger.error(f"Failed to upload {local_path} to {uss_path}: {e}")
            return UploadResult(success=False, source=local_path, target=uss_path, error=e)
        return response.api_response
