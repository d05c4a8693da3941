"""Delete data sets, VSAM clusters, USS files and z/OS file systems."""

import logging
import posixpath

from zosctl.errors import expect_non_blank
from zosctl.files import messages
from zosctl.files.constants import FILES_CONFIG, FilesConfig
from zosctl.files.invoke import Invoke
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import encode, response_timeout_header
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)


class Delete:
    @classmethod
    def data_set(
        cls,
        session: Session,
        data_set_name: str,
        volume: str | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Delete a data set or a single member ("DSN(MEMBER)")."""
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)

        resource = config.resource + config.res_ds_files
        if volume:
            resource += f"/-({encode(volume)})"
        resource += f"/{encode(data_set_name)}"

        logger.debug(f"Deleting {resource}")
        # z/OSMF answers 204 with no body
        ZosmfRestClient.delete_expect_string(
            session, resource, response_timeout_header(response_timeout)
        )
        return ZosFilesResponse(success=True, command_response=messages.DATASET_DELETED)

    @classmethod
    def vsam(
        cls,
        session: Session,
        data_set_name: str,
        erase: bool = False,
        purge: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Delete a VSAM cluster with IDCAMS.

        Args:
            erase: Overwrite the data component before deleting
            purge: Delete even if the retention period has not expired
        """
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)
        statements = [
            "DELETE -",
            f"{data_set_name} -",
            "CLUSTER -",
            f"{'ERASE' if erase else 'NOERASE'} -",
            "PURGE" if purge else "NOPURGE",
        ]
        response = Invoke.ams_statements(session, statements, response_timeout, config=config)
        return ZosFilesResponse(
            success=True, command_response=messages.DATASET_DELETED, api_response=response
        )

    @classmethod
    def uss_file(
        cls,
        session: Session,
        file_name: str,
        recursive: bool = False,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Delete a USS file, or a directory tree when recursive."""
        expect_non_blank(file_name, messages.MISSING_USS_FILE_NAME)

        normalized = posixpath.normpath(file_name).lstrip("/")
        resource = f"{config.resource}{config.res_uss_files}/{encode(normalized)}"
        headers = response_timeout_header(response_timeout)
        if recursive:
            headers.update(ZosmfHeaders.X_IBM_RECURSIVE)

        logger.debug(f"Deleting {resource}")
        ZosmfRestClient.delete_expect_string(session, resource, headers)
        return ZosFilesResponse(success=True, command_response=messages.USS_DELETED)

    @classmethod
    def zfs(
        cls,
        session: Session,
        file_system_name: str,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        expect_non_blank(file_system_name, messages.MISSING_FILE_SYSTEM_NAME)
        resource = f"{config.resource}{config.res_zfs_files}/{encode(file_system_name)}"
        data = ZosmfRestClient.delete_expect_string(
            session, resource, response_timeout_header(response_timeout)
        )
        return ZosFilesResponse(success=True, command_response=messages.ZFS_DELETED, api_response=data)
