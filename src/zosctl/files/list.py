"""List data sets, members, USS files and mounted file systems."""

import logging
from typing import Any

from zosctl.batch_executor import BatchExecutor
from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.files import messages
from zosctl.files.constants import FILES_CONFIG, FilesConfig
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import encode, recall_header, response_timeout_header
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

_TABLE_PARAMETERS = ("group", "user", "name", "size", "mtime", "perm", "type")


def list_headers(
    attributes: bool = False,
    max_length: int | None = None,
    recall: str | None = None,
    response_timeout: int | None = None,
) -> dict[str, str]:
    """Headers for a list request.

    A missing or zero max_length asks z/OSMF for every item.
    """
    headers = dict(ZosmfHeaders.ACCEPT_ENCODING)
    headers[ZosmfHeaders.X_IBM_MAX_ITEMS] = str(max_length or 0)
    if attributes:
        headers.update(ZosmfHeaders.X_IBM_ATTRIBUTES_BASE)
    headers.update(recall_header(recall))
    headers.update(response_timeout_header(response_timeout))
    return headers


def _query(params: list[tuple[str, Any]]) -> str:
    present = [f"{key}={encode(value)}" for key, value in params if value not in (None, "")]
    return "?" + "&".join(present) if present else ""


class List:
    """Listing operations under /zosmf/restfiles."""

    @classmethod
    def data_set(
        cls,
        session: Session,
        data_set_name: str,
        attributes: bool = False,
        max_length: int | None = None,
        volume: str | None = None,
        start: str | None = None,
        recall: str | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """List data sets whose names match a data set level.

        Args:
            data_set_name: Data set level, wildcards allowed (e.g. "IBMUSER.*")
            volume: Restrict the search to one volume serial
            start: Resume the listing after this data set name
        """
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)
        resource = config.resource + config.res_ds_files + _query(
            [("dslevel", data_set_name), ("volser", volume), ("start", start)]
        )
        headers = list_headers(attributes, max_length, recall, response_timeout)
        logger.debug(f"Listing data sets: {resource}")
        response = ZosmfRestClient.get_expect_json(session, resource, headers)
        return ZosFilesResponse(success=True, api_response=response)

    @classmethod
    def all_members(
        cls,
        session: Session,
        data_set_name: str,
        attributes: bool = False,
        max_length: int | None = None,
        pattern: str | None = None,
        start: str | None = None,
        recall: str | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """List the members of a partitioned data set."""
        expect_non_blank(data_set_name, messages.MISSING_DATASET_NAME)
        resource = (
            config.resource
            + config.res_ds_files
            + "/"
            + encode(data_set_name)
            + config.res_ds_members
            + _query([("pattern", pattern), ("start", start)])
        )
        headers = list_headers(attributes, max_length, recall, response_timeout)
        logger.debug(f"Listing members: {resource}")
        response = ZosmfRestClient.get_expect_json(session, resource, headers)
        return ZosFilesResponse(success=True, api_response=response)

    @classmethod
    def file_list(
        cls,
        session: Session,
        path: str,
        max_length: int | None = None,
        group: str | None = None,
        user: str | None = None,
        name: str | None = None,
        size: str | None = None,
        mtime: str | None = None,
        perm: str | None = None,
        type: str | None = None,
        depth: int | None = None,
        filesys: bool | None = None,
        symlinks: bool | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """List a USS directory.

        depth, filesys and symlinks refine a search, so they need at least one
        of the search filters (group, user, name, size, mtime, perm, type).
        filesys=True searches all file systems ("all") and False stays on the
        same one ("same"); symlinks=True reports links ("report") and False
        follows them ("follow").
        """
        expect_non_blank(path, messages.MISSING_USS_FILE_NAME)
        filters = {
            "group": group,
            "user": user,
            "name": name,
            "size": size,
            "mtime": mtime,
            "perm": perm,
            "type": type,
        }
        if depth or filesys is not None or symlinks is not None:
            if not any(filters[key] for key in _TABLE_PARAMETERS):
                raise ValidationError(messages.MISSING_TABLE_PARAMETERS)

        path = path.strip()
        if len(path) > 1 and path.endswith("/"):
            path = path[:-1]

        params: list[tuple[str, Any]] = [("path", path)]
        params.extend(filters.items())
        params.append(("depth", depth))
        if filesys is not None:
            params.append(("filesys", "all" if filesys else "same"))
        if symlinks is not None:
            params.append(("symlinks", "report" if symlinks else "follow"))

        resource = config.resource + config.res_uss_files + _query(params)
        headers = list_headers(max_length=max_length, response_timeout=response_timeout)
        logger.debug(f"Listing USS files: {resource}")
        response = ZosmfRestClient.get_expect_json(session, resource, headers)
        return ZosFilesResponse(success=True, api_response=response)

    @classmethod
    def fs(
        cls,
        session: Session,
        fsname: str | None = None,
        path: str | None = None,
        max_length: int | None = None,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """List mounted file systems, optionally by name or by a path inside one."""
        if fsname:
            query = _query([("fsname", fsname)])
        else:
            query = _query([("path", path)])
        resource = config.resource + config.res_mfs + query
        headers = list_headers(max_length=max_length, response_timeout=response_timeout)
        logger.debug(f"Listing file systems: {resource}")
        response = ZosmfRestClient.get_expect_json(session, resource, headers)
        return ZosFilesResponse(success=True, api_response=response)

    @classmethod
    def data_sets_matching_pattern(
        cls,
        session: Session,
        patterns: list[str],
        exclude_patterns: list[str] | None = None,
        max_length: int | None = None,
        max_concurrent_requests: int | None = 1,
        response_timeout: int | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """List data sets, with attributes, matching any of several patterns.

        A listing with attributes can fail server side (for example when a
        data set triggers a TSO prompt). On a 5xx reply the pattern is listed
        by name only and the attributes are fetched one data set at a time;
        a data set whose attributes cannot be read carries the error under
        "error".

        Returns:
            ZosFilesResponse whose api_response is the list of data set items;
            success is False when nothing matched or everything was excluded.
        """
        if patterns is None:
            raise ValidationError(messages.MISSING_PATTERNS)
        patterns = [pattern for pattern in patterns if pattern]
        if not patterns:
            raise ValidationError(messages.MISSING_PATTERNS)

        items: list[dict] = []
        for pattern in patterns:
            remaining = max_length - len(items) if max_length else None
            if max_length and remaining <= 0:
                break
            try:
                response = cls.data_set(
                    session,
                    pattern,
                    attributes=True,
                    max_length=remaining,
                    response_timeout=response_timeout,
                    config=config,
                )
            except ZosError as e:
                if not str(e.error_code or "").startswith("5"):
                    raise
                logger.warning(f"Listing {pattern} with attributes failed, retrying by name: {e}")
                response = cls.data_set(
                    session, pattern, response_timeout=response_timeout, config=config
                )
                cls._fill_attributes(
                    session,
                    response.api_response.get("items", []),
                    max_concurrent_requests,
                    response_timeout,
                    config,
                )
            items.extend(response.api_response.get("items", []))

        if not items:
            return ZosFilesResponse(
                success=False, command_response=messages.NO_DATASETS_MATCHING_PATTERN, api_response=[]
            )

        for pattern in exclude_patterns or []:
            excluded = {
                item["dsname"]
                for item in cls.data_set(
                    session, pattern, response_timeout=response_timeout, config=config
                ).api_response.get("items", [])
            }
            items = [item for item in items if item["dsname"] not in excluded]

        if not items:
            return ZosFilesResponse(
                success=False, command_response=messages.NO_DATASETS_IN_LIST, api_response=[]
            )
        return ZosFilesResponse(
            success=True,
            command_response=messages.DATASETS_MATCHED_PATTERN.format(count=len(items)),
            api_response=items,
        )

    @classmethod
    def _fill_attributes(
        cls,
        session: Session,
        items: list[dict],
        max_concurrent_requests: int | None,
        response_timeout: int | None,
        config: FilesConfig,
    ) -> None:
        def fill(item: dict) -> None:
            try:
                response = cls.data_set(
                    session,
                    item["dsname"],
                    attributes=True,
                    max_length=1,
                    response_timeout=response_timeout,
                    config=config,
                )
            except ZosError as e:
                item["error"] = e
                return
            found = response.api_response.get("items") or [{}]
            item.update(found[0])

        BatchExecutor(max_concurrent_requests).execute(fill, items)
