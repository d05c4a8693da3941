"""Search the contents of data sets and PDS members for a string."""

import logging
import time
from dataclasses import dataclass, field

from zosctl.batch_executor import BatchExecutor
from zosctl.errors import ZosError, expect_non_blank
from zosctl.files import messages
from zosctl.files.constants import FILES_CONFIG, FilesConfig
from zosctl.files.list import List
from zosctl.files.response import ZosFilesResponse
from zosctl.files.utils import data_transfer_headers, encode
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchMatch:
    """One occurrence; line and column are 1-based."""

    line: int
    column: int
    contents: str


@dataclass
class SearchItem:
    dsname: str
    member: str | None = None
    matches: list[SearchMatch] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"{self.dsname}({self.member})" if self.member else self.dsname


def find_matches(text: str, query: str, case_sensitive: bool = False) -> list[SearchMatch]:
    """Every occurrence of query in text, overlapping ones included.

    Examples:
        >>> [m.column for m in find_matches("abab", "AB")]
        [1, 3]
    """
    if not case_sensitive:
        query = query.lower()
    matches = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        haystack = line if case_sensitive else line.lower()
        column = haystack.find(query)
        while column != -1:
            matches.append(SearchMatch(line_number, column + 1, line))
            column = haystack.find(query, column + 1)
    return matches


class Search:
    """Search data sets matching a pattern.

    Sequential data sets and the members of partitioned ones are read as
    text and scanned line by line. With mainframe_search, z/OSMF is first
    asked which of them contain the string at all (maxreturnsize=1) so only
    those are read in full. Migrated data sets and other organizations are
    not searched.
    """

    @classmethod
    def data_sets(
        cls,
        session: Session,
        pattern: str,
        query: str,
        case_sensitive: bool = False,
        mainframe_search: bool = False,
        max_concurrent_requests: int | None = 1,
        timeout: float | None = None,
        encoding: str | None = None,
        config: FilesConfig = FILES_CONFIG,
    ) -> ZosFilesResponse:
        """Find query in the data sets matching pattern.

        Args:
            timeout: Seconds after which items not yet read are reported as
                not searched

        Returns:
            ZosFilesResponse whose api_response lists the matching SearchItems
            sorted by name; success is False when some items could not be read.

        Raises:
            ZosError: The data sets to search could not be listed
        """
        expect_non_blank(pattern, messages.MISSING_DATASET_NAME)
        expect_non_blank(query, messages.MISSING_SEARCH_STRING)
        deadline = time.monotonic() + timeout if timeout else None

        try:
            listing = List.data_sets_matching_pattern(
                session, [pattern], max_concurrent_requests=max_concurrent_requests, config=config
            ).api_response
        except ZosError as e:
            raise ZosError(messages.SEARCH_LIST_FAILED, cause_errors=e) from e

        items: list[SearchItem] = []
        failures: list[str] = []
        for entry in listing:
            dsorg = entry.get("dsorg")
            if not dsorg or str(entry.get("migr", "")).lower() == "yes":
                continue
            if dsorg == "PS":
                items.append(SearchItem(entry["dsname"]))
            elif dsorg in ("PO", "PO-E"):
                try:
                    members = List.all_members(session, entry["dsname"], config=config).api_response
                except ZosError as e:
                    logger.debug(f"Could not list members of {entry['dsname']}: {e}")
                    failures.append(entry["dsname"])
                    continue
                items.extend(
                    SearchItem(entry["dsname"], member["member"])
                    for member in members.get("items", [])
                    if member.get("member")
                )
        logger.info(f"Searching {len(items)} data set(s) and member(s) for {query!r}")

        if mainframe_search:
            items = cls._filter_on_mainframe(
                session, items, query, case_sensitive, encoding, max_concurrent_requests, deadline, failures, config
            )

        def scan(item: SearchItem) -> SearchItem | None:
            if deadline is not None and time.monotonic() > deadline:
                failures.append(item.name)
                return None
            try:
                text = cls._read(session, item.name, encoding, None, config)
            except ZosError as e:
                logger.debug(f"Could not read {item.name}: {e}")
                failures.append(item.name)
                return None
            item.matches = find_matches(text, query, case_sensitive)
            return item if item.matches else None

        matched = [item for item in BatchExecutor(max_concurrent_requests).execute(scan, items) if item]
        matched.sort(key=lambda item: (item.dsname, item.member or ""))

        return ZosFilesResponse(
            success=not failures,
            command_response=_report(query, matched),
            api_response=matched,
            error_message=messages.SEARCH_FAILED_ITEMS + "\n".join(failures) if failures else None,
        )

    @classmethod
    def _filter_on_mainframe(
        cls,
        session: Session,
        items: list[SearchItem],
        query: str,
        case_sensitive: bool,
        encoding: str | None,
        max_concurrent_requests: int | None,
        deadline: float | None,
        failures: list[str],
        config: FilesConfig,
    ) -> list[SearchItem]:
        params = f"?search={encode(query)}&maxreturnsize=1"
        if case_sensitive:
            params += "&insensitive=false"

        def contains(item: SearchItem) -> SearchItem | None:
            if deadline is not None and time.monotonic() > deadline:
                failures.append(item.name)
                return None
            try:
                text = cls._read(session, item.name, encoding, params, config)
            except ZosError as e:
                logger.debug(f"Server-side search of {item.name} failed: {e}")
                failures.append(item.name)
                return None
            return item if text else None

        return [item for item in BatchExecutor(max_concurrent_requests).execute(contains, items) if item]

    @classmethod
    def _read(
        cls,
        session: Session,
        name: str,
        encoding: str | None,
        query_params: str | None,
        config: FilesConfig,
    ) -> str:
        resource = f"{config.resource}{config.res_ds_files}/{encode(name)}{query_params or ''}"
        headers = data_transfer_headers(encoding=encoding)
        headers.update(ZosmfHeaders.TEXT_PLAIN)
        return ZosmfRestClient.get_expect_string(session, resource, headers)


def _report(query: str, matched: list[SearchItem]) -> str:
    lines = [f'Found "{query}" in {len(matched)} data sets and PDS members' + (":" if matched else ".")]
    for item in matched:
        header = f'\nData Set "{item.dsname}"'
        header += f' | Member "{item.member}":' if item.member else ":"
        lines.append(header)
        lines.extend(
            f"Line: {match.line}, Column: {match.column}, Contents: {match.contents}"
            for match in item.matches
        )
    return "\n".join(lines) + "\n"
