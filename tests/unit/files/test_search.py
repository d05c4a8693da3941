"""Tests for searching data set contents."""

from itertools import chain, repeat
from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError, ZosError
from zosctl.files import Search, SearchMatch
from zosctl.files.search import find_matches
from zosctl.rest_client import RestClientError

LISTINGS = {
    "/zosmf/restfiles/ds?dslevel=IBMUSER.*": {
        "items": [
            {"dsname": "IBMUSER.JCL", "dsorg": "PS"},
            {"dsname": "IBMUSER.SRC", "dsorg": "PO"},
            {"dsname": "IBMUSER.OLD", "dsorg": "PS", "migr": "YES"},
            {"dsname": "IBMUSER.ALIAS"},
            {"dsname": "IBMUSER.KSDS", "dsorg": "VS"},
        ]
    },
    "/zosmf/restfiles/ds/IBMUSER.SRC/member": {"items": [{"member": "A"}, {"member": "B"}]},
}

CONTENTS = {
    "/zosmf/restfiles/ds/IBMUSER.JCL": "//STEP1 EXEC PGM=IEFBR14\n//* no proc here\n",
    "/zosmf/restfiles/ds/IBMUSER.SRC(A)": "CALL PROC1\n",
    "/zosmf/restfiles/ds/IBMUSER.SRC(B)": "nothing to see\n",
}


@pytest.fixture
def mainframe():
    reads = []

    def get_string(session, resource, headers):
        reads.append(resource)
        path, _, query = resource.partition("?")
        content = CONTENTS[path]
        if isinstance(content, Exception):
            raise content
        if query:
            return content if "proc" in content.lower() else ""
        return content

    with (
        patch("zosctl.files.list.ZosmfRestClient.get_expect_json", side_effect=lambda s, r, h: LISTINGS[r]),
        patch("zosctl.files.search.ZosmfRestClient.get_expect_string", side_effect=get_string),
    ):
        yield reads


class TestFindMatches:
    def test_case_insensitive_by_default(self):
        assert find_matches("One\ntwo ONE one\n", "one") == [
            SearchMatch(1, 1, "One"),
            SearchMatch(2, 5, "two ONE one"),
            SearchMatch(2, 9, "two ONE one"),
        ]

    def test_case_sensitive(self):
        assert find_matches("One one", "one", case_sensitive=True) == [SearchMatch(1, 5, "One one")]

    def test_overlapping(self):
        assert [m.column for m in find_matches("aaaa", "aa")] == [1, 2, 3]

    def test_no_match(self):
        assert find_matches("abc", "x") == []


class TestSearchDataSets:
    def test_finds_lines_in_sequential_and_members(self, session, mainframe):
        response = Search.data_sets(session, "IBMUSER.*", "proc")

        assert response.success is True
        assert [item.name for item in response.api_response] == ["IBMUSER.JCL", "IBMUSER.SRC(A)"]
        assert response.api_response[1].matches == [SearchMatch(1, 6, "CALL PROC1")]
        assert response.command_response.startswith(
            'Found "proc" in 2 data sets and PDS members:'
        )
        assert 'Data Set "IBMUSER.SRC" | Member "A":' in response.command_response
        assert "Line: 2, Column: 8, Contents: //* no proc here" in response.command_response

    def test_migrated_and_unsupported_not_read(self, session, mainframe):
        Search.data_sets(session, "IBMUSER.*", "proc")

        assert not any("OLD" in r or "ALIAS" in r or "KSDS" in r for r in mainframe)

    def test_case_sensitive_search(self, session, mainframe):
        response = Search.data_sets(session, "IBMUSER.*", "PROC", case_sensitive=True)

        assert [item.name for item in response.api_response] == ["IBMUSER.SRC(A)"]

    def test_mainframe_search_reads_only_candidates(self, session, mainframe):
        response = Search.data_sets(session, "IBMUSER.*", "proc", mainframe_search=True)

        assert len(response.api_response) == 2
        filtered = [r for r in mainframe if "?" in r]
        assert len(filtered) == 3
        assert all(r.endswith("?search=proc&maxreturnsize=1") for r in filtered)
        assert "/zosmf/restfiles/ds/IBMUSER.SRC(B)" not in mainframe

    def test_mainframe_search_case_sensitive_flag(self, session, mainframe):
        Search.data_sets(session, "IBMUSER.*", "PROC", case_sensitive=True, mainframe_search=True)

        assert any(r.endswith("&insensitive=false") for r in mainframe)

    def test_unreadable_member_reported(self, session, mainframe):
        with patch.dict(
            CONTENTS, {"/zosmf/restfiles/ds/IBMUSER.SRC(B)": RestClientError("in use", status_code=500)}
        ):
            response = Search.data_sets(session, "IBMUSER.*", "proc", max_concurrent_requests=3)

        assert response.success is False
        assert len(response.api_response) == 2
        assert response.error_message.endswith("IBMUSER.SRC(B)")

    def test_expired_timeout_skips_reads(self, session, mainframe):
        clock = chain([0.0], repeat(100.0))
        with patch("zosctl.files.search.time.monotonic", side_effect=lambda: next(clock)):
            response = Search.data_sets(session, "IBMUSER.*", "proc", timeout=5)

        assert response.success is False
        assert response.api_response == []
        assert not any(r.startswith("/zosmf/restfiles/ds/IBMUSER.JCL") for r in mainframe)
        assert "IBMUSER.JCL" in response.error_message

    def test_listing_failure_wrapped(self, session):
        error = RestClientError("not authorized", status_code=403)
        with patch("zosctl.files.list.ZosmfRestClient.get_expect_json", side_effect=error):
            with pytest.raises(ZosError) as exc_info:
                Search.data_sets(session, "SYS1.*", "x")

        assert exc_info.value.msg == "Failed to get list of data sets to search"

    def test_search_string_required(self, session):
        with pytest.raises(ValidationError):
            Search.data_sets(session, "IBMUSER.*", "")
