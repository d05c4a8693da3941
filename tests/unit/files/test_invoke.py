"""Tests for IDCAMS invocation."""

from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError
from zosctl.files import Invoke


class TestAmsStatements:
    def test_statements_upper_cased_and_split(self, session):
        with patch(
            "zosctl.files.invoke.ZosmfRestClient.put_expect_json", return_value={"output": []}
        ) as put:
            response = Invoke.ams_statements(
                session, ["delete ibmuser.vsam\ncluster", "listcat"], response_timeout=20
            )

        assert response.success is True
        _, resource, headers, payload = put.call_args.args
        assert resource == "/zosmf/restfiles/ams"
        assert headers["X-IBM-Response-Timeout"] == "20"
        assert payload == {"input": ["DELETE IBMUSER.VSAM", "CLUSTER", "LISTCAT"]}

    def test_empty_statements_rejected(self, session):
        with pytest.raises(ValidationError):
            Invoke.ams_statements(session, [])

    def test_long_line_rejected_with_context(self, session):
        with pytest.raises(ValidationError) as exc_info:
            Invoke.ams_statements(session, ["LISTCAT", "X" * 256])

        assert ">    2 |" in exc_info.value.message

    def test_ams_file(self, session, tmp_path):
        statements = tmp_path / "define.idcams"
        statements.write_text("DEFINE CLUSTER -\n  (NAME(IBMUSER.VSAM))\n")

        with patch(
            "zosctl.files.invoke.ZosmfRestClient.put_expect_json", return_value={}
        ) as put:
            Invoke.ams_file(session, statements)

        assert put.call_args.args[3] == {"input": ["DEFINE CLUSTER -", "  (NAME(IBMUSER.VSAM))"]}

    def test_missing_file(self, session, tmp_path):
        with pytest.raises(ValidationError):
            Invoke.ams_file(session, tmp_path / "missing")
