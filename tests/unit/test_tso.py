"""Tests for TSO address spaces."""

from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError, ZosError
from zosctl.tso import IssueTso, PingTso, StartTso, StartTsoParms, StopTso, TsoConfig

READY = {"servletKey": "IBMUSER-123", "tsoData": [{"TSO MESSAGE": {"DATA": "READY"}}, {"TSO PROMPT": {}}]}
STARTED = {"servletKey": "IBMUSER-123", "tsoData": [{"TSO MESSAGE": {"DATA": "LOGON IN PROGRESS"}}]}


class TestStart:
    def test_query_uses_defaults(self, session):
        with (
            patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=READY) as post,
        ):
            response = StartTso.start(session, "ACCT#1")

        assert response.success is True
        assert response.servlet_key == "IBMUSER-123"
        assert post.call_args.args[1] == (
            "/zosmf/tsoApp/tso?acct=ACCT%231&proc=IZUFPROC&chset=697&cpage=1047"
            "&rows=204&cols=160&rsize=4096"
        )

    def test_custom_parms(self, session):
        with patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=READY) as post:
            StartTso.start(session, "ACCT", StartTsoParms(logon_procedure="MYPROC", rows="24"))

        assert "proc=MYPROC" in post.call_args.args[1]
        assert "rows=24" in post.call_args.args[1]

    def test_reads_until_prompt(self, session):
        with (
            patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=STARTED),
            patch("zosctl.tso.address_space.ZosmfRestClient.get_expect_json", return_value=READY) as get,
        ):
            response = StartTso.start(session, "ACCT")

        assert response.messages == "LOGON IN PROGRESS\nREADY\n"
        assert get.call_args.args[1] == "/zosmf/tsoApp/tso/IBMUSER-123"

    def test_no_prompt_gives_up(self, session):
        config = TsoConfig(max_collect_attempts=2)
        with (
            patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=STARTED),
            patch("zosctl.tso.address_space.ZosmfRestClient.get_expect_json", return_value=STARTED) as get,
        ):
            with pytest.raises(ZosError):
                StartTso.start(session, "ACCT", config=config)

        assert get.call_count == 2

    def test_no_servlet_key(self, session):
        failed = {"msgData": [{"messageText": "IZUG1126E Account is not valid"}]}
        with patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=failed):
            response = StartTso.start(session, "BAD")

        assert response.success is False
        assert response.failure_response == "IZUG1126E Account is not valid"

    def test_account_required(self, session):
        with pytest.raises(ValidationError):
            StartTso.start(session, "")


class TestIssueTso:
    def test_start_send_stop(self, session):
        output = {
            "servletKey": "IBMUSER-123",
            "tsoData": [{"TSO MESSAGE": {"DATA": "IKJ56650I TIME"}}, {"TSO PROMPT": {}}],
        }
        with (
            patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=READY),
            patch("zosctl.tso.address_space.ZosmfRestClient.put_expect_json", return_value=output) as put,
            patch(
                "zosctl.tso.address_space.ZosmfRestClient.delete_expect_json",
                return_value={"servletKey": "IBMUSER-123"},
            ) as delete,
        ):
            response = IssueTso.issue_tso_command(session, "ACCT", "TIME")

        assert response.success is True
        assert response.command_response == "IKJ56650I TIME\n"
        assert put.call_args.args[3] == {"TSO RESPONSE": {"VERSION": "0100", "DATA": "TIME"}}
        delete.assert_called_once()

    def test_stops_address_space_when_send_fails(self, session):
        with (
            patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value=READY),
            patch(
                "zosctl.tso.address_space.ZosmfRestClient.put_expect_json",
                side_effect=ZosError("lost"),
            ),
            patch(
                "zosctl.tso.address_space.ZosmfRestClient.delete_expect_json", return_value={}
            ) as delete,
        ):
            with pytest.raises(ZosError):
                IssueTso.issue_tso_command(session, "ACCT", "TIME")

        delete.assert_called_once()

    def test_start_failure(self, session):
        with patch("zosctl.tso.address_space.ZosmfRestClient.post_expect_json", return_value={}):
            with pytest.raises(ZosError) as exc_info:
                IssueTso.issue_tso_command(session, "ACCT", "TIME")

        assert exc_info.value.message == "TSO address space failed to start."


class TestPingStop:
    def test_ping(self, session):
        with patch(
            "zosctl.tso.address_space.ZosmfRestClient.put_expect_json",
            return_value={"servletKey": "IBMUSER-123"},
        ) as put:
            PingTso.ping(session, "IBMUSER-123")

        assert put.call_args.args[1] == "/zosmf/tsoApp/tso/ping/IBMUSER-123"

    def test_ping_gone(self, session):
        gone = {"msgData": [{"messageText": "IZUG1100E servlet key not found"}]}
        with patch("zosctl.tso.address_space.ZosmfRestClient.put_expect_json", return_value=gone):
            with pytest.raises(ZosError) as exc_info:
                PingTso.ping(session, "IBMUSER-123")

        assert "IZUG1100E" in exc_info.value.message

    def test_stop(self, session):
        with patch("zosctl.tso.address_space.ZosmfRestClient.delete_expect_json", return_value={}):
            response = StopTso.stop(session, "IBMUSER-123")

        assert response.success is True
        assert response.servlet_key == "IBMUSER-123"
