"""Tests for job submission from every JCL source."""

from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError, ZosError
from zosctl.jobs import (
    DataSetJcl,
    InlineJcl,
    Job,
    JobFile,
    JobStatus,
    LocalFileJcl,
    SubmitJobs,
    SubmitParms,
    UssFileJcl,
)
from zosctl.jobs.submit_jobs import parse_jcl_symbols
from zosctl.rest_client import RestClientError

JCL = "//IEFBR14 JOB (ACCT)\n//STEP1 EXEC PGM=IEFBR14\n"
SUBMITTED = {"jobid": "JOB00042", "jobname": "IEFBR14", "status": "INPUT", "owner": "IBMUSER"}


@pytest.fixture
def put_json():
    with patch("zosctl.jobs.submit_jobs.ZosmfRestClient.put_expect_json", return_value=SUBMITTED) as put:
        yield put


class TestParseJclSymbols:
    def test_plain_and_quoted(self):
        assert parse_jcl_symbols("A=1 bb='two words'") == {
            "X-IBM-JCL-Symbol-A": "1",
            "X-IBM-JCL-Symbol-BB": "two words",
        }

    def test_doubled_quote(self):
        assert parse_jcl_symbols("A='it''s'") == {"X-IBM-JCL-Symbol-A": "it's"}

    def test_extra_blanks_ignored(self):
        assert parse_jcl_symbols("  A=1   B=2 ") == {
            "X-IBM-JCL-Symbol-A": "1",
            "X-IBM-JCL-Symbol-B": "2",
        }

    @pytest.mark.parametrize(
        "symbols",
        ["NOEQUALS", "=value", "TOOLONGNAME=1", "A=", "A='unterminated"],
    )
    def test_malformed(self, symbols):
        with pytest.raises(ValidationError):
            parse_jcl_symbols(symbols)


class TestSubmitSources:
    def test_data_set(self, session, put_json):
        job = SubmitJobs.submit(session, DataSetJcl("IBMUSER.CNTL(IEFBR14)"))

        assert (job.jobid, job.jobname) == ("JOB00042", "IEFBR14")
        _, resource, headers, payload = put_json.call_args.args
        assert resource == "/zosmf/restjobs/jobs"
        assert headers["Content-Type"] == "application/json"
        assert payload == {"file": "//'IBMUSER.CNTL(IEFBR14)'"}

    def test_uss_file(self, session, put_json):
        job = SubmitJobs.submit(session, UssFileJcl("/u/ibmuser/job.jcl"))

        assert job.jobid == "JOB00042"
        assert put_json.call_args.args[3] == {"file": "/u/ibmuser/job.jcl"}

    def test_local_file(self, session, put_json, tmp_path):
        jcl_file = tmp_path / "job.jcl"
        jcl_file.write_text(JCL)

        job = SubmitJobs.submit(session, LocalFileJcl(str(jcl_file)))

        assert job.jobname == "IEFBR14"
        _, _, headers, payload = put_json.call_args.args
        assert payload == JCL
        assert headers["X-IBM-Intrdr-Mode"] == "TEXT"
        assert headers["X-IBM-Intrdr-Lrecl"] == "80"
        assert headers["X-IBM-Intrdr-Recfm"] == "F"

    def test_inline_with_symbols_and_reader_options(self, session, put_json):
        parms = SubmitParms(jcl_symbols="HLQ=IBMUSER", internal_reader_lrecl="256", internal_reader_recfm="V")

        SubmitJobs.submit(session, InlineJcl(JCL), parms)

        headers = put_json.call_args.args[2]
        assert headers["X-IBM-JCL-Symbol-HLQ"] == "IBMUSER"
        assert headers["X-IBM-Intrdr-Lrecl"] == "256"
        assert headers["X-IBM-Intrdr-Recfm"] == "V"

    def test_data_set_on_volume_is_read_then_submitted(self, session, put_json):
        with patch(
            "zosctl.jobs.submit_jobs.ZosmfRestClient.get_expect_string", return_value=JCL
        ) as get:
            SubmitJobs.submit(session, DataSetJcl("IBMUSER.CNTL(IEFBR14)", volume="VOL001"))

        assert get.call_args.args[1] == "/zosmf/restfiles/ds/-(VOL001)/IBMUSER.CNTL(IEFBR14)"
        assert put_json.call_args.args[3] == JCL

    def test_missing_local_file(self, session, tmp_path):
        with pytest.raises(ZosError):
            SubmitJobs.submit(session, LocalFileJcl(str(tmp_path / "missing.jcl")))

    def test_empty_inline_jcl(self, session):
        with pytest.raises(ValidationError):
            SubmitJobs.submit(session, InlineJcl(""))

    def test_unknown_source(self, session):
        with pytest.raises(TypeError):
            SubmitJobs.submit(session, "IBMUSER.CNTL")

    def test_rejected_jcl_surfaces_server_message(self, session):
        error = RestClientError("JCL syntax error on line 1", status_code=400)
        with patch("zosctl.jobs.submit_jobs.ZosmfRestClient.put_expect_json", side_effect=error):
            with pytest.raises(RestClientError) as exc_info:
                SubmitJobs.submit(session, InlineJcl("garbage"))

        assert exc_info.value.message == "JCL syntax error on line 1"


class TestSubmitFollowUp:
    def test_wait_for_output(self, session, put_json):
        finished = Job.from_dict({**SUBMITTED, "status": "OUTPUT", "retcode": "CC 0000"})
        with patch(
            "zosctl.jobs.submit_jobs.MonitorJobs.wait_for_status_common", return_value=finished
        ) as wait:
            job = SubmitJobs.submit(
                session, InlineJcl(JCL), SubmitParms(wait_for_output=True, watch_delay=0.5)
            )

        assert job.retcode == "CC 0000"
        assert wait.call_args.kwargs["watch_delay"] == 0.5

    def test_view_all_spool_content(self, session, put_json):
        finished = Job.from_dict({**SUBMITTED, "status": "OUTPUT"})
        spool = [JobFile(2, "JESMSGLG", "IEFBR14", "JOB00042", "JES2")]
        with (
            patch("zosctl.jobs.submit_jobs.MonitorJobs.wait_for_status_common", return_value=finished),
            patch("zosctl.jobs.submit_jobs.GetJobs.get_spool_files", return_value=spool),
            patch("zosctl.jobs.submit_jobs.GetJobs.get_spool_content", return_value="IEF142I"),
        ):
            result = SubmitJobs.submit(
                session, InlineJcl(JCL), SubmitParms(view_all_spool_content=True)
            )

        assert [(s.dd_name, s.data) for s in result] == [("JESMSGLG", "IEF142I")]

    def test_directory_downloads_spool(self, session, put_json, tmp_path):
        finished = Job.from_dict({**SUBMITTED, "status": "OUTPUT"})
        with (
            patch("zosctl.jobs.submit_jobs.MonitorJobs.wait_for_status_common", return_value=finished),
            patch(
                "zosctl.jobs.submit_jobs.DownloadJobs.download_all_spool_content"
            ) as download,
        ):
            SubmitJobs.submit(
                session, InlineJcl(JCL), SubmitParms(directory=str(tmp_path), extension="log")
            )

        assert download.call_args.kwargs["out_dir"] == str(tmp_path)
        assert download.call_args.kwargs["extension"] == ".log"

    def test_notify_requires_job_identity(self, session):
        with patch(
            "zosctl.jobs.submit_jobs.ZosmfRestClient.put_expect_json", return_value={"jobid": ""}
        ):
            with pytest.raises(ZosError):
                SubmitJobs.submit_jcl_notify(session, JCL)

    def test_submit_job_notify_waits_for_output(self, session, put_json):
        finished = Job.from_dict({**SUBMITTED, "status": "OUTPUT"})
        with patch(
            "zosctl.jobs.submit_jobs.MonitorJobs.wait_for_status_common", return_value=finished
        ) as wait:
            job = SubmitJobs.submit_job_notify(session, "IBMUSER.CNTL(IEFBR14)")

        assert job.status == "OUTPUT"
        assert put_json.call_args.args[3] == {"file": "//'IBMUSER.CNTL(IEFBR14)'"}
        assert wait.call_args.args[1:4] == ("IEFBR14", "JOB00042", JobStatus.OUTPUT)
