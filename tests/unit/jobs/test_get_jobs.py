"""Tests for job queries, cancel and delete."""

from unittest.mock import patch

import pytest

from zosctl.errors import ZosError
from zosctl.jobs import CancelJobs, DeleteJobs, GetJobs, JobFile

JOBS = [
    {"jobid": "JOB00001", "jobname": "A", "status": "OUTPUT"},
    {"jobid": "JOB00002", "jobname": "B", "status": "INPUT"},
]


class TestGetJobsCommon:
    def test_default_filters_not_sent(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=[]) as get:
            GetJobs.get_jobs_common(session, prefix="*", max_jobs=1000)

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs"

    def test_query_parameters(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=[]) as get:
            GetJobs.get_jobs_common(session, owner="IBMUSER", prefix="MY*", max_jobs=5, exec_data=True)

        assert get.call_args.args[1] == (
            "/zosmf/restjobs/jobs?owner=IBMUSER&prefix=MY*&max-jobs=5&exec-data=Y"
        )

    def test_status_filtered_locally(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=JOBS):
            jobs = GetJobs.get_jobs_common(session, status="output")

        assert [job.jobid for job in jobs] == ["JOB00001"]


class TestGetJob:
    def test_single_job(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=JOBS[:1]):
            assert GetJobs.get_job(session, "JOB00001").jobname == "A"

    def test_no_job(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=[]):
            with pytest.raises(ZosError) as exc_info:
                GetJobs.get_job(session, "JOB00009")

        assert exc_info.value.cause_errors == "Zero jobs were returned."
        assert "mf.example.com" in exc_info.value.additional_details

    def test_many_jobs(self, session):
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=JOBS):
            with pytest.raises(ZosError):
                GetJobs.get_job(session, "JOB0000*")


class TestSpool:
    def test_spool_files(self, session):
        files = [{"id": 2, "ddname": "JESMSGLG", "jobname": "A", "jobid": "JOB00001", "stepname": "JES2"}]
        with patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=files) as get:
            result = GetJobs.get_spool_files(session, "A", "JOB00001")

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs/A/JOB00001/files"
        assert result[0].ddname == "JESMSGLG"

    def test_spool_content(self, session):
        job_file = JobFile(3, "SYSPRINT", "A", "JOB00001", "STEP1")
        with patch(
            "zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_string", return_value="HELLO"
        ) as get:
            assert GetJobs.get_spool_content(session, job_file) == "HELLO"

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs/A/JOB00001/files/3/records"

    def test_jcl(self, session):
        with patch(
            "zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_string", return_value="//A JOB"
        ) as get:
            GetJobs.get_jcl(session, "A", "JOB00001")

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs/A/JOB00001/files/JCL/records"


def test_cancel_job(session):
    with patch("zosctl.jobs.get_jobs.ZosmfRestClient.put_expect_json", return_value={}) as put:
        CancelJobs.cancel_job(session, "A", "JOB00001")

    assert put.call_args.args[3] == {"request": "cancel", "version": "2.0"}


def test_delete_job(session):
    with patch("zosctl.jobs.get_jobs.ZosmfRestClient.delete_expect_json", return_value={}) as delete:
        DeleteJobs.delete_job(session, "A", "JOB00001")

    assert delete.call_args.args[1] == "/zosmf/restjobs/jobs/A/JOB00001"
    assert delete.call_args.args[2] == {"X-IBM-Job-Modify-Version": "2.0"}


def test_delete_job_modify_version(session):
    with patch("zosctl.jobs.get_jobs.ZosmfRestClient.delete_expect_json", return_value={}) as delete:
        DeleteJobs.delete_job(session, "A", "JOB00001", modify_version="1.0")

    assert delete.call_args.args[2] == {"X-IBM-Job-Modify-Version": "1.0"}


class TestDeleteOldJobs:
    LISTING = [
        {"jobid": "JOB00001", "jobname": "IBMUSERA", "status": "OUTPUT"},
        {"jobid": "JOB00002", "jobname": "IBMUSERB", "status": "ACTIVE"},
        {"jobid": "JOB00003", "jobname": "IBMUSERC", "status": "OUTPUT"},
    ]

    def test_deletes_only_output_jobs(self, session):
        with (
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=self.LISTING) as get,
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.delete_expect_json", return_value={}) as delete,
        ):
            deleted = DeleteJobs.delete_old_jobs(session, "IBMUSER*", max_concurrent_requests=0)

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs?prefix=IBMUSER*"
        assert [job.jobid for job in deleted] == ["JOB00001", "JOB00003"]
        resources = sorted(call.args[1] for call in delete.call_args_list)
        assert resources == [
            "/zosmf/restjobs/jobs/IBMUSERA/JOB00001",
            "/zosmf/restjobs/jobs/IBMUSERC/JOB00003",
        ]

    def test_default_prefix_not_sent(self, session):
        with (
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=[]) as get,
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.delete_expect_json") as delete,
        ):
            assert DeleteJobs.delete_old_jobs(session) == []

        assert get.call_args.args[1] == "/zosmf/restjobs/jobs"
        delete.assert_not_called()

    def test_failure_raised_after_all_attempted(self, session):
        def delete(session, resource, headers):
            if resource.endswith("JOB00001"):
                raise ZosError("purge failed")
            return {}

        with (
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.get_expect_json", return_value=self.LISTING),
            patch("zosctl.jobs.get_jobs.ZosmfRestClient.delete_expect_json", side_effect=delete) as mock,
        ):
            with pytest.raises(ZosError, match="purge failed"):
                DeleteJobs.delete_old_jobs(session)

        assert mock.call_count == 2
