"""Tests for job status polling."""

from unittest.mock import patch

import pytest

from zosctl.errors import ValidationError, ZosError
from zosctl.jobs import Job, JobsConfig, JobStatus, MonitorJobs


def snapshot(status):
    return Job.from_dict({"jobid": "JOB00001", "jobname": "MYJOB", "status": status})


@pytest.fixture
def sleep():
    with patch("zosctl.jobs.monitor_jobs.time.sleep") as mocked:
        yield mocked


def polling(*statuses):
    return patch(
        "zosctl.jobs.monitor_jobs.GetJobs.get_status_common",
        side_effect=[snapshot(s) for s in statuses],
    )


class TestWaitForStatus:
    def test_polls_at_fixed_interval_until_output(self, session, sleep):
        with polling("INPUT", "ACTIVE", "OUTPUT") as get_status:
            job = MonitorJobs.wait_for_status_common(
                session, "MYJOB", "JOB00001", JobStatus.OUTPUT, watch_delay=2
            )

        assert job.status == "OUTPUT"
        assert get_status.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [2, 2]

    def test_later_status_satisfies_earlier_request(self, session, sleep):
        with polling("OUTPUT"):
            job = MonitorJobs.wait_for_active_status(session, "MYJOB", "JOB00001")

        assert job.status == "OUTPUT"
        sleep.assert_not_called()

    def test_interval_from_config(self, session, sleep):
        with polling("INPUT", "OUTPUT"):
            MonitorJobs.wait_for_output_status(
                session, "MYJOB", "JOB00001", config=JobsConfig(watch_delay=0.25)
            )

        sleep.assert_called_once_with(0.25)

    def test_attempts_exhausted(self, session, sleep):
        with polling("INPUT", "INPUT"):
            with pytest.raises(ZosError) as exc_info:
                MonitorJobs.wait_for_status_common(session, "MYJOB", "JOB00001", attempts=2)

        assert 'max poll attempts of "2"' in exc_info.value.message

    def test_unknown_status(self, session, sleep):
        with polling("HELD"):
            with pytest.raises(ZosError) as exc_info:
                MonitorJobs.wait_for_status_common(session, "MYJOB", "JOB00001")

        assert "HELD" in exc_info.value.message

    def test_status_string_accepted(self, session, sleep):
        with polling("ACTIVE"):
            job = MonitorJobs.wait_for_status_common(session, "MYJOB", "JOB00001", "active")

        assert job.status == "ACTIVE"

    def test_wait_for_job_output_status(self, session, sleep):
        with polling("ACTIVE", "OUTPUT") as get_status:
            job = MonitorJobs.wait_for_job_output_status(session, snapshot("INPUT"))

        assert job.status == "OUTPUT"
        assert get_status.call_args.args[1:3] == ("MYJOB", "JOB00001")

    def test_wait_for_job_output_status_requires_job(self, session):
        with pytest.raises(ValidationError):
            MonitorJobs.wait_for_job_output_status(session, None)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"jobname": "", "jobid": "JOB00001"},
            {"jobname": "MYJOB", "jobid": "JOB00001", "status": "RUNNING"},
            {"jobname": "MYJOB", "jobid": "JOB00001", "attempts": -1},
            {"jobname": "MYJOB", "jobid": "JOB00001", "watch_delay": -1},
        ],
    )
    def test_invalid_arguments(self, session, kwargs):
        with pytest.raises(ValidationError):
            MonitorJobs.wait_for_status_common(session, **kwargs)


class TestJobsConfigFromEnvironment:
    def test_defaults(self):
        config = JobsConfig.from_environment()
        assert config.watch_delay == 3.0
        assert config.max_attempts is None

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ZOSCTL_WATCH_DELAY", "0.5")
        monkeypatch.setenv("ZOSCTL_WATCH_ATTEMPTS", "10")

        config = JobsConfig.from_environment()

        assert config.watch_delay == 0.5
        assert config.max_attempts == 10

    def test_invalid_values_ignored(self, monkeypatch):
        monkeypatch.setenv("ZOSCTL_WATCH_DELAY", "soon")
        monkeypatch.setenv("ZOSCTL_WATCH_ATTEMPTS", "-3")

        config = JobsConfig.from_environment()

        assert config.watch_delay == 3.0
        assert config.max_attempts is None
