"""Poll a job until it reaches a requested status."""

import logging
import time

from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.get_jobs import GetJobs
from zosctl.jobs.models import JOB_STATUS_ORDER, Job, JobStatus
from zosctl.session import Session

logger = logging.getLogger(__name__)


class MonitorJobs:
    """Fixed-interval polling of job status.

    A job has reached the requested status when its current status is the
    same or later in INPUT, ACTIVE, OUTPUT order. The interval comes from
    watch_delay, else from the JobsConfig passed in.
    """

    DEFAULT_STATUS = JobStatus.OUTPUT

    @classmethod
    def wait_for_job_output_status(
        cls, session: Session, job: Job, config: JobsConfig = JOBS_CONFIG
    ) -> Job:
        if job is None:
            raise ValidationError("Job object (containing jobname and jobid) required")
        return cls.wait_for_status_common(
            session, job.jobname, job.jobid, JobStatus.OUTPUT, config=config
        )

    @classmethod
    def wait_for_output_status(
        cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG
    ) -> Job:
        return cls.wait_for_status_common(session, jobname, jobid, JobStatus.OUTPUT, config=config)

    @classmethod
    def wait_for_active_status(
        cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG
    ) -> Job:
        return cls.wait_for_status_common(session, jobname, jobid, JobStatus.ACTIVE, config=config)

    @classmethod
    def wait_for_status_common(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        status: JobStatus | str | None = None,
        watch_delay: float | None = None,
        attempts: int | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Poll until the job reaches status, then return the last snapshot.

        Args:
            status: Status to wait for (default OUTPUT)
            watch_delay: Seconds between polls (default config.watch_delay)
            attempts: Maximum polls (default config.max_attempts; None is unbounded)

        Raises:
            ValidationError: Bad arguments
            ZosError: Status lookup failed, an unknown status was seen, or
                attempts ran out
        """
        expect_non_blank(jobname, "Expect Error: Required parameter 'jobname' must not be blank")
        expect_non_blank(jobid, "Expect Error: Required parameter 'jobid' must not be blank")

        if status is None:
            status = cls.DEFAULT_STATUS
        requested = JobStatus.parse(status.value if isinstance(status, JobStatus) else status)
        if requested is None:
            raise ValidationError(
                f"Expect Error: Input \"{status}\" was not one of the following: "
                + ", ".join(s.value for s in JOB_STATUS_ORDER)
            )
        if attempts is None:
            attempts = config.max_attempts
        if attempts is not None and attempts < 0:
            raise ValidationError('Expect Error: "attempts" must be a positive integer')
        if watch_delay is None:
            watch_delay = config.watch_delay
        if watch_delay < 0:
            raise ValidationError('Expect Error: "watchDelay" must be a positive integer')

        logger.info(
            f"Waiting for jobname {jobname}, jobid {jobid}, status {requested.value}, "
            f"attempts {attempts}, watch delay {watch_delay}s"
        )

        try:
            return cls._poll_for_status(session, jobname, jobid, requested, watch_delay, attempts, config)
        except ZosError as e:
            msg = f'Error obtaining status for jobname "{jobname}" jobid "{jobid}".\n{e.message}'
            logger.error(msg)
            raise ZosError(
                msg,
                additional_details=e.additional_details,
                cause_errors=e.cause_errors,
                error_code=e.error_code,
            ) from e

    @classmethod
    def _poll_for_status(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        requested: JobStatus,
        watch_delay: float,
        attempts: int | None,
        config: JobsConfig,
    ) -> Job:
        attempt = 0
        while True:
            attempt += 1
            logger.debug(
                f'Polling for jobname "{jobname}" jobid "{jobid}" status "{requested.value}" '
                f'- attempt "{attempt}" (max attempts "{attempts}")'
            )
            reached, job = cls._check_status(session, jobname, jobid, requested, config)
            if reached:
                logger.debug(f'Expected status "{requested.value}" found after {attempt} attempt(s)')
                return job
            if attempts and attempt >= attempts:
                raise ZosError(f'Error Details: Reached max poll attempts of "{attempts}"')
            time.sleep(watch_delay)

    @classmethod
    def _check_status(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        requested: JobStatus,
        config: JobsConfig,
    ) -> tuple[bool, Job]:
        job = GetJobs.get_status_common(session, jobname, jobid, config)
        current = JobStatus.parse(job.status)
        logger.debug(f'jobname "{jobname}" jobid "{jobid}" has current status of "{job.status}"')
        if current is None:
            logger.error(f'An unknown status of "{job.status}" for jobname {jobname}, jobid {jobid}')
            raise ZosError(f'Error Details: An unknown status "{job.status}" was received.')
        return current.order >= requested.order, job
