"""Query jobs, their spool files and spool content."""

import logging

from zosctl.batch_executor import BatchExecutor
from zosctl.errors import ZosError, expect_non_blank
from zosctl.files.utils import encode
from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.models import Job, JobFile
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

TEXT_PLAIN_UTF8 = {"Content-Type": "text/plain; charset=UTF-8"}


def job_resource(jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG) -> str:
    return f"{config.resource}/{encode(jobname)}/{encode(jobid)}"


class GetJobs:
    """Read-only job queries under /zosmf/restjobs."""

    @classmethod
    def get_jobs_common(
        cls,
        session: Session,
        owner: str | None = None,
        prefix: str | None = None,
        max_jobs: int | None = None,
        jobid: str | None = None,
        status: str | None = None,
        exec_data: bool = False,
        config: JobsConfig = JOBS_CONFIG,
    ) -> list[Job]:
        """List jobs matching the given filters.

        The default prefix ("*") and default max_jobs are not sent. z/OSMF
        filters ACTIVE itself; other statuses are filtered here.
        """
        params = []
        if owner:
            params.append(f"owner={encode(owner)}")
        if prefix and prefix != config.default_prefix:
            params.append(f"prefix={encode(prefix)}")
        if max_jobs and max_jobs != config.default_max_jobs:
            params.append(f"max-jobs={encode(max_jobs)}")
        if jobid:
            params.append(f"jobid={encode(jobid)}")
        if exec_data:
            params.append("exec-data=Y")
        if status:
            params.append(f"status={encode(status)}")

        resource = config.resource
        if params:
            resource += "?" + "&".join(params)
        logger.info(f"Listing jobs: {resource}")

        jobs = [Job.from_dict(item) for item in ZosmfRestClient.get_expect_json(session, resource) or []]
        if status and status.lower() != "active" and status != "*":
            jobs = [job for job in jobs if (job.status or "").lower() == status.lower()]
        return jobs

    @classmethod
    def get_job(cls, session: Session, jobid: str, config: JobsConfig = JOBS_CONFIG) -> Job:
        """Return the single job with this id.

        Raises:
            ZosError: No job, or more than one job, has the id
        """
        expect_non_blank(jobid, "jobid")
        jobs = cls.get_jobs_common(session, owner="*", jobid=jobid, config=config)
        details = (
            f"Protocol:          {session.protocol}\n"
            f"Host:              {session.hostname}\n"
            f"Port:              {session.port}\n"
            f"Base Path:         {session.base_path}\n"
            f"Auth type:         {session.auth_type.value}\n"
            f"Allow Unauth Cert: {not session.reject_unauthorized}"
        )
        message = f"Cannot obtain job info for job id = {jobid}"
        if not jobs:
            raise ZosError(message, additional_details=details, cause_errors="Zero jobs were returned.")
        if len(jobs) > 1:
            raise ZosError(
                message,
                additional_details=details,
                cause_errors=f"{len(jobs)} jobs were returned. Only expected 1.",
            )
        return jobs[0]

    @classmethod
    def get_status_common(
        cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG
    ) -> Job:
        expect_non_blank(jobname, "jobname")
        expect_non_blank(jobid, "jobid")
        resource = job_resource(jobname, jobid, config)
        logger.debug(f"Getting status: {resource}")
        return Job.from_dict(ZosmfRestClient.get_expect_json(session, resource))

    @classmethod
    def get_spool_files(
        cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG
    ) -> list[JobFile]:
        expect_non_blank(jobname, "jobname")
        expect_non_blank(jobid, "jobid")
        resource = job_resource(jobname, jobid, config) + config.res_spool_files
        logger.debug(f"Listing spool files: {resource}")
        return [JobFile.from_dict(item) for item in ZosmfRestClient.get_expect_json(session, resource) or []]

    @classmethod
    def get_jcl(cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG) -> str:
        """Return the JCL a job was submitted with."""
        expect_non_blank(jobname, "jobname")
        expect_non_blank(jobid, "jobid")
        resource = (
            job_resource(jobname, jobid, config)
            + config.res_spool_files
            + config.res_jcl_content
            + config.res_spool_content
        )
        return ZosmfRestClient.get_expect_string(session, resource)

    @classmethod
    def get_spool_content(
        cls, session: Session, job_file: JobFile, config: JobsConfig = JOBS_CONFIG
    ) -> str:
        return cls.get_spool_content_by_id(
            session, job_file.jobname, job_file.jobid, job_file.id, config=config
        )

    @classmethod
    def get_spool_content_by_id(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        spool_id: int,
        config: JobsConfig = JOBS_CONFIG,
    ) -> str:
        if jobname is None or jobid is None or spool_id is None:
            raise ZosError("Required parameters jobname, jobid and spool id must be defined")
        resource = (
            job_resource(jobname, jobid, config)
            + config.res_spool_files
            + f"/{encode(spool_id)}"
            + config.res_spool_content
        )
        logger.debug(f"Getting spool content: {resource}")
        return ZosmfRestClient.get_expect_string(session, resource, dict(TEXT_PLAIN_UTF8))


class CancelJobs:
    @classmethod
    def cancel_job(
        cls, session: Session, jobname: str, jobid: str, config: JobsConfig = JOBS_CONFIG
    ) -> dict | None:
        """Request cancellation of a job; returns the z/OSMF feedback."""
        expect_non_blank(jobname, "jobname")
        expect_non_blank(jobid, "jobid")
        payload = {"request": "cancel", "version": config.modify_version}
        logger.info(f"Cancelling {jobname}({jobid})")
        return ZosmfRestClient.put_expect_json(
            session, job_resource(jobname, jobid, config), dict(ZosmfHeaders.APPLICATION_JSON), payload
        )


class DeleteJobs:
    @classmethod
    def delete_job(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        modify_version: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> dict | None:
        """Purge a job and its output.

        modify_version "2.0" (the default) makes z/OSMF wait for the purge
        and return its feedback; "1.0" returns as soon as it is queued.
        """
        expect_non_blank(jobname, "jobname")
        expect_non_blank(jobid, "jobid")
        headers = {ZosmfHeaders.X_IBM_JOB_MODIFY_VERSION: modify_version or config.modify_version}
        logger.info(f"Deleting {jobname}({jobid})")
        return ZosmfRestClient.delete_expect_json(session, job_resource(jobname, jobid, config), headers)

    @classmethod
    def delete_old_jobs(
        cls,
        session: Session,
        prefix: str | None = None,
        max_concurrent_requests: int | None = 1,
        modify_version: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> list[Job]:
        """Delete the session user's jobs in OUTPUT status whose names match prefix.

        Jobs still queued or running are left alone. Every deletion is
        attempted; the first failure is raised once all have finished.

        Returns:
            The jobs that were deleted
        """
        prefix = prefix or config.default_prefix
        jobs = [
            job
            for job in GetJobs.get_jobs_common(session, prefix=prefix, config=config)
            if (job.status or "").upper() == "OUTPUT"
        ]
        if not jobs:
            logger.info(f"No jobs found with prefix {prefix}")
            return []

        def delete(job: Job) -> Job:
            cls.delete_job(session, job.jobname, job.jobid, modify_version, config)
            return job

        return BatchExecutor(max_concurrent_requests).execute(delete, jobs)
