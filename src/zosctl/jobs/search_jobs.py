"""Search the spool files of jobs for a string or regular expression."""

import logging
import re
import time

from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.files.utils import encode
from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.get_jobs import GetJobs, job_resource
from zosctl.jobs.models import Job, JobFile
from zosctl.rest_client import ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 100
DEFAULT_FILE_LIMIT = 100


class SearchJobs:
    """Server-side spool search.

    z/OSMF is asked first whether a spool file contains any match
    (maxreturnsize=1); only files that do are fetched in full and scanned
    line by line so each hit can be reported with its line number.
    """

    @classmethod
    def search_jobs(
        cls,
        session: Session,
        job_name: str,
        search_string: str | None = None,
        search_regex: str | None = None,
        case_insensitive: bool = True,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        file_limit: int = DEFAULT_FILE_LIMIT,
        timeout: float | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> str:
        """Return a report of matching spool lines, or "" when nothing matched.

        Args:
            job_name: Job name or prefix ("MYJOB*")
            search_string: Literal text to find (exclusive with search_regex)
            search_regex: Regular expression to find
            search_limit: Maximum matching lines reported per spool file
            file_limit: Maximum spool files searched across all jobs
            timeout: Seconds after which the search stops and reports what it found
        """
        expect_non_blank(job_name, "You must specify a job name")
        if bool(search_string) == bool(search_regex):
            raise ValidationError("You must specify either a search string or a search regex, but not both")
        if search_limit is not None and search_limit <= 0:
            raise ValidationError("The search limit must be a positive number")
        if file_limit is not None and file_limit <= 0:
            raise ValidationError("The file limit must be a positive number")

        flags = re.IGNORECASE if case_insensitive else 0
        pattern = re.compile(search_regex if search_regex else re.escape(search_string), flags)

        jobs = GetJobs.get_jobs_common(session, prefix=job_name, config=config)
        if not jobs:
            raise ZosError(f"No jobs found with name {job_name}")

        started = time.monotonic()
        files_searched = 0
        output = []
        for job in jobs:
            for job_file in GetJobs.get_spool_files(session, job.jobname, job.jobid, config):
                if timeout is not None and time.monotonic() - started > timeout:
                    output.append(f"\nThe search timed out after {timeout} seconds.")
                    return "".join(output)
                if files_searched >= file_limit:
                    output.append(f"\nThe search was limited to {file_limit} spool files.")
                    return "".join(output)
                files_searched += 1

                if not cls._has_match(session, job, job_file, search_string, search_regex, case_insensitive, config):
                    continue
                output.append(cls._report(session, job, job_file, pattern, search_limit, config))

        logger.debug(f"Searched {files_searched} spool file(s) of {len(jobs)} job(s)")
        return "".join(output)

    @classmethod
    def _has_match(
        cls,
        session: Session,
        job: Job,
        job_file: JobFile,
        search_string: str | None,
        search_regex: str | None,
        case_insensitive: bool,
        config: JobsConfig,
    ) -> bool:
        if search_regex:
            query = f"research={encode(search_regex)}"
        else:
            query = f"search={encode(search_string)}"
        if not case_insensitive:
            query += "&insensitive=false"
        query += "&maxreturnsize=1"
        resource = (
            job_resource(job.jobname, job.jobid, config)
            + config.res_spool_files
            + f"/{encode(job_file.id)}"
            + config.res_spool_content
            + "?"
            + query
        )
        return bool(ZosmfRestClient.get_expect_string(session, resource))

    @classmethod
    def _report(
        cls,
        session: Session,
        job: Job,
        job_file: JobFile,
        pattern: re.Pattern,
        search_limit: int,
        config: JobsConfig,
    ) -> str:
        content = GetJobs.get_spool_content_by_id(session, job.jobname, job.jobid, job_file.id, config)
        lines = [
            f" Line {number} : {line.rstrip()}\n"
            for number, line in enumerate(content.splitlines(), start=1)
            if pattern.search(line)
        ][:search_limit]
        header = (
            f"Job Name: {job.jobname} Job ID: {job.jobid} "
            f"Spool file: {job_file.ddname}(ID #{job_file.id} Step: {job_file.stepname})\n"
        )
        return header + "".join(lines) + "\n"
