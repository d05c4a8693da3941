"""Download job spool files to the local file system."""

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import IO

from zosctl.errors import ValidationError, expect_non_blank
from zosctl.files.utils import encode
from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.get_jobs import TEXT_PLAIN_UTF8, GetJobs, job_resource
from zosctl.jobs.models import JobFile
from zosctl.jobs.monitor_jobs import MonitorJobs
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

_RECORD_RANGE = re.compile(r"^(\d+)-(\d+)$")


def unique_dd_names(job_files: Iterable[JobFile]) -> list[JobFile]:
    """Suffix repeated DD names within a step with (1), (2), ...

    Examples:
        >>> files = [JobFile(1, "SYSPRINT", "J", "1", "S1"), JobFile(2, "SYSPRINT", "J", "1", "S1")]
        >>> [f.ddname for f in unique_dd_names(files)]
        ['SYSPRINT', 'SYSPRINT(1)']
    """
    used: dict[str | None, list[str]] = {}
    result = []
    for job_file in job_files:
        name = job_file.ddname
        taken = used.setdefault(job_file.stepname, [])
        index = 1
        while name in taken:
            name = f"{job_file.ddname}({index})"
            index += 1
        taken.append(name)
        result.append(
            JobFile(
                id=job_file.id,
                ddname=name,
                jobname=job_file.jobname,
                jobid=job_file.jobid,
                stepname=job_file.stepname,
                procstep=job_file.procstep,
                class_=job_file.class_,
                record_count=job_file.record_count,
                byte_count=job_file.byte_count,
                records_url=job_file.records_url,
            )
        )
    return result


class DownloadJobs:
    @classmethod
    def get_spool_download_file_path(
        cls,
        job_file: JobFile,
        out_dir: str | None = None,
        omit_jobid_directory: bool = False,
        extension: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> str:
        """Local path for a spool file: <out_dir>/<jobid>/<procstep>/<stepname>/<ddname><ext>.

        Examples:
            >>> DownloadJobs.get_spool_download_file_path(JobFile(2, "JESMSGLG", "J", "JOB1", "JES2"))
            './output/JOB1/JES2/JESMSGLG.txt'
        """
        directory = out_dir if out_dir is not None else config.default_output_dir
        if not omit_jobid_directory:
            directory += "/" + job_file.jobid
        if job_file.procstep is not None:
            directory += "/" + job_file.procstep
        if job_file.stepname is not None:
            directory += "/" + job_file.stepname
        ext = extension if extension is not None else config.default_output_extension
        return f"{directory}/{job_file.ddname}{ext}"

    @classmethod
    def download_all_spool_content(
        cls,
        session: Session,
        jobname: str,
        jobid: str,
        out_dir: str | None = None,
        omit_jobid_directory: bool = False,
        extension: str | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> list[str]:
        """Download every spool file of a job; returns the local paths written."""
        expect_non_blank(jobid, "You must specify job ID and job name")
        expect_non_blank(jobname, "You must specify job ID and job name")
        logger.debug(f"Downloading all spool content for job {jobname}({jobid})")

        paths = []
        for job_file in unique_dd_names(GetJobs.get_spool_files(session, jobname, jobid, config)):
            paths.append(
                cls.download_spool_content(
                    session,
                    job_file,
                    out_dir=out_dir,
                    omit_jobid_directory=omit_jobid_directory,
                    extension=extension,
                    binary=binary,
                    record=record,
                    encoding=encoding,
                    config=config,
                )
            )
        return paths

    @classmethod
    def download_spool_content(
        cls,
        session: Session,
        job_file: JobFile,
        out_dir: str | None = None,
        omit_jobid_directory: bool = False,
        extension: str | None = None,
        binary: bool = False,
        record: bool = False,
        encoding: str | None = None,
        record_range: str | None = None,
        wait_for_active: bool = False,
        wait_for_output: bool = False,
        stream: IO[bytes] | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> str | None:
        """Download one spool file to a file, or into stream when given.

        Returns:
            The local path written, or None when writing to stream
        """
        if job_file is None:
            raise ValidationError("You must specify a job file")

        if wait_for_active:
            MonitorJobs.wait_for_active_status(session, job_file.jobname, job_file.jobid, config)
        if wait_for_output:
            MonitorJobs.wait_for_output_status(session, job_file.jobname, job_file.jobid, config)

        resource = (
            job_resource(job_file.jobname, job_file.jobid, config)
            + config.res_spool_files
            + f"/{encode(job_file.id)}"
            + config.res_spool_content
        )
        if binary:
            resource += "?mode=binary"
        elif record:
            resource += "?mode=record"
        elif encoding and str(encoding).strip():
            resource += f"?fileEncoding={encode(encoding)}"

        headers = dict(TEXT_PLAIN_UTF8)
        if record_range:
            match = _RECORD_RANGE.match(record_range)
            if not match:
                raise ValidationError(
                    f"Invalid record range format: {record_range}. Expected format is x-y."
                )
            start, end = int(match.group(1)), int(match.group(2))
            if end <= start:
                raise ValidationError(
                    f"Invalid record range specified: {record_range}. "
                    "Ensure the format is x-y with x < y."
                )
            headers[ZosmfHeaders.X_IBM_RECORD_RANGE] = f"{start}-{end}"

        normalize = not (binary or record)
        if stream is not None:
            logger.debug(f"Downloading spool file {job_file.ddname} for job {job_file.jobname}({job_file.jobid})")
            ZosmfRestClient.get_streamed(session, resource, headers, stream, normalize_newlines=normalize)
            return None

        path = cls.get_spool_download_file_path(
            job_file, out_dir, omit_jobid_directory, extension, config
        )
        logger.debug(
            f"Downloading spool file {job_file.ddname} for job {job_file.jobname}({job_file.jobid}) to {path}"
        )
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as out:
            ZosmfRestClient.get_streamed(session, resource, headers, out, normalize_newlines=normalize)
        return path
