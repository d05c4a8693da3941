"""Submit JCL to the internal reader.

JCL comes from one of four places, represented by the JclSource union:
a cataloged data set, a USS file, a local file or an inline string. The
command layer picks the variant once; submit() dispatches on it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from zosctl.errors import ValidationError, ZosError, expect_non_blank
from zosctl.files.constants import FILES_CONFIG
from zosctl.files.download import download_headers, normalize_extension
from zosctl.files.utils import encode
from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.download_jobs import DownloadJobs
from zosctl.jobs.get_jobs import TEXT_PLAIN_UTF8, GetJobs
from zosctl.jobs.models import Job, JobStatus, SpoolFile
from zosctl.jobs.monitor_jobs import MonitorJobs
from zosctl.rest_client import ZosmfHeaders, ZosmfRestClient
from zosctl.session import Session

logger = logging.getLogger(__name__)

MISSING_JCL = "No JCL provided"
QUOTE = "'"


@dataclass(frozen=True)
class DataSetJcl:
    data_set: str
    volume: str | None = None


@dataclass(frozen=True)
class UssFileJcl:
    path: str


@dataclass(frozen=True)
class LocalFileJcl:
    path: str


@dataclass(frozen=True)
class InlineJcl:
    jcl: str


JclSource = Union[DataSetJcl, UssFileJcl, LocalFileJcl, InlineJcl]


@dataclass(frozen=True)
class SubmitParms:
    """What to do after the job is accepted.

    view_all_spool_content wins over directory; wait_for_active wins over both.
    """

    jcl_symbols: str | None = None
    wait_for_active: bool = False
    wait_for_output: bool = False
    view_all_spool_content: bool = False
    directory: str | None = None
    extension: str | None = None
    internal_reader_recfm: str | None = None
    internal_reader_lrecl: str | None = None
    watch_delay: float | None = None
    attempts: int | None = None


def parse_jcl_symbols(symbols: str, config: JobsConfig = JOBS_CONFIG) -> dict[str, str]:
    """Turn "NAME=value NAME2='quoted value'" into X-IBM-JCL-Symbol headers.

    Values end at a blank unless quoted; inside quotes a doubled quote
    stands for one quote.

    Examples:
        >>> parse_jcl_symbols("SYM1=abc SYM2='x y'")
        {'X-IBM-JCL-Symbol-SYM1': 'abc', 'X-IBM-JCL-Symbol-SYM2': 'x y'}
        >>> parse_jcl_symbols("A='it''s'")
        {'X-IBM-JCL-Symbol-A': "it's"}

    Raises:
        ValidationError: A definition is malformed
    """
    headers: dict[str, str] = {}
    length = len(symbols)
    index = 0

    while index < length:
        while index < length and symbols[index] == " ":
            index += 1
        if index >= length:
            break

        equals = symbols.find("=", index)
        if equals < 0:
            raise ValidationError("No equals '=' character was specified to define a symbol name.")
        name = symbols[index:equals]
        if not name:
            raise ValidationError("No symbol name specified before the equals '=' character.")
        if len(name) > config.max_symbol_length:
            raise ValidationError(
                f"The symbol name '{name}' is too long. "
                f"It must 1 to {config.max_symbol_length} characters."
            )

        value_start = equals + 1
        if value_start >= length:
            raise ValidationError(f"No value specified for symbol name '{name}'.")

        missing_quote = f"The value for symbol '{name}' is missing a terminating quote ({QUOTE})."
        quoted = False
        if symbols[value_start] == QUOTE:
            if value_start + 1 >= length:
                raise ValidationError(missing_quote)
            # Two quotes in a row start an unquoted value with a literal quote
            if symbols[value_start + 1] != QUOTE:
                quoted = True
                value_start += 1

        if quoted:
            value_end = value_start
            while True:
                if value_end >= length:
                    raise ValidationError(missing_quote)
                if symbols[value_end] == QUOTE:
                    if value_end + 1 < length and symbols[value_end + 1] == QUOTE:
                        value_end += 2
                        continue
                    break
                value_end += 1
        else:
            value_end = symbols.find(" ", value_start)
            if value_end < 0:
                value_end = length

        value = symbols[value_start:value_end].replace(QUOTE * 2, QUOTE)
        index = value_end + 1
        headers[ZosmfHeaders.X_IBM_JCL_SYMBOL_PREFIX + name.upper()] = value

    if headers:
        logger.debug(
            "Formed the following JCL symbol headers:\n"
            + "".join(f"    {k} = {v}\n" for k, v in headers.items())
        )
    return headers


class SubmitJobs:
    """Submit jobs and optionally follow them to completion."""

    @classmethod
    def submit_job(
        cls,
        session: Session,
        job_data_set: str,
        jcl_symbols: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Submit the JCL held in a cataloged data set or member."""
        expect_non_blank(
            job_data_set, "You must provide a data set containing JCL to submit in parms.jobDataSet"
        )
        logger.debug(f"Submitting a job located in the data set '{job_data_set}'")
        return cls._submit_file(session, f"//'{job_data_set}'", jcl_symbols, config)

    @classmethod
    def submit_uss_job(
        cls,
        session: Session,
        uss_file: str,
        jcl_symbols: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Submit the JCL held in a USS file."""
        expect_non_blank(uss_file, "You must provide a USS file containing JCL to submit")
        logger.debug(f"Submitting a job located in the USS file '{uss_file}'")
        return cls._submit_file(session, uss_file, jcl_symbols, config)

    @classmethod
    def _submit_file(
        cls, session: Session, file: str, jcl_symbols: str | None, config: JobsConfig
    ) -> Job:
        headers = dict(ZosmfHeaders.APPLICATION_JSON)
        if jcl_symbols:
            headers.update(parse_jcl_symbols(jcl_symbols, config))
        response = ZosmfRestClient.put_expect_json(session, config.resource, headers, {"file": file})
        return Job.from_dict(response)

    @classmethod
    def submit_jcl(
        cls,
        session: Session,
        jcl: str,
        internal_reader_recfm: str | None = None,
        internal_reader_lrecl: str | None = None,
        jcl_symbols: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Submit JCL text.

        The internal reader defaults to fixed 80-byte records.
        """
        if jcl is None:
            raise ValidationError(
                "You must provide a JCL string to submit. "
                "The 'jcl' field of the provided parameters was undefined. "
            )
        logger.debug(f"Submitting JCL of length {len(jcl)}")
        headers = {
            **TEXT_PLAIN_UTF8,
            **ZosmfHeaders.X_IBM_INTRDR_MODE_TEXT,
            ZosmfHeaders.X_IBM_INTRDR_LRECL: internal_reader_lrecl or config.intrdr_lrecl,
            ZosmfHeaders.X_IBM_INTRDR_RECFM: internal_reader_recfm or config.intrdr_recfm,
        }
        if jcl_symbols:
            headers.update(parse_jcl_symbols(jcl_symbols, config))
        response = ZosmfRestClient.put_expect_json(session, config.resource, headers, jcl)
        return Job.from_dict(response)

    @classmethod
    def submit_jcl_string(
        cls,
        session: Session,
        jcl: str,
        parms: SubmitParms | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job | list[SpoolFile]:
        """Submit JCL text and then apply the follow-up options in parms."""
        parms = parms or SubmitParms()
        if not jcl:
            raise ValidationError(MISSING_JCL)
        job = cls.submit_jcl(
            session,
            jcl,
            parms.internal_reader_recfm,
            parms.internal_reader_lrecl,
            parms.jcl_symbols,
            config,
        )
        return cls.check_submit_options(session, parms, job, config)

    @classmethod
    def submit_job_notify(
        cls,
        session: Session,
        job_data_set: str,
        status: JobStatus = JobStatus.OUTPUT,
        watch_delay: float | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Submit a data set and wait until the job reaches status."""
        job = cls.submit_job(session, job_data_set, config=config)
        return cls._wait(session, job, status, watch_delay, config)

    @classmethod
    def submit_jcl_notify(
        cls,
        session: Session,
        jcl: str,
        status: JobStatus = JobStatus.OUTPUT,
        watch_delay: float | None = None,
        internal_reader_recfm: str | None = None,
        internal_reader_lrecl: str | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job:
        """Submit JCL text and wait until the job reaches status."""
        job = cls.submit_jcl(
            session, jcl, internal_reader_recfm, internal_reader_lrecl, config=config
        )
        return cls._wait(session, job, status, watch_delay, config)

    @classmethod
    def _wait(
        cls,
        session: Session,
        job: Job,
        status: JobStatus,
        watch_delay: float | None,
        config: JobsConfig,
    ) -> Job:
        if not job.jobname or not job.jobid:
            raise ZosError("The job object you provide must contain both 'jobname' and 'jobid'.")
        logger.debug(f"Waiting for job {job.jobname} ({job.jobid}) to reach {status.value}")
        return MonitorJobs.wait_for_status_common(
            session, job.jobname, job.jobid, status, watch_delay=watch_delay, config=config
        )

    @classmethod
    def check_submit_options(
        cls,
        session: Session,
        parms: SubmitParms,
        job: Job,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job | list[SpoolFile]:
        """Follow a submitted job as parms asks.

        Returns the job as last observed, or the spool content when
        view_all_spool_content is set.
        """
        wait = {"watch_delay": parms.watch_delay, "attempts": parms.attempts, "config": config}

        if parms.wait_for_active:
            return MonitorJobs.wait_for_status_common(
                session, job.jobname, job.jobid, JobStatus.ACTIVE, **wait
            )

        if parms.view_all_spool_content or parms.wait_for_output:
            job = MonitorJobs.wait_for_status_common(
                session, job.jobname, job.jobid, JobStatus.OUTPUT, **wait
            )
            if not parms.view_all_spool_content:
                return job
            spool_files = []
            for job_file in GetJobs.get_spool_files(session, job.jobname, job.jobid, config):
                spool_files.append(
                    SpoolFile(
                        id=job_file.id,
                        dd_name=job_file.ddname,
                        step_name=job_file.stepname,
                        proc_name=job_file.procstep,
                        data=GetJobs.get_spool_content(session, job_file, config),
                    )
                )
            return spool_files

        if parms.directory:
            job = MonitorJobs.wait_for_status_common(
                session, job.jobname, job.jobid, JobStatus.OUTPUT, **wait
            )
            DownloadJobs.download_all_spool_content(
                session,
                job.jobname,
                job.jobid,
                out_dir=parms.directory,
                extension=normalize_extension(parms.extension) if parms.extension else None,
                config=config,
            )
            return job

        return job

    @classmethod
    def submit(
        cls,
        session: Session,
        source: JclSource,
        parms: SubmitParms | None = None,
        config: JobsConfig = JOBS_CONFIG,
    ) -> Job | list[SpoolFile]:
        """Submit JCL from any source and apply the follow-up options.

        A data set on an explicit volume is not cataloged, so its content is
        read first and submitted as text.
        """
        parms = parms or SubmitParms()

        if isinstance(source, DataSetJcl):
            if source.volume:
                resource = (
                    f"{FILES_CONFIG.resource}{FILES_CONFIG.res_ds_files}"
                    f"/-({encode(source.volume)})/{encode(source.data_set)}"
                )
                jcl = ZosmfRestClient.get_expect_string(session, resource, download_headers())
                return cls.submit_jcl_string(session, jcl, parms, config)
            job = cls.submit_job(session, source.data_set, parms.jcl_symbols, config)
        elif isinstance(source, UssFileJcl):
            job = cls.submit_uss_job(session, source.path, parms.jcl_symbols, config)
        elif isinstance(source, LocalFileJcl):
            try:
                jcl = Path(source.path).read_text()
            except OSError as e:
                raise ZosError(
                    "Could not read the local JCL file", additional_details=str(e), cause_errors=e
                ) from e
            return cls.submit_jcl_string(session, jcl, parms, config)
        elif isinstance(source, InlineJcl):
            return cls.submit_jcl_string(session, source.jcl, parms, config)
        else:
            raise TypeError(f"Unsupported JCL source: {source!r}")

        return cls.check_submit_options(session, parms, job, config)
