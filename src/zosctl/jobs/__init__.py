"""Job submission, monitoring, spool retrieval and search."""

from zosctl.jobs.constants import JOBS_CONFIG, JobsConfig
from zosctl.jobs.download_jobs import DownloadJobs
from zosctl.jobs.get_jobs import CancelJobs, DeleteJobs, GetJobs
from zosctl.jobs.models import Job, JobFile, JobStatus, SpoolFile
from zosctl.jobs.monitor_jobs import MonitorJobs
from zosctl.jobs.search_jobs import SearchJobs
from zosctl.jobs.submit_jobs import (
    DataSetJcl,
    InlineJcl,
    JclSource,
    LocalFileJcl,
    SubmitJobs,
    SubmitParms,
    UssFileJcl,
)

__all__ = [
    "JOBS_CONFIG",
    "CancelJobs",
    "DataSetJcl",
    "DeleteJobs",
    "DownloadJobs",
    "GetJobs",
    "InlineJcl",
    "Job",
    "JclSource",
    "JobFile",
    "JobStatus",
    "JobsConfig",
    "LocalFileJcl",
    "MonitorJobs",
    "SearchJobs",
    "SpoolFile",
    "SubmitJobs",
    "SubmitParms",
    "UssFileJcl",
]
