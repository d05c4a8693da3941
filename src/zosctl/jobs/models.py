"""Job and spool file records returned by z/OSMF."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    """Job phases in the order a job moves through them."""

    INPUT = "INPUT"
    ACTIVE = "ACTIVE"
    OUTPUT = "OUTPUT"

    @property
    def order(self) -> int:
        return JOB_STATUS_ORDER.index(self)

    @classmethod
    def parse(cls, value: str | None) -> "JobStatus | None":
        """Return the status for value, or None when it is not a known status."""
        if value is None:
            return None
        try:
            return cls(value.upper())
        except ValueError:
            return None


JOB_STATUS_ORDER = (JobStatus.INPUT, JobStatus.ACTIVE, JobStatus.OUTPUT)


@dataclass
class Job:
    """A snapshot of a job as reported by z/OSMF."""

    jobid: str
    jobname: str
    owner: str | None = None
    status: str | None = None
    type: str | None = None
    subsystem: str | None = None
    class_: str | None = None
    retcode: str | None = None
    phase: int | None = None
    phase_name: str | None = None
    url: str | None = None
    files_url: str | None = None
    job_correlator: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        known = {
            "jobid",
            "jobname",
            "owner",
            "status",
            "type",
            "subsystem",
            "class",
            "retcode",
            "phase",
            "phase-name",
            "url",
            "files-url",
            "job-correlator",
        }
        return cls(
            jobid=data.get("jobid", ""),
            jobname=data.get("jobname", ""),
            owner=data.get("owner"),
            status=data.get("status"),
            type=data.get("type"),
            subsystem=data.get("subsystem"),
            class_=data.get("class"),
            retcode=data.get("retcode"),
            phase=data.get("phase"),
            phase_name=data.get("phase-name"),
            url=data.get("url"),
            files_url=data.get("files-url"),
            job_correlator=data.get("job-correlator"),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "jobid": self.jobid,
            "jobname": self.jobname,
            "owner": self.owner,
            "status": self.status,
            "type": self.type,
            "subsystem": self.subsystem,
            "class": self.class_,
            "retcode": self.retcode,
            "phase": self.phase,
            "phase-name": self.phase_name,
            "url": self.url,
            "files-url": self.files_url,
            "job-correlator": self.job_correlator,
        }
        data.update(self.extra)
        return data


@dataclass
class JobFile:
    """Descriptor of one spool file (DD) of a job."""

    id: int
    ddname: str
    jobname: str
    jobid: str
    stepname: str | None = None
    procstep: str | None = None
    class_: str | None = None
    record_count: int | None = None
    byte_count: int | None = None
    records_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobFile":
        return cls(
            id=data.get("id"),
            ddname=data.get("ddname", ""),
            jobname=data.get("jobname", ""),
            jobid=data.get("jobid", ""),
            stepname=data.get("stepname"),
            procstep=data.get("procstep"),
            class_=data.get("class"),
            record_count=data.get("record-count"),
            byte_count=data.get("byte-count"),
            records_url=data.get("records-url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "ddname": self.ddname,
            "jobname": self.jobname,
            "jobid": self.jobid,
            "stepname": self.stepname,
            "procstep": self.procstep,
            "class": self.class_,
            "record-count": self.record_count,
            "byte-count": self.byte_count,
            "records-url": self.records_url,
        }


@dataclass
class SpoolFile:
    """Content of a spool file retrieved for display."""

    id: int
    dd_name: str
    step_name: str | None
    proc_name: str | None
    data: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
