"""zos-jobs CLI commands.

This module provides commands for batch jobs:
- submit JCL from a data set, USS file, local file or stdin
- list, view, download and search job output
- cancel and delete jobs
"""

import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from zosctl.click_group import ZosctlGroup
from zosctl.commands.connection import (
    connection_options,
    emit_json,
    get_session,
    handle_errors,
    json_option,
)
from zosctl.jobs import (
    CancelJobs,
    DataSetJcl,
    DeleteJobs,
    DownloadJobs,
    GetJobs,
    InlineJcl,
    JclSource,
    Job,
    JobsConfig,
    LocalFileJcl,
    SearchJobs,
    SubmitJobs,
    SubmitParms,
    UssFileJcl,
)
from zosctl.session import Session

logger = logging.getLogger(__name__)


def _print_jobs(jobs: list[Job], title: str = "Jobs") -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Job ID", style="cyan")
    table.add_column("Job name", style="yellow")
    table.add_column("Owner")
    table.add_column("Status")
    table.add_column("Retcode")
    for job in jobs:
        table.add_row(job.jobid, job.jobname, job.owner or "", job.status or "", job.retcode or "")
    Console().print(table)


@click.group(name="zos-jobs", cls=ZosctlGroup)
def jobs_group():
    """Submit and manage z/OS batch jobs.

    \b
    EXAMPLES:
        # Submit a member and wait for the output
        $ zosctl zos-jobs submit data-set "IBMUSER.JCL(IEFBR14)" --wait-for-output

        # Submit local JCL and download the spool files
        $ zosctl zos-jobs submit local-file ./build.jcl -d ./output

        # List my active jobs
        $ zosctl zos-jobs list jobs --status ACTIVE
    """
    pass


# -- submit --------------------------------------------------------------


@jobs_group.group(name="submit")
def submit_group():
    """Submit JCL from a data set, USS file, local file or stdin."""
    pass


_SUBMIT_OPTIONS = (
    click.option("--wait-for-active", "--wfa", is_flag=True, help="Wait until the job is ACTIVE"),
    click.option("--wait-for-output", "--wfo", is_flag=True, help="Wait until the job is in OUTPUT"),
    click.option(
        "--view-all-spool-content", "--vasc", is_flag=True, help="Wait for OUTPUT and print all spool files"
    ),
    click.option("--directory", "-d", help="Wait for OUTPUT and download the spool files here"),
    click.option("--extension", "-e", help="Extension of downloaded spool files (default .txt)"),
    click.option("--jcl-symbols", "--js", help="JCL symbols, e.g. \"NAME=VALUE OTHER='A B'\""),
    click.option("--watch-delay", type=click.FloatRange(min=0), help="Seconds between status checks (default 3)"),
    click.option("--attempts", type=click.IntRange(min=0), help="Status checks before giving up (default: no limit)"),
)


def _submit_options(func):
    for option in reversed(_SUBMIT_OPTIONS):
        func = option(func)
    return func


def _run_submit(
    session: Session,
    source: JclSource,
    as_json: bool,
    internal_reader_recfm: str | None = None,
    internal_reader_lrecl: str | None = None,
    **options: Any,
) -> None:
    parms = SubmitParms(
        internal_reader_recfm=internal_reader_recfm,
        internal_reader_lrecl=internal_reader_lrecl,
        **options,
    )
    result = SubmitJobs.submit(session, source, parms, JobsConfig.from_environment())

    if isinstance(result, list):
        if as_json:
            emit_json([spool.to_dict() for spool in result])
            return
        for spool in result:
            click.echo(f"Spool file: {spool.dd_name} (ID #{spool.id}, Step: {spool.step_name})")
            click.echo(spool.data)
        return

    if as_json:
        emit_json(result.to_dict())
        return
    click.echo(f"jobid:   {result.jobid}")
    click.echo(f"jobname: {result.jobname}")
    click.echo(f"status:  {result.status}")
    if result.retcode:
        click.echo(f"retcode: {result.retcode}")
    if parms.directory and not parms.view_all_spool_content:
        click.echo(f"Spool files downloaded to {parms.directory}")


@submit_group.command(name="data-set")
@click.argument("data_set_name")
@click.option("--volume", "--vol", help="Volume of an uncataloged data set")
@_submit_options
@json_option
@connection_options
@handle_errors
def submit_data_set(data_set_name: str, volume: str | None, as_json: bool, **kwargs: Any):
    """Submit the JCL in a data set or member."""
    session = get_session(kwargs)
    _run_submit(session, DataSetJcl(data_set_name, volume), as_json, **kwargs)


@submit_group.command(name="uss-file")
@click.argument("uss_file")
@_submit_options
@json_option
@connection_options
@handle_errors
def submit_uss_file(uss_file: str, as_json: bool, **kwargs: Any):
    """Submit the JCL in a USS file."""
    session = get_session(kwargs)
    _run_submit(session, UssFileJcl(uss_file), as_json, **kwargs)


_INTRDR_OPTIONS = (
    click.option("--internal-reader-recfm", "--irr", type=click.Choice(["F", "V"]), help="Record format of the JCL"),
    click.option("--internal-reader-lrecl", "--irl", help="Record length of the JCL (default 80)"),
)


def _intrdr_options(func):
    for option in reversed(_INTRDR_OPTIONS):
        func = option(func)
    return func


@submit_group.command(name="local-file")
@click.argument("local_file", type=click.Path(exists=True, dir_okay=False))
@_submit_options
@_intrdr_options
@json_option
@connection_options
@handle_errors
def submit_local_file(local_file: str, as_json: bool, **kwargs: Any):
    """Submit the JCL in a local file."""
    session = get_session(kwargs)
    _run_submit(session, LocalFileJcl(local_file), as_json, **kwargs)


@submit_group.command(name="stdin")
@_submit_options
@_intrdr_options
@json_option
@connection_options
@handle_errors
def submit_stdin(as_json: bool, **kwargs: Any):
    """Submit JCL read from standard input.

    \b
    Examples:
      $ cat build.jcl | zosctl zos-jobs submit stdin --wfo
    """
    session = get_session(kwargs)
    jcl = click.get_text_stream("stdin").read()
    _run_submit(session, InlineJcl(jcl), as_json, **kwargs)


# -- list / view ---------------------------------------------------------


@jobs_group.group(name="list")
def list_group():
    """List jobs and spool files."""
    pass


@list_group.command(name="jobs")
@click.option("--owner", "-o", help="Owner filter (default: your user ID; * for all)")
@click.option("--prefix", help="Job name prefix, e.g. MYJOB*")
@click.option("--max-jobs", "--mj", type=int, help="Maximum jobs returned (default 1000)")
@click.option("--status", help="ACTIVE, INPUT or OUTPUT")
@click.option("--exec-data", "--ed", is_flag=True, help="Include execution dates")
@json_option
@connection_options
@handle_errors
def list_jobs(
    owner: str | None,
    prefix: str | None,
    max_jobs: int | None,
    status: str | None,
    exec_data: bool,
    as_json: bool,
    **kwargs: Any,
):
    """List jobs on the spool."""
    session = get_session(kwargs)
    jobs = GetJobs.get_jobs_common(
        session,
        owner=owner or session.user,
        prefix=prefix,
        max_jobs=max_jobs,
        status=status,
        exec_data=exec_data,
        config=JobsConfig.from_environment(),
    )
    if as_json:
        emit_json([job.to_dict() for job in jobs])
    else:
        _print_jobs(jobs)


@list_group.command(name="spool-files-by-jobid")
@click.argument("jobid")
@json_option
@connection_options
@handle_errors
def list_spool_files(jobid: str, as_json: bool, **kwargs: Any):
    """List the spool files of a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    files = GetJobs.get_spool_files(session, job.jobname, job.jobid)
    if as_json:
        emit_json([f.to_dict() for f in files])
        return
    table = Table(title=f"{job.jobname}({job.jobid})", show_header=True, header_style="bold")
    for column in ("ID", "DD name", "Step", "Proc step", "Records"):
        table.add_column(column)
    for f in files:
        table.add_row(str(f.id), f.ddname, f.stepname or "", f.procstep or "", str(f.record_count or ""))
    Console().print(table)


@jobs_group.group(name="view")
def view_group():
    """View job status, spool content and JCL."""
    pass


@view_group.command(name="job-status-by-jobid")
@click.argument("jobid")
@json_option
@connection_options
@handle_errors
def view_job_status(jobid: str, as_json: bool, **kwargs: Any):
    """Show the status of a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    if as_json:
        emit_json(job.to_dict())
    else:
        _print_jobs([job], title="Job")


@view_group.command(name="spool-file-by-id")
@click.argument("jobid")
@click.argument("spool_file_id", type=int)
@connection_options
@handle_errors
def view_spool_file(jobid: str, spool_file_id: int, **kwargs: Any):
    """Print one spool file of a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    click.echo(GetJobs.get_spool_content_by_id(session, job.jobname, job.jobid, spool_file_id))


@view_group.command(name="all-spool-content")
@click.argument("jobid")
@connection_options
@handle_errors
def view_all_spool_content(jobid: str, **kwargs: Any):
    """Print every spool file of a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    for job_file in GetJobs.get_spool_files(session, job.jobname, job.jobid):
        click.echo(f"Spool file: {job_file.ddname} (ID #{job_file.id}, Step: {job_file.stepname})")
        click.echo(GetJobs.get_spool_content(session, job_file))


@view_group.command(name="jcl")
@click.argument("jobid")
@connection_options
@handle_errors
def view_jcl(jobid: str, **kwargs: Any):
    """Print the JCL a job was submitted with."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    click.echo(GetJobs.get_jcl(session, job.jobname, job.jobid))


# -- download / search ---------------------------------------------------


@jobs_group.group(name="download")
def download_group():
    """Download job output."""
    pass


@download_group.command(name="output")
@click.argument("jobid")
@click.option("--directory", "-d", help="Output directory (default ./output)")
@click.option("--extension", "-e", help="Extension of the spool files (default .txt)")
@click.option("--omit-jobid-directory", "--ojd", is_flag=True, help="Do not create a directory named after the job ID")
@click.option("--binary", "-b", is_flag=True, help="Download without code page conversion")
@click.option("--record", "-r", is_flag=True, help="Download in record mode")
@click.option("--encoding", "--ec", help="Code page of the spool files")
@connection_options
@handle_errors
def download_output(
    jobid: str,
    directory: str | None,
    extension: str | None,
    omit_jobid_directory: bool,
    binary: bool,
    record: bool,
    encoding: str | None,
    **kwargs: Any,
):
    """Download every spool file of a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    paths = DownloadJobs.download_all_spool_content(
        session,
        job.jobname,
        job.jobid,
        out_dir=directory,
        omit_jobid_directory=omit_jobid_directory,
        extension=extension,
        binary=binary,
        record=record,
        encoding=encoding,
        config=JobsConfig.from_environment(),
    )
    click.echo(f"Downloaded {len(paths)} spool file(s) of {job.jobname}({job.jobid})")


@jobs_group.group(name="search")
def search_group():
    """Search job output."""
    pass


@search_group.command(name="job")
@click.argument("job_name")
@click.option("--search-string", "--ss", help="Text to find")
@click.option("--search-regex", "--sr", help="Regular expression to find")
@click.option("--case-insensitive/--case-sensitive", default=True, help="Ignore case (default)")
@click.option("--search-limit", "--sl", type=click.IntRange(min=1), default=100, show_default=True,
              help="Maximum matching lines per spool file")
@click.option("--file-limit", "--fl", type=click.IntRange(min=1), default=100, show_default=True,
              help="Maximum spool files to search")
@click.option("--timeout", "-t", type=click.FloatRange(min=0), help="Seconds before the search stops")
@connection_options
@handle_errors
def search_job(job_name: str, **kwargs: Any):
    """Search the spool files of jobs matching JOB_NAME."""
    session = get_session(kwargs)
    output = SearchJobs.search_jobs(session, job_name, **kwargs)
    if not output:
        click.echo("No matches found.", err=True)
        sys.exit(1)
    click.echo(output)


# -- cancel / delete -----------------------------------------------------


@jobs_group.group(name="cancel")
def cancel_group():
    """Cancel jobs."""
    pass


@cancel_group.command(name="job")
@click.argument("jobid")
@json_option
@connection_options
@handle_errors
def cancel_job(jobid: str, as_json: bool, **kwargs: Any):
    """Cancel a job."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    feedback = CancelJobs.cancel_job(session, job.jobname, job.jobid)
    if as_json:
        emit_json(feedback)
    else:
        click.echo(f"Successfully submitted request to cancel job {job.jobname} ({job.jobid})")


@jobs_group.group(name="delete")
def delete_group():
    """Delete jobs."""
    pass


@delete_group.command(name="job")
@click.argument("jobid")
@click.option("--modify-version", type=click.Choice(["1.0", "2.0"]), help="z/OSMF job modify version (default 2.0)")
@json_option
@connection_options
@handle_errors
def delete_job(jobid: str, modify_version: str | None, as_json: bool, **kwargs: Any):
    """Delete a job and its output."""
    session = get_session(kwargs)
    job = GetJobs.get_job(session, jobid)
    feedback = DeleteJobs.delete_job(session, job.jobname, job.jobid, modify_version)
    if as_json:
        emit_json(feedback)
    else:
        click.echo(f"Successfully deleted job {job.jobname} ({job.jobid})")


@delete_group.command(name="old-jobs")
@click.option("--prefix", "-p", help="Only delete jobs whose names match this prefix (default: all)")
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Deletions in flight at once; 0 for no limit")
@click.option("--modify-version", type=click.Choice(["1.0", "2.0"]), help="z/OSMF job modify version (default 2.0)")
@json_option
@connection_options
@handle_errors
def delete_old_jobs(
    prefix: str | None, max_concurrent_requests: int, modify_version: str | None, as_json: bool, **kwargs: Any
):
    """Delete your jobs that are in OUTPUT status.

    \b
    EXAMPLES:
        # Delete finished jobs whose names start with IBMUSER
        $ zosctl zos-jobs delete old-jobs -p "IBMUSER*"
    """
    session = get_session(kwargs)
    jobs = DeleteJobs.delete_old_jobs(
        session, prefix, max_concurrent_requests=max_concurrent_requests, modify_version=modify_version
    )
    if as_json:
        emit_json(jobs)
    elif not jobs:
        click.echo("No jobs found.")
    else:
        click.echo(f"Successfully deleted {len(jobs)} job(s)")
        for job in jobs:
            click.echo(f"  {job.jobname} ({job.jobid})")
