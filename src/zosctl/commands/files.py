"""zos-files CLI commands.

This module provides commands for data sets, USS files and z/OS file systems:
- create, upload, download, list, search, delete
"""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from zosctl.click_group import ZosctlGroup
from zosctl.commands.connection import (
    connection_options,
    emit_json,
    get_session,
    handle_errors,
    json_option,
    response_timeout_option,
)
from zosctl.errors import ValidationError
from zosctl.files import (
    Create,
    CreateDataSetType,
    Delete,
    Download,
    FilesMap,
    Invoke,
    List,
    Search,
    Upload,
    ZosFilesAttributes,
    ZosFilesResponse,
    build_options,
)

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES_FILE = ".zosattributes"


def _print_response(response: ZosFilesResponse, as_json: bool) -> None:
    if as_json:
        emit_json(
            {
                "success": response.success,
                "commandResponse": response.command_response,
                "apiResponse": response.api_response,
                "errorMessage": response.error_message,
            }
        )
    else:
        click.echo(response.command_response)
    if not response.success:
        sys.exit(1)


def _split_names(value: str | None) -> list[str]:
    return [name.strip() for name in (value or "").split(",") if name.strip()]


def _load_attributes(attributes_file: str | None, base_dir: str | None) -> ZosFilesAttributes | None:
    """Load --attributes, or a .zosattributes file in base_dir when present."""
    if attributes_file:
        return ZosFilesAttributes.from_file(attributes_file, base_dir)
    if base_dir:
        default = Path(base_dir) / DEFAULT_ATTRIBUTES_FILE
        if default.is_file():
            logger.info(f"Using attributes from {default}")
            return ZosFilesAttributes.from_file(default, base_dir)
    return None


@click.group(name="zos-files", cls=ZosctlGroup)
def files_group():
    """Manage z/OS data sets, USS files and file systems.

    \b
    EXAMPLES:
        # Allocate a PDS and upload a directory of members into it
        $ zosctl zos-files create data-set-partitioned IBMUSER.SRC
        $ zosctl zos-files upload dir-to-pds ./src IBMUSER.SRC

        # Download a USS file
        $ zosctl zos-files download uss-file /u/ibmuser/app.log
    """
    pass


# -- create --------------------------------------------------------------


@files_group.group(name="create")
def create_group():
    """Create data sets, VSAM clusters, USS files and file systems."""
    pass


_DATA_SET_OPTIONS = (
    click.option("--size", "--sz", help="Size with unit, e.g. 5CYL or 100TRK"),
    click.option("--primary-space", "--ps", "primary", type=int, help="Primary allocation"),
    click.option("--secondary-space", "--ss", "secondary", type=int, help="Secondary allocation"),
    click.option("--record-length", "--rl", "lrecl", type=int, help="Logical record length"),
    click.option("--record-format", "--rf", "recfm", help="Record format, e.g. FB or VB"),
    click.option("--block-size", "--bs", "blksize", type=int, help="Block size"),
    click.option("--directory-blocks", "--db", "dirblk", type=int, help="Directory blocks (PDS)"),
    click.option("--data-set-type", "--dst", "dsntype", help="Data set type, e.g. LIBRARY or PDS"),
    click.option("--volume-serial", "--vs", "volser", help="Volume to allocate on"),
    click.option("--storage-class", "--sc", "storclass", help="SMS storage class"),
    click.option("--management-class", "--mc", "mgntclass", help="SMS management class"),
    click.option("--data-class", "--dc", "dataclass", help="SMS data class"),
    click.option("--unit", help="Device type"),
    click.option(
        "--show-attributes", "--pa", "show_attributes", is_flag=True, help="Print the attributes used"
    ),
)

_DATA_SET_TYPES = {
    "data-set-sequential": (CreateDataSetType.SEQUENTIAL, "Create a physical sequential data set."),
    "data-set-partitioned": (CreateDataSetType.PARTITIONED, "Create a partitioned data set (PDS)."),
    "data-set-classic": (CreateDataSetType.CLASSIC, "Create a classic PDS with more directory blocks."),
    "data-set-c": (CreateDataSetType.C, "Create a PDS for C source code (VB 260)."),
    "data-set-binary": (CreateDataSetType.BINARY, "Create a PDS for binary load modules (U 27998)."),
}


def _data_set_options(func):
    for option in reversed(_DATA_SET_OPTIONS):
        func = option(func)
    return func


def _register_data_set_create(command_name: str, ds_type: CreateDataSetType, summary: str) -> None:
    @create_group.command(name=command_name, help=summary)
    @click.argument("data_set_name")
    @_data_set_options
    @response_timeout_option
    @json_option
    @connection_options
    @handle_errors
    def create_data_set(data_set_name: str, as_json: bool, **kwargs: Any):
        session = get_session(kwargs)
        response = Create.data_set(session, ds_type, data_set_name, build_options(kwargs))
        _print_response(response, as_json)


for _name, (_type, _summary) in _DATA_SET_TYPES.items():
    _register_data_set_create(_name, _type, _summary)


@create_group.command(name="data-set")
@click.argument("data_set_name")
@click.option("--like", help="Copy the attributes of this existing data set")
@click.option("--data-set-organization", "--dso", "dsorg", help="PO or PS")
@_data_set_options
@response_timeout_option
@json_option
@connection_options
@handle_errors
def create_data_set_blank(data_set_name: str, like: str | None, as_json: bool, **kwargs: Any):
    """Create a data set from explicit attributes, or like an existing one.

    \b
    Examples:
      $ zosctl zos-files create data-set IBMUSER.NEW --like IBMUSER.OLD
      $ zosctl zos-files create data-set IBMUSER.SEQ --dso PS --rf FB --rl 80 --size 1CYL
    """
    session = get_session(kwargs)
    if like:
        response = Create.data_set_like(session, data_set_name, like, build_options(kwargs))
    else:
        response = Create.data_set(session, CreateDataSetType.BLANK, data_set_name, build_options(kwargs))
    _print_response(response, as_json)


@create_group.command(name="data-set-vsam")
@click.argument("data_set_name")
@click.option("--data-set-organization", "--dso", "dsorg", help="INDEXED, NUMBERED, NONINDEXED or LINEAR")
@click.option("--size", "--sz", help="Size with unit, e.g. 840KB")
@click.option("--secondary-space", "--ss", "secondary", type=int, help="Secondary allocation")
@click.option("--volumes", "-v", help="Volumes, comma separated")
@click.option("--storage-class", "--sc", "storclass", help="SMS storage class")
@click.option("--management-class", "--mc", "mgntclass", help="SMS management class")
@click.option("--data-class", "--dc", "dataclass", help="SMS data class")
@click.option("--retain-for", "--rf", "retain_for", type=int, help="Days to retain (0-93000)")
@click.option("--retain-to", "--rt", "retain_to", help="Retain until date (yyyyddd)")
@click.option("--show-attributes", "--pa", "show_attributes", is_flag=True, help="Print the attributes used")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def create_vsam(data_set_name: str, as_json: bool, **kwargs: Any):
    """Define a VSAM cluster with IDCAMS."""
    session = get_session(kwargs)
    _print_response(Create.vsam(session, data_set_name, build_options(kwargs)), as_json)


@create_group.command(name="uss-file")
@click.argument("uss_path")
@click.option("--mode", "-m", help="Permissions, e.g. rwxr-xr-x")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def create_uss_file(uss_path: str, mode: str | None, response_timeout: int | None, as_json: bool, **kwargs):
    """Create an empty USS file."""
    session = get_session(kwargs)
    _print_response(Create.uss(session, uss_path, "file", mode, response_timeout), as_json)


@create_group.command(name="uss-directory")
@click.argument("uss_path")
@click.option("--mode", "-m", help="Permissions, e.g. rwxr-xr-x")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def create_uss_directory(
    uss_path: str, mode: str | None, response_timeout: int | None, as_json: bool, **kwargs
):
    """Create a USS directory."""
    session = get_session(kwargs)
    _print_response(Create.uss(session, uss_path, "directory", mode, response_timeout), as_json)


@create_group.command(name="zos-file-system")
@click.argument("file_system_name")
@click.option("--perms", type=int, help="Permissions of the root directory (octal, default 755)")
@click.option("--cyls-pri", type=int, help="Primary cylinders (default 10)")
@click.option("--cyls-sec", type=int, help="Secondary cylinders (default 2)")
@click.option("--volumes", "-v", help="Volumes, comma separated")
@click.option("--owner", "-o", help="Owner of the root directory")
@click.option("--group", "-g", help="Group of the root directory")
@click.option("--storage-class", "--sc", "storclass", help="SMS storage class")
@click.option("--management-class", "--mc", "mgntclass", help="SMS management class")
@click.option("--data-class", "--dc", "dataclass", help="SMS data class")
@click.option("--timeout", "-t", type=int, help="Seconds z/OSMF waits for zfsadm (default 20)")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def create_zfs(file_system_name: str, as_json: bool, **kwargs: Any):
    """Create a z/OS file system (zFS)."""
    session = get_session(kwargs)
    _print_response(Create.zfs(session, file_system_name, build_options(kwargs)), as_json)


# -- upload --------------------------------------------------------------


@files_group.group(name="upload")
def upload_group():
    """Upload local files and directories."""
    pass


_TRANSFER_OPTIONS = (
    click.option("--binary", "-b", is_flag=True, help="Transfer without code page conversion"),
    click.option("--record", "-r", is_flag=True, help="Transfer in record mode"),
    click.option("--encoding", "--ec", help="Code page of the z/OS data, e.g. IBM-1047"),
)


def _transfer_options(func):
    for option in reversed(_TRANSFER_OPTIONS):
        func = option(func)
    return func


@upload_group.command(name="file-to-data-set")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("data_set_name")
@_transfer_options
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@click.option("--migrated-recall", "--mr", "recall", type=click.Choice(["wait", "nowait", "error"]))
@response_timeout_option
@json_option
@connection_options
@handle_errors
def upload_file_to_data_set(input_file: str, data_set_name: str, as_json: bool, **kwargs: Any):
    """Upload a local file to a sequential data set or member."""
    session = get_session(kwargs)
    response = Upload.file_to_data_set(session, input_file, data_set_name, **kwargs)
    _print_response(response, as_json)


@upload_group.command(name="dir-to-pds")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("data_set_name")
@_transfer_options
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@click.option("--migrated-recall", "--mr", "recall", type=click.Choice(["wait", "nowait", "error"]))
@response_timeout_option
@json_option
@connection_options
@handle_errors
def upload_dir_to_pds(input_dir: str, data_set_name: str, as_json: bool, **kwargs: Any):
    """Upload the files of a local directory as members of a PDS.

    Member names are derived from the file names. Uploading stops at the
    first failure; the remaining files are reported as skipped.
    """
    session = get_session(kwargs)
    response = Upload.dir_to_pds(session, input_dir, data_set_name, **kwargs)
    _print_response(response, as_json)


@upload_group.command(name="stdin-to-data-set")
@click.argument("data_set_name")
@_transfer_options
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@click.option("--migrated-recall", "--mr", "recall", type=click.Choice(["wait", "nowait", "error"]))
@response_timeout_option
@json_option
@connection_options
@handle_errors
def upload_stdin_to_data_set(data_set_name: str, as_json: bool, **kwargs: Any):
    """Upload standard input to a sequential data set or member.

    \b
    EXAMPLES:
        $ echo "hello" | zosctl zos-files upload stdin-to-data-set "IBMUSER.DATA(HELLO)"
    """
    session = get_session(kwargs)
    buffer = click.get_binary_stream("stdin").read()
    _print_response(Upload.buffer_to_data_set(session, buffer, data_set_name, **kwargs), as_json)


@upload_group.command(name="file-to-uss")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("uss_file_name")
@click.option("--binary", "-b", is_flag=True, help="Transfer without code page conversion")
@click.option("--encoding", "--ec", help="Code page to tag and convert the file with")
@click.option("--local-encoding", "--lec", help="Code page of the local file")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def upload_file_to_uss(input_file: str, uss_file_name: str, as_json: bool, **kwargs: Any):
    """Upload a local file to a USS file."""
    session = get_session(kwargs)
    response = Upload.file_to_uss_file(session, input_file, uss_file_name, **kwargs)
    _print_response(response, as_json)


@upload_group.command(name="dir-to-uss")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("uss_directory_name")
@click.option("--binary", "-b", is_flag=True, help="Upload every file in binary unless mapped otherwise")
@click.option("--recursive", "-r", is_flag=True, help="Include subdirectories")
@click.option("--include-hidden", "--ih", is_flag=True, help="Include files and directories starting with '.'")
@click.option("--binary-files", "--bf", help="Comma separated file names to upload in binary")
@click.option("--ascii-files", "--af", help="Comma separated file names to upload as text")
@click.option("--attributes", "--attrs", "attributes_file", type=click.Path(exists=True, dir_okay=False),
              help="Attributes file (default: .zosattributes in the input directory)")
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Uploads in flight at once; 0 for no limit")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def upload_dir_to_uss(
    input_dir: str,
    uss_directory_name: str,
    binary: bool,
    recursive: bool,
    include_hidden: bool,
    binary_files: str | None,
    ascii_files: str | None,
    attributes_file: str | None,
    max_concurrent_requests: int,
    response_timeout: int | None,
    as_json: bool,
    **kwargs: Any,
):
    """Upload a local directory to a USS directory.

    The transfer mode of each file comes from the attributes file if one
    applies, else from --binary-files/--ascii-files, else from --binary.

    \b
    Examples:
      $ zosctl zos-files upload dir-to-uss ./app /u/ibmuser/app -r --bf "logo.png,app.jar"
    """
    if binary_files and ascii_files:
        raise click.UsageError("--binary-files and --ascii-files are mutually exclusive")
    session = get_session(kwargs)

    files_map = None
    if binary_files:
        files_map = FilesMap(binary=True, file_names=_split_names(binary_files))
    elif ascii_files:
        files_map = FilesMap(binary=False, file_names=_split_names(ascii_files))
    attributes = _load_attributes(attributes_file, input_dir)

    console = Console(stderr=True)
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Uploading...", total=None)
        response = Upload.dir_to_uss_dir(
            session,
            input_dir,
            uss_directory_name,
            binary=binary,
            recursive=recursive,
            include_hidden=include_hidden,
            files_map=files_map,
            attributes=attributes,
            max_concurrent_requests=max_concurrent_requests,
            response_timeout=response_timeout,
            progress_callback=lambda message: progress.update(task, description=message),
        )

    if not as_json and response.api_response.failed:
        table = Table(title="Failed uploads", show_header=True, header_style="bold")
        table.add_column("Local file", style="cyan")
        table.add_column("Error", style="red")
        for result in response.api_response.failed:
            table.add_row(result.source, str(result.error))
        console.print(table)
    _print_response(response, as_json)


# -- download ------------------------------------------------------------


@files_group.group(name="download")
def download_group():
    """Download data sets and USS files."""
    pass


@download_group.command(name="data-set")
@click.argument("data_set_name")
@_transfer_options
@click.option("--file", "-f", help="Local file (default derived from the data set name)")
@click.option("--extension", "-e", help="Extension of the local file (default txt)")
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@click.option("--record-range", "--rr", help="Records to download, e.g. 0-100")
@click.option("--preserve-original-letter-case", "--po", is_flag=True, help="Keep upper case local names")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def download_data_set(data_set_name: str, as_json: bool, **kwargs: Any):
    """Download a sequential data set or member to a local file."""
    session = get_session(kwargs)
    _print_response(Download.data_set(session, data_set_name, **kwargs), as_json)


@download_group.command(name="all-members")
@click.argument("data_set_name")
@_transfer_options
@click.option("--directory", "-d", help="Local directory (default derived from the data set name)")
@click.option("--extension", "-e", help="Extension of the local files (default txt)")
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@click.option("--preserve-original-letter-case", "--po", is_flag=True, help="Keep upper case local names")
@click.option("--fail-fast/--no-fail-fast", default=True, help="Stop at the first failed member")
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Downloads in flight at once; 0 for no limit")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def download_all_members(data_set_name: str, as_json: bool, **kwargs: Any):
    """Download every member of a PDS into a local directory."""
    session = get_session(kwargs)
    _print_response(Download.all_members(session, data_set_name, **kwargs), as_json)


def _parse_extension_map(value: str | None) -> dict[str, str] | None:
    """Parse "llq=ext,llq2=ext2" into a mapping keyed by lower-case qualifier."""
    if not value:
        return None
    mapping = {}
    for pair in _split_names(value):
        llq, sep, ext = pair.partition("=")
        if not sep or not llq.strip():
            raise ValidationError(f"Invalid extension map entry: {pair}. Use the format llq=ext.")
        mapping[llq.strip().lower()] = ext.strip()
    return mapping


@download_group.command(name="data-sets-matching")
@click.argument("pattern")
@_transfer_options
@click.option("--exclude-patterns", "--ep", help="Comma-separated patterns of data sets to leave out")
@click.option("--directory", "-d", help="Local directory (default: current directory)")
@click.option("--extension", "-e", help="Extension of the local files (default txt)")
@click.option("--extension-map", "--em", help='Extension per low-level qualifier, e.g. "cntl=jcl,cbl=cob"')
@click.option("--volume-serial", "--vs", "volume", help="Volume of uncataloged data sets")
@click.option("--preserve-original-letter-case", "--po", is_flag=True, help="Keep upper case local names")
@click.option("--fail-fast/--no-fail-fast", default=True, help="Stop at the first failed data set")
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Downloads in flight at once; 0 for no limit")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def download_data_sets_matching(
    pattern: str,
    exclude_patterns: str | None,
    extension_map: str | None,
    max_concurrent_requests: int,
    response_timeout: int | None,
    as_json: bool,
    **kwargs: Any,
):
    """Download every data set matching one or more comma-separated patterns.

    Sequential data sets become files and partitioned data sets become
    directories of member files.

    \b
    EXAMPLES:
        # Download the JCL and source libraries of IBMUSER
        $ zosctl zos-files download data-sets-matching "IBMUSER.JCL,IBMUSER.SRC.*" -d ./backup
    """
    session = get_session(kwargs)
    listing = List.data_sets_matching_pattern(
        session,
        _split_names(pattern),
        exclude_patterns=_split_names(exclude_patterns),
        max_concurrent_requests=max_concurrent_requests,
        response_timeout=response_timeout,
    )
    if not listing.success:
        _print_response(listing, as_json)
        return
    response = Download.all_data_sets(
        session,
        listing.api_response,
        extension_map=_parse_extension_map(extension_map),
        max_concurrent_requests=max_concurrent_requests,
        response_timeout=response_timeout,
        **kwargs,
    )
    _print_response(response, as_json)


@download_group.command(name="uss-file")
@click.argument("uss_file_name")
@click.option("--binary", "-b", is_flag=True, help="Transfer without code page conversion")
@click.option("--encoding", "--ec", help="Code page of the USS file")
@click.option("--file", "-f", help="Local file (default: the base name in the current directory)")
@click.option("--record-range", "--rr", help="Records to download, e.g. 0-100")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def download_uss_file(uss_file_name: str, as_json: bool, **kwargs: Any):
    """Download a USS file."""
    session = get_session(kwargs)
    _print_response(Download.uss_file(session, uss_file_name, **kwargs), as_json)


@download_group.command(name="uss-directory")
@click.argument("uss_directory_name")
@click.option("--directory", "-d", help="Local directory (default: current directory)")
@click.option("--binary", "-b", is_flag=True, help="Transfer without code page conversion")
@click.option("--encoding", "--ec", help="Code page of the USS files")
@click.option("--include-hidden", "--ih", is_flag=True, help="Include files and directories starting with '.'")
@click.option("--overwrite", "--ow", is_flag=True, help="Replace local files that already exist")
@click.option("--fail-fast/--no-fail-fast", default=True, help="Stop at the first failed file")
@click.option("--attributes", "--attrs", "attributes_file", type=click.Path(exists=True, dir_okay=False),
              help="Attributes file selecting which files to download and how")
@click.option("--depth", type=int, help="Directory levels to descend (0 for all)")
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Downloads in flight at once; 0 for no limit")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def download_uss_directory(
    uss_directory_name: str, attributes_file: str | None, as_json: bool, **kwargs: Any
):
    """Download a USS directory tree."""
    session = get_session(kwargs)
    attributes = _load_attributes(attributes_file, None)
    _print_response(
        Download.uss_dir(session, uss_directory_name, attributes=attributes, **kwargs), as_json
    )


# -- list ----------------------------------------------------------------


@files_group.group(name="list")
def list_group():
    """List data sets, members, USS files and file systems."""
    pass


def _print_items(items: list[dict], columns: tuple[str, ...], title: str) -> None:
    table = Table(title=title, show_header=True, header_style="bold")
    for column in columns:
        table.add_column(column)
    for item in items:
        table.add_row(*(str(item.get(column, "")) for column in columns))
    Console().print(table)


@list_group.command(name="data-set")
@click.argument("pattern")
@click.option("--attributes", "-a", is_flag=True, help="Show data set attributes")
@click.option("--max-length", "--max", "max_length", type=int, help="Maximum number of data sets")
@click.option("--volume-serial", "--vs", "volume", help="Volume to search")
@click.option("--start", "-s", help="First data set name to return")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def list_data_sets(pattern: str, attributes: bool, as_json: bool, **kwargs: Any):
    """List data sets matching a pattern such as IBMUSER.**."""
    session = get_session(kwargs)
    response = List.data_set(session, pattern, attributes=attributes, **kwargs)
    items = (response.api_response or {}).get("items", [])
    if as_json:
        emit_json(response.api_response)
    elif attributes:
        _print_items(items, ("dsname", "dsorg", "recfm", "lrecl", "blksz", "vol", "used"), "Data sets")
    else:
        for item in items:
            click.echo(item.get("dsname"))


@list_group.command(name="all-members")
@click.argument("data_set_name")
@click.option("--attributes", "-a", is_flag=True, help="Show member statistics")
@click.option("--max-length", "--max", "max_length", type=int, help="Maximum number of members")
@click.option("--pattern", help="Member name pattern, e.g. ABC*")
@click.option("--start", "-s", help="First member name to return")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def list_all_members(data_set_name: str, attributes: bool, as_json: bool, **kwargs: Any):
    """List the members of a PDS."""
    session = get_session(kwargs)
    response = List.all_members(session, data_set_name, attributes=attributes, **kwargs)
    items = (response.api_response or {}).get("items", [])
    if as_json:
        emit_json(response.api_response)
    elif attributes:
        _print_items(items, ("member", "vers", "mod", "c4date", "m4date", "user"), "Members")
    else:
        for item in items:
            click.echo(item.get("member"))


@list_group.command(name="uss-files")
@click.argument("path")
@click.option("--max-length", "--max", "max_length", type=int, help="Maximum number of entries")
@click.option("--name", help="File name filter, wildcards allowed")
@click.option("--group", help="Owning group filter")
@click.option("--owner", "user", help="Owning user filter")
@click.option("--mtime", help="Modification time filter in days, e.g. +7")
@click.option("--size", help="Size filter, e.g. +1M")
@click.option("--perm", help="Permission bits filter, e.g. 755")
@click.option("--type", "type", type=click.Choice(["c", "d", "f", "l", "p", "s"]), help="File type filter")
@click.option("--depth", type=int, help="Directory levels to descend")
@click.option("--filesys/--no-filesys", default=None, help="Descend into other file systems")
@click.option("--symlinks/--no-symlinks", default=None, help="Report symbolic links instead of following them")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def list_uss_files(path: str, as_json: bool, **kwargs: Any):
    """List the files in a USS directory."""
    session = get_session(kwargs)
    response = List.file_list(session, path, **kwargs)
    if as_json:
        emit_json(response.api_response)
        return
    items = (response.api_response or {}).get("items", [])
    _print_items(items, ("name", "mode", "size", "user", "group", "mtime"), path)


@list_group.command(name="file-system")
@click.option("--fsname", "-f", help="File system name pattern")
@click.option("--path", "path", help="List the file system containing this path")
@click.option("--max-length", "--max", "max_length", type=int, help="Maximum number of file systems")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def list_file_systems(fsname: str | None, path: str | None, as_json: bool, **kwargs: Any):
    """List mounted z/OS file systems."""
    if fsname and path:
        raise click.UsageError("--fsname and --path are mutually exclusive")
    session = get_session(kwargs)
    response = List.fs(session, fsname=fsname, path=path, **kwargs)
    if as_json:
        emit_json(response.api_response)
        return
    items = (response.api_response or {}).get("items", [])
    _print_items(items, ("name", "mountpoint", "fstname", "status", "mode"), "File systems")


# -- delete --------------------------------------------------------------


@files_group.group(name="delete")
def delete_group():
    """Delete data sets, VSAM clusters, USS files and file systems."""
    pass


def _require_for_sure(for_sure: bool) -> None:
    if not for_sure:
        raise ValidationError("Deletion is permanent. Pass --for-sure to confirm.")


_for_sure_option = click.option("--for-sure", "-f", is_flag=True, help="Confirm the deletion")


@delete_group.command(name="data-set")
@click.argument("data_set_name")
@click.option("--volume-serial", "--vs", "volume", help="Volume of an uncataloged data set")
@_for_sure_option
@response_timeout_option
@json_option
@connection_options
@handle_errors
def delete_data_set(data_set_name: str, for_sure: bool, as_json: bool, **kwargs: Any):
    """Delete a data set or member."""
    _require_for_sure(for_sure)
    session = get_session(kwargs)
    _print_response(Delete.data_set(session, data_set_name, **kwargs), as_json)


@delete_group.command(name="data-set-vsam")
@click.argument("data_set_name")
@click.option("--erase", "-e", is_flag=True, help="Overwrite the data component with zeros")
@click.option("--purge", is_flag=True, help="Ignore the retention period")
@_for_sure_option
@response_timeout_option
@json_option
@connection_options
@handle_errors
def delete_vsam(data_set_name: str, for_sure: bool, as_json: bool, **kwargs: Any):
    """Delete a VSAM cluster with IDCAMS."""
    _require_for_sure(for_sure)
    session = get_session(kwargs)
    _print_response(Delete.vsam(session, data_set_name, **kwargs), as_json)


@delete_group.command(name="uss-file")
@click.argument("file_name")
@click.option("--recursive", "-r", is_flag=True, help="Delete a directory and its contents")
@_for_sure_option
@response_timeout_option
@json_option
@connection_options
@handle_errors
def delete_uss_file(file_name: str, for_sure: bool, as_json: bool, **kwargs: Any):
    """Delete a USS file or directory."""
    _require_for_sure(for_sure)
    session = get_session(kwargs)
    _print_response(Delete.uss_file(session, file_name, **kwargs), as_json)


@delete_group.command(name="zos-file-system")
@click.argument("file_system_name")
@_for_sure_option
@response_timeout_option
@json_option
@connection_options
@handle_errors
def delete_zfs(file_system_name: str, for_sure: bool, as_json: bool, **kwargs: Any):
    """Delete a z/OS file system."""
    _require_for_sure(for_sure)
    session = get_session(kwargs)
    _print_response(Delete.zfs(session, file_system_name, **kwargs), as_json)


# -- search --------------------------------------------------------------


@files_group.group(name="search")
def search_group():
    """Search the contents of data sets."""
    pass


@search_group.command(name="data-sets")
@click.argument("pattern")
@click.argument("search_string")
@click.option("--case-sensitive", "--cs", is_flag=True, help="Match the case of SEARCH_STRING")
@click.option(
    "--mainframe-search",
    "--ms",
    is_flag=True,
    help="Let z/OSMF find the candidates first, then read only those",
)
@click.option("--max-concurrent-requests", "--mcr", type=click.IntRange(min=0), default=1, show_default=True,
              help="Reads in flight at once; 0 for no limit")
@click.option("--timeout", "-t", type=click.IntRange(min=1), help="Seconds before unsearched items are given up")
@click.option("--encoding", "--ec", help="Code page of the data sets")
@json_option
@connection_options
@handle_errors
def search_data_sets(
    pattern: str,
    search_string: str,
    case_sensitive: bool,
    mainframe_search: bool,
    max_concurrent_requests: int,
    timeout: int | None,
    encoding: str | None,
    as_json: bool,
    **kwargs: Any,
):
    """Search data sets and PDS members matching PATTERN for SEARCH_STRING.

    \b
    EXAMPLES:
        $ zosctl zos-files search data-sets "IBMUSER.*" "PROC"
        $ zosctl zos-files search data-sets "IBMUSER.SRC" "Main" --case-sensitive --mcr 4
    """
    session = get_session(kwargs)
    response = Search.data_sets(
        session,
        pattern,
        search_string,
        case_sensitive=case_sensitive,
        mainframe_search=mainframe_search,
        max_concurrent_requests=max_concurrent_requests,
        timeout=timeout,
        encoding=encoding,
    )
    if as_json:
        emit_json(
            {
                "success": response.success,
                "commandResponse": response.command_response,
                "apiResponse": response.api_response,
                "errorMessage": response.error_message,
            }
        )
    else:
        click.echo(response.command_response, nl=False)
        if response.error_message:
            click.echo(response.error_message, err=True)
    if not response.success:
        sys.exit(1)


# -- invoke --------------------------------------------------------------


@files_group.group(name="invoke")
def invoke_group():
    """Run IDCAMS access method services statements."""
    pass


@invoke_group.command(name="ams-statements")
@click.argument("statements")
@response_timeout_option
@json_option
@connection_options
@handle_errors
def invoke_ams_statements(statements: str, response_timeout: int | None, as_json: bool, **kwargs: Any):
    """Run IDCAMS statements given on the command line."""
    session = get_session(kwargs)
    response = Invoke.ams_statements(session, [statements], response_timeout)
    _print_ams(response, as_json)


@invoke_group.command(name="ams-file")
@click.argument("control_file", type=click.Path(exists=True, dir_okay=False))
@response_timeout_option
@json_option
@connection_options
@handle_errors
def invoke_ams_file(control_file: str, response_timeout: int | None, as_json: bool, **kwargs: Any):
    """Run the IDCAMS statements in a local file."""
    session = get_session(kwargs)
    response = Invoke.ams_file(session, control_file, response_timeout)
    _print_ams(response, as_json)


def _print_ams(response: ZosFilesResponse, as_json: bool) -> None:
    if as_json:
        emit_json(response.api_response)
        return
    output = (response.api_response or {}).get("output", [])
    for line in output:
        click.echo(line)
    click.echo(response.command_response)
