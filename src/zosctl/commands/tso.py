"""zos-tso CLI commands."""

import logging
from typing import Any

import click

from zosctl.click_group import ZosctlGroup
from zosctl.commands.connection import (
    connection_options,
    emit_json,
    get_session,
    handle_errors,
    json_option,
)
from zosctl.errors import ZosError
from zosctl.tso import IssueTso, PingTso, SendTso, StartTso, StartTsoParms, StopTso

logger = logging.getLogger(__name__)

_START_OPTIONS = (
    click.option("--account", "-a", envvar="ZOSCTL_TSO_ACCOUNT", required=True,
                 help="TSO account number (ZOSCTL_TSO_ACCOUNT)"),
    click.option("--logon-procedure", "--lp", help="Logon procedure (default IZUFPROC)"),
    click.option("--character-set", "--cs", help="Character set (default 697)"),
    click.option("--code-page", "--cp", help="Code page (default 1047)"),
    click.option("--rows", type=str, help="Screen rows (default 204)"),
    click.option("--columns", "--cols", "columns", type=str, help="Screen columns (default 160)"),
    click.option("--region-size", "--rs", help="Region size in KB (default 4096)"),
)


def _start_options(func):
    for option in reversed(_START_OPTIONS):
        func = option(func)
    return func


def _start_parms(kwargs: dict[str, Any]) -> StartTsoParms:
    return StartTsoParms(
        logon_procedure=kwargs.pop("logon_procedure"),
        character_set=kwargs.pop("character_set"),
        code_page=kwargs.pop("code_page"),
        rows=kwargs.pop("rows"),
        columns=kwargs.pop("columns"),
        region_size=kwargs.pop("region_size"),
    )


@click.group(name="zos-tso", cls=ZosctlGroup)
def tso_group():
    """Run TSO/E commands and manage TSO address spaces.

    \b
    EXAMPLES:
        $ zosctl zos-tso issue command "LISTCAT" --account 1234
        $ zosctl zos-tso start address-space --account 1234
        $ zosctl zos-tso send address-space IBMUSER-123-aabc --data "TIME"
    """
    pass


@tso_group.group(name="issue")
def issue_group():
    """Issue TSO commands."""
    pass


@issue_group.command(name="command")
@click.argument("command")
@_start_options
@json_option
@connection_options
@handle_errors
def issue_command(command: str, account: str, as_json: bool, **kwargs: Any):
    """Start an address space, run COMMAND and stop the address space."""
    start_parms = _start_parms(kwargs)
    session = get_session(kwargs)
    response = IssueTso.issue_tso_command(session, account, command, start_parms)
    if as_json:
        emit_json(
            {
                "success": response.success,
                "startReady": response.start_ready,
                "commandResponse": response.command_response,
                "zosmfResponse": [r.to_dict() for r in response.zosmf_responses],
            }
        )
    else:
        click.echo(response.command_response)


@tso_group.group(name="start")
def start_group():
    """Start TSO address spaces."""
    pass


@start_group.command(name="address-space")
@_start_options
@json_option
@connection_options
@handle_errors
def start_address_space(account: str, as_json: bool, **kwargs: Any):
    """Start an address space and print its servlet key."""
    start_parms = _start_parms(kwargs)
    session = get_session(kwargs)
    response = StartTso.start(session, account, start_parms)
    if as_json:
        emit_json({"success": response.success, "servletKey": response.servlet_key, "messages": response.messages})
        return
    if not response.success:
        raise ZosError("TSO address space failed to start.", additional_details=response.failure_response)
    click.echo(response.messages)
    click.echo(f"TSO address space started. Servlet key: {response.servlet_key}")


@tso_group.group(name="send")
def send_group():
    """Send data to TSO address spaces."""
    pass


@send_group.command(name="address-space")
@click.argument("servlet_key")
@click.option("--data", required=True, help="Text to send, e.g. a TSO command")
@json_option
@connection_options
@handle_errors
def send_address_space(servlet_key: str, data: str, as_json: bool, **kwargs: Any):
    """Send data to an address space and print the response."""
    session = get_session(kwargs)
    response = SendTso.send_data_to_tso_collect(session, servlet_key, data)
    if as_json:
        emit_json({"success": response.success, "messages": response.messages})
    else:
        click.echo(response.messages)


@tso_group.group(name="ping")
def ping_group():
    """Check TSO address spaces."""
    pass


@ping_group.command(name="address-space")
@click.argument("servlet_key")
@connection_options
@handle_errors
def ping_address_space(servlet_key: str, **kwargs: Any):
    """Check that an address space is still running."""
    session = get_session(kwargs)
    PingTso.ping(session, servlet_key)
    click.echo(f"Address space {servlet_key} is active.")


@tso_group.group(name="stop")
def stop_group():
    """Stop TSO address spaces."""
    pass


@stop_group.command(name="address-space")
@click.argument("servlet_key")
@connection_options
@handle_errors
def stop_address_space(servlet_key: str, **kwargs: Any):
    """Stop an address space."""
    session = get_session(kwargs)
    StopTso.stop(session, servlet_key)
    click.echo(f"Address space {servlet_key} stopped.")
