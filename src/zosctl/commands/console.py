"""zos-console CLI commands."""

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
from zosctl.console import CollectCommand, CollectParms, IssueCommand, IssueParms

logger = logging.getLogger(__name__)


@click.group(name="zos-console", cls=ZosctlGroup)
def console_group():
    """Issue z/OS console commands and collect their responses.

    \b
    EXAMPLES:
        $ zosctl zos-console issue command "D IPLINFO"
        $ zosctl zos-console issue command "D T" --solicited-keyword TIME
        $ zosctl zos-console collect sync-responses C1046283
    """
    pass


@console_group.group(name="issue")
def issue_group():
    """Issue console commands."""
    pass


@issue_group.command(name="command")
@click.argument("command")
@click.option("--console-name", "--cn", help="EMCS console to use (default defcn)")
@click.option("--solicited-keyword", "--sk", help="Keep collecting until this keyword appears")
@click.option("--sysplex-system", "--ss", help="Sysplex member to route the command to")
@click.option("--wait-to-collect", "--wtc", type=click.FloatRange(min=0), help="Seconds before each follow-up collection")
@click.option("--follow-up-attempts", "--fua", type=click.IntRange(min=0), help="Empty follow-up collections tolerated")
@click.option("--return-first", "--rf", "return_first", is_flag=True, help="Return without collecting follow-up responses")
@click.option("--include-details", "--id", is_flag=True, help="Print the response key and URL")
@click.option("--key-only", "--ko", is_flag=True, help="Print only the response key")
@json_option
@connection_options
@handle_errors
def issue_command(
    command: str,
    console_name: str | None,
    solicited_keyword: str | None,
    sysplex_system: str | None,
    wait_to_collect: float | None,
    follow_up_attempts: int | None,
    return_first: bool,
    include_details: bool,
    key_only: bool,
    as_json: bool,
    **kwargs: Any,
):
    """Issue an MVS command on a console."""
    session = get_session(kwargs)
    parms = IssueParms(
        command=command,
        console_name=console_name,
        solicited_keyword=solicited_keyword,
        sysplex_system=sysplex_system,
        async_=return_first,
        wait_to_collect=wait_to_collect,
        follow_up_attempts=follow_up_attempts,
    )
    response = IssueCommand.issue(session, parms)
    if as_json:
        emit_json(response.to_dict())
        return
    if key_only:
        click.echo(response.last_response_key or "")
        return
    click.echo(response.command_response)
    if include_details:
        click.echo(f"Response key: {response.last_response_key}")
        click.echo(f"Response URL: {response.cmd_response_url}")
    if solicited_keyword and not response.keyword_detected:
        logger.warning(f"Solicited keyword '{solicited_keyword}' was not found in the response")


@console_group.group(name="collect")
def collect_group():
    """Collect console command responses."""
    pass


@collect_group.command(name="sync-responses")
@click.argument("response_key")
@click.option("--console-name", "--cn", help="EMCS console to use (default defcn)")
@click.option("--wait-to-collect", "--wtc", type=click.FloatRange(min=0), help="Seconds before each collection")
@click.option("--follow-up-attempts", "--fua", type=click.IntRange(min=0), help="Empty collections tolerated")
@json_option
@connection_options
@handle_errors
def collect_sync_responses(
    response_key: str,
    console_name: str | None,
    wait_to_collect: float | None,
    follow_up_attempts: int | None,
    as_json: bool,
    **kwargs: Any,
):
    """Collect the responses of a command issued earlier."""
    session = get_session(kwargs)
    parms = CollectParms(
        command_response_key=response_key,
        console_name=console_name,
        wait_to_collect=wait_to_collect,
        follow_up_attempts=follow_up_attempts,
    )
    response = CollectCommand.collect(session, parms)
    if as_json:
        emit_json(response.to_dict())
    else:
        click.echo(response.command_response)
