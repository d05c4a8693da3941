"""zosmf CLI commands: server status and defined systems."""

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
from zosctl.zosmf import ChangePassword, CheckStatus, ListDefinedSystems

SYSTEM_COLUMNS = ("systemNickName", "systemName", "sysplexName", "groupNames", "url")


@click.group(name="zosmf", cls=ZosctlGroup)
def zosmf_group():
    """Query the z/OSMF server."""
    pass


@zosmf_group.command(name="check-status")
@json_option
@connection_options
@handle_errors
def check_status(as_json: bool, **kwargs: Any):
    """Confirm z/OSMF is running and show its version and plug-ins."""
    session = get_session(kwargs)
    info = CheckStatus.get_zosmf_info(session)
    if as_json:
        emit_json(info)
        return
    click.echo(
        f"The user {session.user or '(token)'} successfully connected to z/OSMF on '{session.hostname}'."
    )
    click.echo(f"zosmf_version:   {info.get('zosmf_version', '')}")
    click.echo(f"zosmf_full_version: {info.get('zosmf_full_version', '')}")
    click.echo(f"zos_version:     {info.get('zos_version', '')}")
    click.echo(f"zosmf_hostname:  {info.get('zosmf_hostname', '')}")
    click.echo(f"zosmf_port:      {info.get('zosmf_port', '')}")
    plugins = info.get("plugins") or []
    if plugins:
        table = Table(title="Installed plug-ins", show_header=True, header_style="bold")
        table.add_column("Name", style="cyan")
        table.add_column("Version")
        table.add_column("Status")
        for plugin in plugins:
            table.add_row(
                str(plugin.get("pluginDefaultName", "")),
                str(plugin.get("pluginVersion", "")),
                str(plugin.get("pluginStatus", "")),
            )
        Console().print(table)


@zosmf_group.group(name="list")
def list_group():
    """List z/OSMF resources."""
    pass


@list_group.command(name="systems")
@json_option
@connection_options
@handle_errors
def list_systems(as_json: bool, **kwargs: Any):
    """List the systems defined to z/OSMF."""
    session = get_session(kwargs)
    systems = ListDefinedSystems.list_systems(session)
    if as_json:
        emit_json(systems)
        return
    click.echo(f"Number of retrieved system definitions: {systems.get('numRows', 0)}")
    table = Table(show_header=True, header_style="bold")
    for column in SYSTEM_COLUMNS:
        table.add_column(column)
    for item in systems.get("items", []):
        table.add_row(*(str(item.get(column, "")) for column in SYSTEM_COLUMNS))
    Console().print(table)


@zosmf_group.command(name="change-password")
@click.option("--user-id", "--uid", help="User to change (default: the connection user)")
@click.option("--old-password", "--op", prompt=True, hide_input=True, help="Current password")
@click.option(
    "--new-password",
    "--np",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="New password or passphrase",
)
@json_option
@connection_options
@handle_errors
def change_password(
    user_id: str | None, old_password: str, new_password: str, as_json: bool, **kwargs: Any
):
    """Change a z/OS password or passphrase."""
    session = get_session(kwargs)
    response = ChangePassword.zosmf_change_password(
        session, user_id or session.user, old_password, new_password
    )
    if as_json:
        emit_json(response)
    else:
        click.echo((response or {}).get("message") or "Password changed.")
