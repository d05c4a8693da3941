"""Config command group for zosctl.

This module manages connection profiles in ~/.zosctl/config.toml:
- init: create or update a profile
- set: change one property of a profile
- list: list profiles
- show: show the resolved properties of a profile
- remove: delete a profile and its stored token
- use: make a profile the default

Security:
- Passwords and tokens are never written to config.toml
- Config file permissions enforced (0600)
"""

import logging
import os

import click
from rich.console import Console
from rich.table import Table

from zosctl.click_group import ZosctlGroup
from zosctl.commands.connection import emit_json, handle_errors, json_option
from zosctl.config_manager import ENV_PREFIX, PROFILE_KEYS, SECRET_KEYS, ConfigManager

logger = logging.getLogger(__name__)
console = Console()


@click.group(name="config", cls=ZosctlGroup)
def config_group():
    """Manage z/OSMF connection profiles.

    Command line options override ZOSCTL_* environment variables, which
    override the profile.

    \b
    EXAMPLES:
        # Create a profile (the first one becomes the default)
        $ zosctl config init --profile lpar1 --host mf.example.com --user IBMUSER

        # Accept a self-signed certificate
        $ zosctl config set reject_unauthorized false --profile lpar1

        # Show what a command would connect with
        $ zosctl config show
    """
    pass


@config_group.command(name="init")
@click.option("--profile", default="default", show_default=True, help="Profile name")
@click.option("--host", "-H", required=True, help="z/OSMF host name")
@click.option("--port", "-P", type=int, help="z/OSMF port (default 443)")
@click.option("--user", "-u", help="Mainframe user ID")
@click.option("--protocol", type=click.Choice(["http", "https"]), help="Protocol (default https)")
@click.option("--base-path", help="Base path prepended to every resource")
@click.option("--reject-unauthorized", "--ru", "reject_unauthorized", type=click.BOOL,
              help="Reject self-signed certificates (default true)")
@click.option("--default", "make_default", is_flag=True, help="Make this the default profile")
@handle_errors
def init(profile: str, make_default: bool, **values):
    """Create or update a profile."""
    values = {key: value for key, value in values.items() if value is not None}
    ConfigManager.set_profile_values(profile, **values)
    if make_default:
        ConfigManager.set_default_profile(profile)
    console.print(f"[green]Profile '{profile}' saved to {ConfigManager.get_config_path()}[/green]")


@config_group.command(name="set")
@click.argument("key", type=click.Choice(list(PROFILE_KEYS)))
@click.argument("value", required=False)
@click.option("--profile", help="Profile name (default profile if omitted)")
@handle_errors
def set_value(key: str, value: str | None, profile: str | None):
    """Set KEY to VALUE in a profile; omit VALUE to unset KEY."""
    name = profile or ConfigManager.get_profile().name
    ConfigManager.set_profile_values(name, **{key: value})
    if value is None:
        console.print(f"Unset {key} in profile '{name}'")
    else:
        console.print(f"Set {key} = {value} in profile '{name}'")


@config_group.command(name="list")
@json_option
@handle_errors
def list_profiles(as_json: bool):
    """List profiles. The default profile is marked with an asterisk (*)."""
    config = ConfigManager.load_config()
    if as_json:
        emit_json({"defaultProfile": config.default_profile, "profiles": config.profiles})
        return
    if not config.profiles:
        console.print("[yellow]No profiles configured.[/yellow]")
        console.print("\nCreate one with:")
        console.print("  zosctl config init --host <host> --user <user>")
        return

    table = Table(title="zosctl profiles")
    table.add_column("Default", style="cyan", width=8)
    table.add_column("Name", style="green")
    table.add_column("Host", style="blue")
    table.add_column("Port")
    table.add_column("User", style="yellow")
    table.add_column("Token")
    for name in sorted(config.profiles):
        values = config.profiles[name]
        table.add_row(
            "*" if name == config.default_profile else "",
            name,
            str(values.get("host", "-")),
            str(values.get("port", "-")),
            str(values.get("user", "-")),
            "stored" if ConfigManager.load_token(name) else "-",
        )
    console.print(table)


@config_group.command(name="show")
@click.option("--profile", help="Profile name (default profile if omitted)")
@json_option
@handle_errors
def show(profile: str | None, as_json: bool):
    """Show the resolved properties of a profile, secrets masked."""
    resolved = ConfigManager.resolve_profile(profile)
    data = resolved.to_dict()
    for key in SECRET_KEYS:
        if getattr(resolved, key):
            data[key] = "****"
    if as_json:
        emit_json({"profile": resolved.name, **data})
        return

    table = Table(title=f"Profile: {resolved.name}", show_header=True)
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")
    stored = ConfigManager.load_config().profiles.get(resolved.name, {})
    for key, value in data.items():
        if os.environ.get(f"{ENV_PREFIX}{key.upper()}"):
            source = f"{ENV_PREFIX}{key.upper()}"
        elif key in stored:
            source = "profile"
        elif key == "token_value" or (key == "token_type" and "token_type" not in stored):
            source = "token file"
        else:
            source = "default"
        table.add_row(key, str(value), source)
    console.print(table)


@config_group.command(name="remove")
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@handle_errors
def remove(name: str, force: bool):
    """Delete profile NAME and its stored token."""
    if not force and not click.confirm(f"Remove profile '{name}'?"):
        console.print("Cancelled.")
        return
    ConfigManager.remove_profile(name)
    console.print(f"[green]Profile '{name}' removed[/green]")


@config_group.command(name="use")
@click.argument("name")
@handle_errors
def use(name: str):
    """Make NAME the default profile."""
    ConfigManager.set_default_profile(name)
    console.print(f"Default profile set to '{name}'")
