"""Auth command group for zosctl.

- login zosmf: exchange a user and password for a z/OSMF token
- logout zosmf: invalidate the stored token

Tokens are written to ~/.zosctl/tokens/<profile>.toml (0600), never to
config.toml. Later commands pick the token up when the same profile is used.
"""

import logging
from typing import Any

import click
from rich.console import Console

from zosctl.click_group import ZosctlGroup
from zosctl.commands.connection import (
    connection_options,
    emit_json,
    get_profile,
    handle_errors,
    json_option,
)
from zosctl.config_manager import ConfigManager
from zosctl.session import TokenType, ZosmfSession
from zosctl.zosmf import Login, Logout

logger = logging.getLogger(__name__)
console = Console()


@click.group(name="auth", cls=ZosctlGroup)
def auth_group():
    """Log in to and out of z/OSMF with tokens.

    \b
    EXAMPLES:
        # Log in and store a token for the default profile
        $ zosctl auth login zosmf --user IBMUSER

        # Print the token instead of storing it
        $ zosctl auth login zosmf --show-token

        # Log out of the lpar1 profile
        $ zosctl auth logout zosmf --profile lpar1
    """
    pass


@auth_group.group(name="login")
def login_group():
    """Obtain a token."""
    pass


@login_group.command(name="zosmf")
@click.option("--show-token", "--st", is_flag=True, help="Print the token and do not store it")
@json_option
@connection_options
@handle_errors
def login_zosmf(show_token: bool, as_json: bool, **kwargs: Any):
    """Log in to z/OSMF with a user and password and keep the returned token."""
    profile = get_profile(kwargs)
    if profile.user and not profile.password:
        profile.password = click.prompt("Password", hide_input=True)
    session = ZosmfSession.from_profile(profile)
    token_type, token_value = Login.login(session)

    if show_token:
        if as_json:
            emit_json({"tokenType": token_type, "tokenValue": token_value})
        else:
            console.print(f"Received a token of type = {token_type}.", highlight=False)
            click.echo(token_value)
        return

    path = ConfigManager.save_token(profile.name, token_type, token_value)
    logger.debug(f"Token stored in {path}")
    if as_json:
        emit_json({"tokenType": token_type, "profile": profile.name})
    else:
        console.print(
            f"[green]Login successful.[/green] The {token_type} token was stored for profile "
            f"[cyan]{profile.name}[/cyan]."
        )


@auth_group.group(name="logout")
def logout_group():
    """Invalidate a token."""
    pass


@logout_group.command(name="zosmf")
@connection_options
@handle_errors
def logout_zosmf(**kwargs: Any):
    """Log out of z/OSMF and delete the stored token."""
    profile = get_profile(kwargs)
    if not profile.token_value:
        console.print(f"[yellow]No token is stored for profile {profile.name}.[/yellow]")
        return
    if profile.token_type == TokenType.BEARER:
        ConfigManager.delete_token(profile.name)
        console.print("Bearer tokens cannot be invalidated by z/OSMF; the stored token was removed.")
        return
    Logout.zosmf_logout(ZosmfSession.from_profile(profile))
    ConfigManager.delete_token(profile.name)
    console.print(f"[green]Logout successful.[/green] The token for profile {profile.name} was removed.")
