"""Helpers shared by every command: connection options, sessions, output, errors.

Handlers compose these rather than inherit them:

    @files_group.command(name="delete")
    @connection_options
    @handle_errors
    def delete(name, **connection):
        session = get_session(connection)
        ...
"""

import functools
import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console

from zosctl.config_manager import ConfigManager, ProfileConfig
from zosctl.errors import ZosError
from zosctl.log_sanitizer import LogSanitizer
from zosctl.session import Session, TokenType, ZosmfSession

logger = logging.getLogger(__name__)

CONNECTION_KEYS = (
    "host",
    "port",
    "user",
    "password",
    "protocol",
    "base_path",
    "reject_unauthorized",
    "token_type",
    "token_value",
)

_CONNECTION_OPTIONS = (
    click.option("--profile", "profile", help="Profile from ~/.zosctl/config.toml (default profile if omitted)"),
    click.option("--host", "-H", help="z/OSMF host name (ZOSCTL_HOST)"),
    click.option("--port", "-P", type=int, help="z/OSMF port (ZOSCTL_PORT, default 443)"),
    click.option("--user", "-u", help="Mainframe user ID (ZOSCTL_USER)"),
    click.option("--password", "--pass", "-p", "password", help="Mainframe password (ZOSCTL_PASSWORD)"),
    click.option("--protocol", type=click.Choice(["http", "https"]), help="Protocol (default https)"),
    click.option("--base-path", help="Base path prepended to every resource, e.g. an API gateway route"),
    click.option(
        "--reject-unauthorized",
        "--ru",
        "reject_unauthorized",
        type=click.BOOL,
        help="Reject self-signed certificates (default true)",
    ),
    click.option("--token-type", type=click.Choice(TokenType.ALL), help="Type of the token in --token-value"),
    click.option("--token-value", help="Token to authenticate with instead of user and password"),
)


def connection_options(func: Callable) -> Callable:
    """Add the standard z/OSMF connection options to a command."""
    for option in reversed(_CONNECTION_OPTIONS):
        func = option(func)
    return func


def get_profile(connection: dict[str, Any]) -> ProfileConfig:
    """Resolve the connection options a command received into a profile.

    The options are removed from connection. Each property resolves as
    command line > ZOSCTL_* environment > profile > default.
    """
    profile_name = connection.pop("profile", None)
    values = {key: connection.pop(key, None) for key in CONNECTION_KEYS}
    return ConfigManager.resolve_profile(profile_name, **values)


def get_session(connection: dict[str, Any]) -> Session:
    """Build a Session from the connection options a command received."""
    return ZosmfSession.from_profile(get_profile(connection))


def print_error(error: ZosError, console: Console | None = None) -> None:
    console = console or Console(stderr=True)
    console.print(f"Error: {LogSanitizer.sanitize(error.msg)}", style="red", markup=False, highlight=False)
    if error.additional_details:
        console.print("")
        console.print(LogSanitizer.sanitize(error.additional_details), style="dim", markup=False, highlight=False)


def handle_errors(func: Callable) -> Callable:
    """Print a ZosError for the user and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ZosError as e:
            logger.debug(f"{func.__name__} failed", exc_info=True)
            print_error(e)
            sys.exit(1)

    return wrapper


def emit_json(data: Any) -> None:
    """Print data as JSON on stdout."""
    click.echo(json.dumps(data, indent=2, default=_json_default))


def _json_default(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "__dataclass_fields__"):
        return {name: getattr(value, name) for name in value.__dataclass_fields__}
    if isinstance(value, Exception):
        return str(value)
    return str(value)


json_option = click.option(
    "--json", "--rfj", "as_json", is_flag=True, help="Print the response as JSON"
)

response_timeout_option = click.option(
    "--response-timeout",
    "--rto",
    "response_timeout",
    type=click.IntRange(5, 600),
    help="Seconds z/OSMF may spend on the request before giving up (5-600)",
)
