"""Command groups of the zosctl CLI, one module per group."""

from zosctl.commands.auth import auth_group
from zosctl.commands.config import config_group
from zosctl.commands.console import console_group
from zosctl.commands.files import files_group
from zosctl.commands.jobs import jobs_group
from zosctl.commands.tso import tso_group
from zosctl.commands.zosmf import zosmf_group

__all__ = [
    "auth_group",
    "config_group",
    "console_group",
    "files_group",
    "jobs_group",
    "tso_group",
    "zosmf_group",
]
