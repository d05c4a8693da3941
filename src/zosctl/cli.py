"""Entry point of the zosctl command line."""

import logging

import click

from zosctl import __version__
from zosctl.click_group import ZosctlGroup
from zosctl.commands import (
    auth_group,
    config_group,
    console_group,
    files_group,
    jobs_group,
    tso_group,
    zosmf_group,
)
from zosctl.logging_config import setup_logging

logger = logging.getLogger(__name__)


@click.group(
    cls=ZosctlGroup,
    context_settings={"help_option_names": ["--help", "-h"]},
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress information")
@click.option("--debug", is_flag=True, help="Log HTTP requests and internal details")
@click.version_option(version=__version__)
def main(verbose: bool, debug: bool) -> None:
    """zosctl - work with z/OS through z/OSMF.

    \b
    COMMAND GROUPS:
        zos-files     Data sets, members, USS files and file systems
        zos-jobs      Submit, monitor, view, search and purge jobs
        zos-console   Issue MVS console commands
        zos-tso       Run TSO commands and manage address spaces
        zosmf         Server status, defined systems, password changes
        auth          Log in and out with z/OSMF tokens
        config        Connection profiles

    \b
    CONNECTION:
        Every command takes --host, --port, --user, --password and friends.
        Unset options come from ZOSCTL_* environment variables, then from
        the profile in ~/.zosctl/config.toml.

    \b
    EXAMPLES:
        $ zosctl config init --host mf.example.com --user IBMUSER
        $ zosctl zos-files list data-set "IBMUSER.*"
        $ zosctl zos-jobs submit data-set "IBMUSER.JCL(IEFBR14)" --wait-for-output
        $ zosctl zos-console issue command "D IPLINFO"
    """
    setup_logging(verbose=verbose, debug=debug)
    logger.debug(f"zosctl {__version__}")


main.add_command(files_group)
main.add_command(jobs_group)
main.add_command(console_group)
main.add_command(tso_group)
main.add_command(zosmf_group)
main.add_command(auth_group)
main.add_command(config_group)


if __name__ == "__main__":
    main()
