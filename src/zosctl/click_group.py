"""Click group that answers a malformed command line with the relevant help.

A bad option or missing argument prints the error and the help of the
innermost command click had reached, then exits with click's usage status
(2). An unknown command name prints the group's help and exits 1.
"""

import sys
from typing import Any, NoReturn

import click


def _fail_with_help(error: click.UsageError, help_ctx: click.Context | None, exit_code: int) -> NoReturn:
    click.echo(f"Error: {error.format_message()}", err=True)
    if help_ctx is None:
        sys.exit(exit_code)
    click.echo("")
    click.echo(help_ctx.get_help())
    help_ctx.exit(exit_code)


class ZosctlGroup(click.Group):
    def main(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return super().main(*args, **kwargs)
        except click.UsageError as e:
            _fail_with_help(e, e.ctx, e.exit_code)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            _fail_with_help(e, e.ctx or ctx, e.exit_code)

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            # Parameter errors are reported by invoke() with the subcommand's help
            if isinstance(e, click.BadParameter):
                raise
            _fail_with_help(e, ctx, 1)


# Subgroups created with @group.group() inherit ZosctlGroup
ZosctlGroup.group_class = ZosctlGroup
