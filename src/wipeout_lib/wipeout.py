# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click
from click_help_colors import HelpColorsGroup

from wipeout_lib.discard.cli import discard
from wipeout_lib.pending.cli import pending
from wipeout_lib.process.cli import process
from wipeout_lib.wipe.cli import wipe

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=HelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of wipeout and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any wipeout command.

    wipeout reclaims disk space occupied by workspaces on execution nodes.
    Workspaces are moved out of the way immediately and deleted in the background,
    surviving restarts and temporary unavailability of the nodes.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(wipe)
cli.add_command(process)
cli.add_command(pending)
cli.add_command(discard)
