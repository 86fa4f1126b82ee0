# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from rich.console import Console

from wipeout_lib.core.click_format import GNUHelpColorsCommand
from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import WipeoutError
from wipeout_lib.core.logger import get_logger
from wipeout_lib.pending.presenter import PendingPresenter
from wipeout_lib.session import runtime_session

logger = get_logger(__name__)


@click.command(
    short_help="List pending disposals.",
    help=f"""List all disposals waiting in the disposal queue.

Each disposal is shown with its identifier, the number of failed attempts,
the time of the next attempt and the problem encountered during the last attempt.
Use the identifier with `{CFG.binary_name} discard` to remove a disposal from the queue.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "--yaml", is_flag=True, help="Output the pending disposals in YAML format."
)
def pending(yaml: bool = False) -> NoReturn:
    """
    List pending disposals.
    """
    try:
        with runtime_session() as runtime:
            presenter = PendingPresenter(runtime.queue.getItems())

        if yaml:
            presenter.dumpYaml()
        else:
            console = Console()
            console.print(presenter.createPendingPanel(console))
        sys.exit(0)
    except WipeoutError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
