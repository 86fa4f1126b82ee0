# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click

from wipeout_lib.core.click_format import GNUHelpColorsCommand
from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import WipeoutError
from wipeout_lib.core.error_handlers import handle_general_error
from wipeout_lib.core.logger import get_logger
from wipeout_lib.core.repeater import Repeater
from wipeout_lib.disposal.queue import DisposalQueue
from wipeout_lib.session import runtime_session

logger = get_logger(__name__)


@click.command(
    short_help="Discard pending disposals.",
    help=f"""Remove the specified disposals from the disposal queue without deleting anything.

{click.style("DISPOSAL_ID", fg="green")}   Identifier of the disposal as shown by `{CFG.binary_name} pending`. One or more.

The resources of discarded disposals are left in place and must be removed manually.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "ids",
    type=str,
    nargs=-1,
    required=True,
    metavar=click.style("DISPOSAL_ID", fg="green"),
)
def discard(ids: tuple[str, ...]) -> NoReturn:
    """
    Discard the specified pending disposals.
    """
    try:
        with runtime_session() as runtime:
            repeater = Repeater(list(ids), _discard_item, runtime.queue)
            repeater.onException(WipeoutError, handle_general_error)
            repeater.run()
        sys.exit(0)
    except WipeoutError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _discard_item(item_id: str, queue: DisposalQueue) -> None:
    """
    Remove a single item from the queue.

    Raises:
        WipeoutError: If there is no such item.
    """
    item = queue.discard(item_id)
    logger.info(f"Discarded '{item.disposable.getDisplayName()}'.")
