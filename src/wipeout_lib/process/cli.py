# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import signal
import sys
import threading
from typing import NoReturn

import click

from wipeout_lib.core.click_format import GNUHelpColorsCommand
from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import WipeoutError
from wipeout_lib.core.logger import get_logger
from wipeout_lib.disposal.disposable import DisposalState
from wipeout_lib.disposal.queue import DisposalQueue
from wipeout_lib.runtime import Runtime
from wipeout_lib.session import runtime_session

logger = get_logger(__name__)


@click.command(
    short_help="Execute pending disposals.",
    help=f"""Execute all pending disposals which are due.

With the `--loop` flag, `{CFG.binary_name} process` keeps running and executes the disposals
every {CFG.disposal.poll_interval} seconds until it is interrupted.

Disposals which fail or do not finish are retried later with increasing delays.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.option(
    "--loop",
    is_flag=True,
    help="Keep processing disposals until interrupted.",
)
def process(loop: bool = False) -> NoReturn:
    """
    Execute pending disposals.
    """
    try:
        with runtime_session() as runtime:
            if loop:
                _process_loop(runtime.queue)
            else:
                _process_once(runtime.queue)
        sys.exit(0)
    except WipeoutError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _process_once(queue: DisposalQueue) -> None:
    """
    Execute all due disposals and report the outcome.
    """
    executed = queue.processPending()
    if not executed:
        logger.info("No disposal is due.")
        return

    purged = sum(item.last_state == DisposalState.PURGED for item in executed)
    logger.info(
        f"Executed {len(executed)} disposal(s): {purged} purged, {len(executed) - purged} pending."
    )


def _process_loop(queue: DisposalQueue) -> None:
    """
    Execute due disposals periodically until SIGINT or SIGTERM is received.
    """
    stop_event = threading.Event()

    def _stop(signum, _frame):
        logger.info(f"Received signal {signum}. Stopping.")
        # interrupted disposals stay due without counting an attempt
        Runtime.beginShutdown()
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    queue.run(stop_event)
