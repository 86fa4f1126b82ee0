# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys

from .config import CFG
from .error import WipeoutNotSuitableError
from .logger import get_logger
from .repeater import Repeater

logger = get_logger(__name__)


def handle_not_suitable_error(
    exception: BaseException,
    metadata: Repeater,
) -> None:
    """
    Handle cases where a workspace is unsuitable for wiping.
    """
    # if this is the only item, print exception as an error
    if len(metadata.items) == 1:
        logger.error(exception)
        print()
        sys.exit(CFG.exit_codes.default)

    # if this is one of many items, print exception as info
    if len(metadata.items) > 1:
        logger.info(exception)

    # if all workspaces were unsuitable
    if sum(
        isinstance(x, WipeoutNotSuitableError)
        for x in metadata.encountered_errors.values()
    ) == len(metadata.items):
        logger.error("No suitable workspace.\n")
        sys.exit(CFG.exit_codes.default)


def handle_general_error(
    exception: BaseException,
    metadata: Repeater,
) -> None:
    """
    Handle general errors that occur while processing one of the items.
    """
    logger.error(exception)

    # if the operation failed for all items
    if len(metadata.items) == len(metadata.encountered_errors):
        print()
        sys.exit(CFG.exit_codes.default)
