# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Logging for wipeout commands and for the disposal loop.

All wipeout loggers write to stderr, so that `wipeout pending --yaml`
keeps a clean stdout.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return the logger of a wipeout module.

    Args:
        name (str): Name of the logger, usually `__name__` of the module.
        show_time (bool): Prefix every record with its time. Used by the
            disposal queue, whose loop runs unattended for long periods.

    Setting the environment variable named by `CFG.env_vars.debug_mode`
    lowers the level to DEBUG and turns on the timestamps for every logger.
    Repeated calls for the same name reuse the already attached handler.
    """
    logger = logging.getLogger(name)

    debug_mode = os.environ.get(CFG.env_vars.debug_mode) is not None
    level = logging.DEBUG if debug_mode else logging.INFO
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_level=True,
        show_time=show_time or debug_mode,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = False

    return logger
