# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Small helpers shared by the wipeout modules.

YAML loading/dumping of the disposal queue, UTC timestamps of the queue
and of detached workspaces, human-readable durations for the pending disposals panel,
and the confirmation prompt of `wipeout wipe`.
"""

import time
from datetime import UTC, datetime, timedelta
from functools import lru_cache

import readchar
import yaml
from rich.console import Console
from rich.live import Live
from rich.text import Text

from .logger import get_logger

logger = get_logger(__name__)

# (suffix, length in seconds) from the largest unit
_DURATION_UNITS = (("w", 604800), ("d", 86400), ("h", 3600), ("m", 60), ("s", 1))


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the libyaml-based dumper if pyyaml was built with it, else the pure Python one."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]
    except ImportError:
        logger.debug("libyaml is not available. Using the pure Python YAML dumper.")
        from yaml import Dumper

    return Dumper


@lru_cache(maxsize=1)
def load_yaml_loader() -> type[yaml.SafeLoader]:
    """Return the libyaml-based safe loader if available, else the pure Python one."""
    try:
        from yaml import (
            CSafeLoader as SafeLoader,  # ty: ignore[possibly-missing-import]
        )
    except ImportError:
        logger.debug("libyaml is not available. Using the pure Python YAML loader.")
        from yaml import SafeLoader

    return SafeLoader


def wipeout_timestamp() -> int:
    """
    Return the current wall-clock time in milliseconds since the epoch.

    Used to give detached workspaces practically unique names.
    """
    return time.time_ns() // 1_000_000


def utc_now() -> datetime:
    """Current UTC timestamp."""
    return datetime.now(tz=UTC)


def to_utc(value: datetime) -> datetime:
    """
    Return `value` as a timezone-aware UTC datetime.

    Naive datetimes are considered to be in UTC already.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_duration(td: timedelta) -> str:
    """
    Format a duration as e.g. '1d 2h 3m 4s', leaving out units which are zero.

    Durations shorter than one second (including negative ones) are shown as '0s'.
    """
    remaining = max(int(td.total_seconds()), 0)
    if remaining == 0:
        return "0s"

    parts = []
    for suffix, length in _DURATION_UNITS:
        count, remaining = divmod(remaining, length)
        if count:
            parts.append(f"{count}{suffix}")

    return " ".join(parts)


def yes_or_no_prompt(prompt: str) -> bool:
    """
    Ask a yes/no question and wait for a single key press.

    Only 'y' (in any case) counts as yes. The answer is highlighted
    in place of the `[y/N]` hint once the key is pressed.

    Args:
        prompt (str): The question to display.

    Returns:
        bool: True if the user pressed 'y'.
    """
    question = Text("PROMPT", style="magenta") + Text(f"   {prompt} ", style="default")

    with Live(question + Text("[y/N]", style="bold default"), refresh_per_second=1) as live:
        answer = readchar.readkey().lower() == "y"

        if answer:
            hint = Text.assemble(
                ("[", "bold default"), ("y", "bold green"), ("/N]", "bold default")
            )
        else:
            hint = Text.assemble(
                ("[y/", "bold default"), ("N", "bold red"), ("]", "bold default")
            )
        live.update(question + hint)

    return answer


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Return `1/factor` of the terminal width, clamped to the optional bounds.
    """
    width = console.size.width // factor
    if min_width is not None:
        width = max(width, min_width)
    if max_width is not None:
        width = min(width, max_width)
    return width
