# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for wipeout.

This module defines dataclasses representing all configurable aspects of wipeout,
including environment variables, timeouts, the node registry, settings of
the disposal queue, presentation settings, and global defaults.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by wipeout."""

    # Enables wipeout debug mode.
    debug_mode: str = "WIPEOUT_DEBUG"
    # Path to the wipeout config file.
    config: str = "WIPEOUT_CONFIG"


@dataclass
class TimeoutSettings:
    """Timeout settings in seconds."""

    # Timeout for SSH in seconds.
    ssh: int = 60


@dataclass
class WipeoutSettings:
    """Settings for detaching workspaces."""

    # Marker placed between the workspace path and the timestamp of the wipeout.
    suffix_marker: str = "_wipeout_"


@dataclass
class RegistrySettings:
    """Settings of the node registry."""

    # Mapping of node names to host names.
    nodes: dict[str, str] = field(default_factory=dict)
    # Label used for the controller (node with an empty name).
    controller_name: str = "controller"


@dataclass
class DisposalSettings:
    """Settings for the disposal queue."""

    # Path to the file storing pending disposals.
    # If not set, `$XDG_STATE_HOME/wipeout/disposals.yaml` is used.
    queue_file: str | None = None
    # Wait time (in seconds) before the first retry of a failed disposal.
    initial_backoff: int = 60
    # Maximal wait time (in seconds) between two attempts.
    max_backoff: int = 3600
    # Time (in seconds) for which a disposal is reserved by the process executing it.
    lease: int = 900
    # Interval (in seconds) between successive passes over the queue in loop mode.
    poll_interval: int = 30
    # Number of threads used to execute disposals.
    workers: int = 4

    @property
    def queue_path(self) -> Path:
        """Resolved path to the queue file."""
        if self.queue_file:
            return Path(self.queue_file).expanduser()

        return (
            Path(os.getenv("XDG_STATE_HOME", Path.home() / ".local" / "state"))
            / "wipeout"
            / "disposals.yaml"
        )


@dataclass
class PendingPresenterSettings:
    """Settings for PendingPresenter."""

    # Maximal width of the pending disposals panel.
    max_width: int | None = None
    # Minimal width of the pending disposals panel.
    min_width: int | None = 80
    # Maximum displayed length of a problem before truncation.
    max_problem_length: int = 60
    # Style used for border lines.
    border_style: str = "white"
    # Style used for the title.
    title_style: str = "white bold"
    # Style used for table headers.
    headers_style: str = "default"
    # Style used for table values.
    main_style: str = "white"
    # Style used for problems of the disposals.
    problem_style: str = "bright_red"
    # Style used for disposals that are currently being executed.
    leased_style: str = "bright_blue"
    # Style used for extra notes.
    notes_style: str = "grey50"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by wipeout.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Default error code for failures of wipeout commands.
    default: int = 91
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class Config:
    """Main configuration for wipeout."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    timeouts: TimeoutSettings = field(default_factory=TimeoutSettings)
    wipeout: WipeoutSettings = field(default_factory=WipeoutSettings)
    registry: RegistrySettings = field(default_factory=RegistrySettings)
    disposal: DisposalSettings = field(default_factory=DisposalSettings)
    pending_presenter: PendingPresenterSettings = field(
        default_factory=PendingPresenterSettings
    )
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the wipeout binary.
    binary_name: str = "wipeout"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Build the configuration from a TOML file.

        Settings missing from the file keep their default values and unknown
        settings are ignored. Without a config file, all defaults are used.

        Args:
            config_path (Path | None): The config file to read. If None, the first
                file found by `_get_config_path` is used.

        Raises:
            ValueError: If the config file exists but cannot be read or parsed.
        """
        path = config_path or cls._get_config_path()
        if path is None or not path.exists():
            return cls()

        try:
            with path.open("rb") as f:
                return _dict_to_dataclass(cls, tomllib.load(f))
        except (OSError, tomllib.TOMLDecodeError, TypeError) as e:
            raise ValueError(f"Could not read wipeout config '{path}': {e}.") from e

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Return the config file with the highest priority, or None if there is none.

        Searched in this order: the file named by `$WIPEOUT_CONFIG`,
        `wipeout_config.toml` in the working directory, and
        `$XDG_CONFIG_HOME/wipeout/config.toml` (`~/.config` if unset).
        """
        xdg_config = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
        candidates = [
            os.getenv(EnvironmentVariables.config),
            Path.cwd() / "wipeout_config.toml",
            xdg_config / "wipeout" / "config.toml",
        ]

        return next(
            (Path(c) for c in candidates if c and Path(c).is_file()),
            None,
        )


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Instantiate the dataclass `cls` from a (possibly nested) dictionary.

    Tables of the TOML file map to nested dataclasses. Keys not matching any field are dropped.
    """
    if not is_dataclass(cls):
        return data

    values = {}
    for f in fields(cls):
        if f.name not in data:
            continue

        value = data[f.name]
        nested = is_dataclass(f.type) and isinstance(value, dict)
        values[f.name] = _dict_to_dataclass(f.type, value) if nested else value

    return cls(**values)


# Global configuration for wipeout.
CFG = Config.load()
