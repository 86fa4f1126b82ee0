# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the wipeout command-line tool.

This package reclaims disk space occupied by workspaces on (possibly remote,
possibly transient) execution nodes. A workspace is detached by renaming it
out of the way and the renamed directory is handed over to a durable disposal
queue, which keeps retrying its deletion until it is gone or its node no
longer exists. All wipeout CLI commands delegate to the functionality
implemented here.
"""

from .wipeout import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "core",
    "discard",
    "disposal",
    "nodes",
    "pending",
    "process",
    "wipe",
]
