# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Utilities for wiping out workspaces.

This module defines the `WorkspaceDetacher` class which moves a workspace
out of the way and registers the moved directory for asynchronous deletion,
falling back to a synchronous deletion when the workspace cannot be moved.
"""

from .detacher import WorkspaceDetacher

__all__ = [
    "WorkspaceDetacher",
]
