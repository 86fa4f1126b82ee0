# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Access to execution nodes and their filesystems.

This module defines the `NodeRegistry` mapping node names to `Node` objects,
the `Channel` implementations executing filesystem operations on the
controller (`LocalChannel`) or on a remote node (`SSHChannel`), and the
`RemotePath` handle wrapping remote failures in `RemoteOperationError`.
"""

from .channel import Channel, LocalChannel, SSHChannel
from .node import Node
from .path import RemotePath
from .registry import NodeRegistry

__all__ = [
    "Channel",
    "LocalChannel",
    "Node",
    "NodeRegistry",
    "RemotePath",
    "SSHChannel",
]
