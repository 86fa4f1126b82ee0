# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import socket
from pathlib import Path

from .channel import Channel, LocalChannel, SSHChannel
from .path import RemotePath


class Node:
    """
    Execution node known to the node registry.

    The controller (the machine running wipeout) is represented by a node with an empty name.
    """

    # host names which are always reached without SSH
    _LOCAL_HOSTS = {"", "localhost", "127.0.0.1"}

    def __init__(self, name: str, host: str | None = None):
        """
        Args:
            name (str): Name of the node in the registry. Empty for the controller.
            host (str | None): Host name used to reach the node. Defaults to `name`.
        """
        self._name = name
        self._host = name if host is None else host

    def getName(self) -> str:
        """Return the name of the node."""
        return self._name

    def getHost(self) -> str:
        """Return the host name used to reach the node."""
        return self._host

    def isLocal(self) -> bool:
        """Return True if the node is the current host."""
        return self._host in Node._LOCAL_HOSTS or self._host == socket.gethostname()

    def getChannel(self) -> Channel:
        """
        Return a fresh channel to the node.

        Local nodes are accessed directly, other nodes through SSH.
        """
        if self.isLocal():
            return LocalChannel()
        return SSHChannel(self._host)

    def createPath(self, path: str | Path) -> RemotePath:
        """Return a handle of `path` located on this node."""
        return RemotePath(self.getChannel(), path, self._name)

    def __repr__(self) -> str:
        return f"Node(name={self._name!r}, host={self._host!r})"
