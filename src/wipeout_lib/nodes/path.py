# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from pathlib import Path
from typing import Any, Self

from wipeout_lib.core.error import RemoteOperationError
from wipeout_lib.core.logger import get_logger

from .channel import Channel

logger = get_logger(__name__)


class RemotePath:
    """
    Handle of a path located on a node, accessed through the node's channel.

    If the channel is remote, every failure of an operation is wrapped in
    `RemoteOperationError` with the original error set as its cause.
    Failures on local channels are propagated as they are.

    The handle is only valid as long as the channel is. It must not be stored
    across restarts; `(node name, path)` is its durable identity.
    """

    def __init__(self, channel: Channel, remote: str | Path, node_name: str = ""):
        """
        Args:
            channel (Channel): Channel used to reach the path.
            remote (str | Path): Absolute path on the node.
            node_name (str): Name of the node owning the path. Empty for the controller.
        """
        self._channel = channel
        self._remote = Path(remote)
        self._node_name = node_name

    def getRemote(self) -> str:
        """Return the path as seen by the node."""
        return str(self._remote)

    def getName(self) -> str:
        """Return the last component of the path."""
        return self._remote.name

    def getNodeName(self) -> str:
        """Return the name of the node owning the path."""
        return self._node_name

    def getChannel(self) -> Channel:
        """Return the channel used to reach the path."""
        return self._channel

    def withSuffix(self, suffix: str) -> Self:
        """
        Return a handle of a sibling path created by appending `suffix` to this path.
        """
        return type(self)(
            self._channel, f"{self._remote}{suffix}", self._node_name
        )

    def renameTo(self, dest: "RemotePath") -> None:
        """
        Move this path to `dest` on the same node.

        Note that some filesystems report a successful move without performing it.
        Callers should verify the result using `dest.exists()`.

        Raises:
            OSError: If the path could not be moved.
        """
        logger.debug(f"Moving '{self}' to '{dest.getRemote()}'.")
        self._act(
            f"moving {self} to {dest.getRemote()}",
            self._channel.rename,
            self._remote,
            Path(dest.getRemote()),
        )

    def deleteRecursive(self) -> None:
        """
        Delete this path together with its content. Does nothing if the path does not exist.

        Raises:
            OSError: If the path could not be deleted.
        """
        logger.debug(f"Deleting '{self}'.")
        self._act(f"deleting {self}", self._channel.deleteRecursive, self._remote)

    def exists(self) -> bool:
        """
        Check whether the path exists.

        Raises:
            OSError: If the existence of the path could not be determined.
        """
        return self._act(
            f"checking the existence of {self}", self._channel.exists, self._remote
        )

    def _act(self, description: str, func: Callable, *args: Any) -> Any:
        """
        Execute an operation of the channel, wrapping failures of remote channels.
        """
        if not self._channel.isRemote():
            return func(*args)

        try:
            return func(*args)
        except RemoteOperationError:
            raise
        except Exception as e:
            raise RemoteOperationError.wrap(description, e) from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemotePath):
            return NotImplemented
        return self._node_name == other._node_name and self._remote == other._remote

    def __hash__(self) -> int:
        return hash((self._node_name, self._remote))

    def __str__(self) -> str:
        return f"{self._node_name}:{self._remote}" if self._node_name else str(
            self._remote
        )

    def __repr__(self) -> str:
        return f"RemotePath(channel={self._channel!r}, remote={str(self._remote)!r}, node_name={self._node_name!r})"
