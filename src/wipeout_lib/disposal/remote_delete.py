# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from typing import Any, Self

from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import REMOTE_FAILURE_PREFIX
from wipeout_lib.core.logger import get_logger
from wipeout_lib.nodes.path import RemotePath
from wipeout_lib.runtime import Runtime

from .disposable import Disposable, DisposalState

logger = get_logger(__name__)


class RemoteDeleteTask(Disposable):
    """
    Deletion of a directory located on a (possibly remote) node.

    Only the name of the node and the path are durable. The handle of the path
    is resolved from the node registry at the start of every attempt and dropped
    at its end, since the connection to the node may be reestablished, or the
    node removed and added again, between two attempts.
    """

    kind = "remote_delete"

    def __init__(self, node: str, path: str):
        """
        Args:
            node (str): Name of the node owning the path. Empty for the controller.
            path (str): Absolute path to delete.
        """
        self._node = node
        self._path = path
        self._handle: RemotePath | None = None

    def getNode(self) -> str:
        return self._node

    def getPath(self) -> str:
        return self._path

    def dispose(self) -> DisposalState:
        runtime = Runtime.get()
        # going down?
        if runtime is None:
            return DisposalState.PENDING

        node = runtime.registry.resolveNode(self._node)
        # removed or discarded machine
        if node is None:
            logger.info(
                f"Node '{self._node}' no longer exists. Considering '{self._path}' purged."
            )
            return DisposalState.PURGED

        self._handle = node.createPath(self._path)
        try:
            return self._deleteAndVerify(self._handle)
        finally:
            self._handle = None

    def _deleteAndVerify(self, handle: RemotePath) -> DisposalState:
        """
        Delete the path and check that it no longer exists.

        Raises:
            BaseException: The error which caused a remote deletion to fail,
                or the original error if it was not a remote failure.
        """
        try:
            handle.deleteRecursive()
        except OSError as e:
            cause = e.__cause__
            if cause is not None and str(e).startswith(REMOTE_FAILURE_PREFIX):
                raise cause from None
            raise

        # failed to delete silently
        if handle.exists():
            logger.warning(f"'{handle}' still exists after deletion.")
            return DisposalState.PENDING

        return DisposalState.PURGED

    def getDisplayName(self) -> str:
        return f"Workspace {self._node or CFG.registry.controller_name}:{self._path}"

    def _toDict(self) -> dict[str, Any]:
        return {"node": self._node, "path": self._path}

    @classmethod
    def _fromDict(cls, data: dict[str, Any]) -> Self:
        return cls(str(data["node"]), str(data["path"]))

    def __repr__(self) -> str:
        return f"RemoteDeleteTask(node={self._node!r}, path={self._path!r})"
