# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


from wipeout_lib.core.common import wipeout_timestamp
from wipeout_lib.core.config import CFG
from wipeout_lib.core.logger import get_logger
from wipeout_lib.disposal.remote_delete import RemoteDeleteTask
from wipeout_lib.nodes.path import RemotePath
from wipeout_lib.runtime import Runtime

logger = get_logger(__name__)


class WorkspaceDetacher:
    """
    Wipe out a workspace completely.

    The workspace is renamed out of the way, so that a new one can be created
    in its place right away, and the renamed directory is handed over to the
    disposal queue which deletes it asynchronously.
    """

    def perform(self, workspace: RemotePath) -> None:
        """
        Detach the workspace and register it for asynchronous deletion.

        Returns once the workspace no longer exists at its original path.
        The workspace is deleted synchronously if its node is no longer known
        (or no runtime is active) or if it could not be renamed.

        Args:
            workspace (RemotePath): The workspace to wipe out.

        Raises:
            OSError: If the synchronous deletion fails.
            WipeoutError: If the disposal queue cannot be written.
        """
        delete_me = self.getWipeoutWorkspace(workspace)

        runtime = Runtime.get()
        node = (
            runtime.registry.resolveNode(workspace.getNodeName()) if runtime else None
        )
        if runtime is None or node is None:
            logger.debug(
                f"Node of '{workspace}' is not available. Deleting the workspace synchronously."
            )
            workspace.deleteRecursive()
            return

        try:
            workspace.renameTo(delete_me)
            renamed = delete_me.exists()
        except OSError as e:
            logger.debug(f"Renaming '{workspace}' failed: {e}")
            renamed = False

        if not renamed:
            logger.warning(
                f"Cleaning workspace synchronously. Failed to rename '{workspace.getRemote()}' to '{delete_me.getName()}'."
            )
            workspace.deleteRecursive()
            return

        task = RemoteDeleteTask(node.getName(), delete_me.getRemote())
        item = runtime.queue.dispose(task)
        logger.info(f"Registered '{task.getDisplayName()}' for deletion as '{item.id}'.")

    def getWipeoutWorkspace(self, workspace: RemotePath) -> RemotePath:
        """
        Return the path to which the workspace is moved before its deletion.
        """
        return workspace.withSuffix(
            f"{CFG.wipeout.suffix_marker}{wipeout_timestamp()}"
        )
