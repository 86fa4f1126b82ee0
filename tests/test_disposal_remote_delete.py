# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import MagicMock

import pytest

from wipeout_lib.core.error import RemoteCommandError, RemoteOperationError
from wipeout_lib.disposal.disposable import Disposable, DisposalState
from wipeout_lib.disposal.remote_delete import RemoteDeleteTask
from wipeout_lib.nodes.node import Node
from wipeout_lib.runtime import Runtime


@pytest.fixture
def handle():
    handle = MagicMock()
    handle.exists.return_value = False
    return handle


@pytest.fixture
def mocked_runtime(handle):
    node = MagicMock(spec=Node)
    node.createPath.return_value = handle
    registry = MagicMock()
    registry.resolveNode.return_value = node
    return Runtime.initialize(registry, MagicMock())


def test_remote_delete_pending_when_runtime_not_active():
    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    assert task.dispose() == DisposalState.PENDING


def test_remote_delete_pending_when_shutting_down(mocked_runtime, handle):
    Runtime.beginShutdown()

    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    assert task.dispose() == DisposalState.PENDING
    mocked_runtime.registry.resolveNode.assert_not_called()
    handle.deleteRecursive.assert_not_called()


def test_remote_delete_purged_when_node_removed(mocked_runtime, handle):
    mocked_runtime.registry.resolveNode.return_value = None
    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    assert task.dispose() == DisposalState.PURGED
    # idempotent
    assert task.dispose() == DisposalState.PURGED

    mocked_runtime.registry.resolveNode.assert_called_with("agent-1")
    handle.deleteRecursive.assert_not_called()
    handle.exists.assert_not_called()


def test_remote_delete_purged_when_path_gone(mocked_runtime, handle):
    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    assert task.dispose() == DisposalState.PURGED

    node = mocked_runtime.registry.resolveNode.return_value
    node.createPath.assert_called_once_with("/jobs/foo/workspace_wipeout_1")
    handle.deleteRecursive.assert_called_once()
    handle.exists.assert_called_once()


def test_remote_delete_pending_when_path_still_exists(mocked_runtime, handle):
    handle.exists.return_value = True
    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    assert task.dispose() == DisposalState.PENDING

    # the next attempt deletes again
    handle.exists.return_value = False
    assert task.dispose() == DisposalState.PURGED
    assert handle.deleteRecursive.call_count == 2


def test_remote_delete_resolves_node_on_every_attempt(mocked_runtime, handle):
    handle.exists.return_value = True
    task = RemoteDeleteTask("agent-1", "/jobs/foo/workspace_wipeout_1")

    task.dispose()
    task.dispose()

    assert mocked_runtime.registry.resolveNode.call_count == 2
    node = mocked_runtime.registry.resolveNode.return_value
    assert node.createPath.call_count == 2
    # the handle is not kept after the attempt
    assert task._handle is None


def test_remote_delete_unwraps_remote_failure(mocked_runtime, handle):
    cause = RemoteCommandError("rm: Permission denied.", "agent-1", 1)
    handle.deleteRecursive.side_effect = RemoteOperationError.wrap(
        "deleting agent-1:/jobs/foo", cause
    )
    task = RemoteDeleteTask("agent-1", "/jobs/foo")

    with pytest.raises(RemoteCommandError) as exc_info:
        task.dispose()

    assert exc_info.value is cause
    handle.exists.assert_not_called()


def test_remote_delete_propagates_other_io_errors(mocked_runtime, handle):
    error = PermissionError("Permission denied")
    handle.deleteRecursive.side_effect = error
    task = RemoteDeleteTask("agent-1", "/jobs/foo")

    with pytest.raises(PermissionError) as exc_info:
        task.dispose()

    assert exc_info.value is error


def test_remote_delete_keeps_wrapper_without_prefix(mocked_runtime, handle):
    error = OSError("local failure")
    error.__cause__ = ValueError("inner")
    handle.deleteRecursive.side_effect = error

    with pytest.raises(OSError) as exc_info:
        RemoteDeleteTask("agent-1", "/jobs/foo").dispose()

    assert exc_info.value is error


def test_remote_delete_deletes_local_directory(tmp_path, registry):
    Runtime.initialize(registry, MagicMock())
    detached = tmp_path / "workspace_wipeout_1"
    (detached / "nested").mkdir(parents=True)
    (detached / "nested" / "file.txt").write_text("data")

    task = RemoteDeleteTask("agent-1", str(detached))

    assert task.dispose() == DisposalState.PURGED
    assert not detached.exists()


@pytest.mark.parametrize(
    "node,expected",
    [
        ("agent-1", "Workspace agent-1:/jobs/foo"),
        ("", "Workspace controller:/jobs/foo"),
    ],
)
def test_remote_delete_display_name(node, expected):
    task = RemoteDeleteTask(node, "/jobs/foo")

    assert task.getDisplayName() == expected
    assert str(task) == expected


def test_remote_delete_dict_form():
    task = RemoteDeleteTask("agent-1", "/jobs/foo")

    data = task.toDict()
    assert data == {"kind": "remote_delete", "node": "agent-1", "path": "/jobs/foo"}

    restored = Disposable.fromDict(data)
    assert isinstance(restored, RemoteDeleteTask)
    assert restored == task
    assert restored.getNode() == "agent-1"
    assert restored.getPath() == "/jobs/foo"
