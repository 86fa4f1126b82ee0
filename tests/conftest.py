# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import timedelta
from unittest.mock import patch

import pytest

from wipeout_lib.disposal.queue import DisposalQueue
from wipeout_lib.nodes.registry import NodeRegistry
from wipeout_lib.runtime import Runtime


@pytest.fixture(autouse=True)
def reset_runtime():
    """Make sure that no runtime leaks between tests."""
    Runtime.shutdown()
    yield
    Runtime.shutdown()


@pytest.fixture
def queue(tmp_path):
    return DisposalQueue(
        tmp_path / "state" / "disposals.yaml",
        initial_backoff=timedelta(seconds=10),
        max_backoff=timedelta(seconds=100),
        lease=timedelta(seconds=60),
        workers=2,
    )


@pytest.fixture
def registry():
    # agent-1 is reached without SSH
    return NodeRegistry({"agent-1": "localhost"})


@pytest.fixture
def runtime(registry, queue):
    return Runtime.initialize(registry, queue)


@pytest.fixture
def configured_session(registry, queue):
    """Make command line sessions use the test registry and queue."""
    with (
        patch("wipeout_lib.session.NodeRegistry.fromConfig", return_value=registry),
        patch("wipeout_lib.session.DisposalQueue.fromConfig", return_value=queue),
    ):
        yield registry, queue
