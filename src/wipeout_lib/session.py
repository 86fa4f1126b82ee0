# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Iterator
from contextlib import contextmanager

from wipeout_lib.disposal.queue import DisposalQueue
from wipeout_lib.nodes.registry import NodeRegistry
from wipeout_lib.runtime import Runtime


@contextmanager
def runtime_session(
    registry: NodeRegistry | None = None, queue: DisposalQueue | None = None
) -> Iterator[Runtime]:
    """
    Initialize the runtime for the duration of a wipeout command.

    The node registry and the disposal queue are created from the wipeout config
    unless provided. The runtime is shut down on exit, even if the command fails.
    """
    runtime = Runtime.initialize(
        NodeRegistry.fromConfig() if registry is None else registry,
        DisposalQueue.fromConfig() if queue is None else queue,
    )
    try:
        yield runtime
    finally:
        Runtime.beginShutdown()
        Runtime.shutdown()
