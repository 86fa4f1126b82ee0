# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Asynchronous and durable disposal of resources.

This module defines the `Disposable` interface and the `DisposalState` reported
by every attempt to dispose of a resource, the `DisposalQueue` persisting
pending disposals and retrying them with backoff, and the `RemoteDeleteTask`
deleting a directory located on a (possibly remote) node.
"""

from .disposable import Disposable, DisposableMeta, DisposalState
from .queue import DisposalQueue, WorkItem
from .remote_delete import RemoteDeleteTask

__all__ = [
    "Disposable",
    "DisposableMeta",
    "DisposalQueue",
    "DisposalState",
    "RemoteDeleteTask",
    "WorkItem",
]
