# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Process-wide state of wipeout.

The `Runtime` holds the node registry and the disposal queue used by the
current process. It must be explicitly initialized at startup and shut down
before exit. Code running while no runtime is active (not initialized yet,
or shutting down) must defer its work instead of failing.
"""

import threading
from typing import TYPE_CHECKING, Self

from wipeout_lib.core.error import WipeoutError
from wipeout_lib.core.logger import get_logger

if TYPE_CHECKING:
    from wipeout_lib.disposal.queue import DisposalQueue
    from wipeout_lib.nodes.registry import NodeRegistry

logger = get_logger(__name__)


class Runtime:
    """
    Process-wide holder of the node registry and the disposal queue.
    """

    _lock = threading.Lock()
    _instance: "Runtime | None" = None
    _shutting_down = False

    def __init__(self, registry: "NodeRegistry", queue: "DisposalQueue"):
        self.registry = registry
        self.queue = queue

    @classmethod
    def initialize(cls, registry: "NodeRegistry", queue: "DisposalQueue") -> Self:
        """
        Create and activate the runtime of this process.

        Raises:
            WipeoutError: If a runtime is already active.
        """
        with cls._lock:
            if cls._instance is not None and not cls._shutting_down:
                raise WipeoutError("Runtime of wipeout has already been initialized.")

            instance = cls(registry, queue)
            cls._instance = instance
            cls._shutting_down = False

        logger.debug("Runtime initialized.")
        return instance

    @classmethod
    def get(cls) -> Self | None:
        """
        Return the active runtime or None if it is not initialized or shutting down.
        """
        with cls._lock:
            if cls._shutting_down:
                return None
            return cls._instance

    @classmethod
    def isShuttingDown(cls) -> bool:
        """Return True if the runtime is being shut down."""
        with cls._lock:
            return cls._shutting_down

    @classmethod
    def beginShutdown(cls) -> None:
        """
        Signal that the process is going down.

        From now on, `get` returns None while the runtime is still held,
        so that operations in flight can finish without starting new work.
        """
        with cls._lock:
            if cls._instance is not None:
                cls._shutting_down = True

        logger.debug("Runtime is shutting down.")

    @classmethod
    def shutdown(cls) -> None:
        """
        Deactivate the runtime. A new runtime may be initialized afterwards.
        """
        with cls._lock:
            cls._instance = None
            cls._shutting_down = False

        logger.debug("Runtime shut down.")
