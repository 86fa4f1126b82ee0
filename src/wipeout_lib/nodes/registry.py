# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import threading
from typing import Self

from wipeout_lib.core.config import CFG
from wipeout_lib.core.logger import get_logger

from .node import Node

logger = get_logger(__name__)


class NodeRegistry:
    """
    Mapping of node names to the nodes currently known to wipeout.

    The controller (empty node name) is always known.
    A node missing from the registry is considered to be gone for good.
    """

    def __init__(self, nodes: dict[str, str] | None = None):
        """
        Args:
            nodes (dict[str, str] | None): Mapping of node names to host names.
        """
        self._lock = threading.Lock()
        self._nodes: dict[str, Node] = {"": Node("", "")}
        for name, host in (nodes or {}).items():
            self.addNode(Node(name, host))

    @classmethod
    def fromConfig(cls) -> Self:
        """Create a registry containing the nodes defined in the wipeout config."""
        return cls(CFG.registry.nodes)

    def addNode(self, node: Node) -> None:
        """Register `node`, replacing any node of the same name."""
        with self._lock:
            self._nodes[node.getName()] = node
        logger.debug(f"Registered {node!r}.")

    def removeNode(self, name: str) -> None:
        """
        Remove the node named `name` from the registry.

        The controller cannot be removed.
        """
        if not name:
            raise ValueError("The controller cannot be removed from the node registry.")

        with self._lock:
            self._nodes.pop(name, None)
        logger.debug(f"Removed node '{name}'.")

    def resolveNode(self, name: str) -> Node | None:
        """
        Return the node named `name` or None if there is no such node.
        """
        with self._lock:
            return self._nodes.get(name)

    # alias
    getNode = resolveNode

    def getNodes(self) -> list[Node]:
        """Return all registered nodes, controller first."""
        with self._lock:
            return list(self._nodes.values())
