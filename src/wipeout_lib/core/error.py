# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout wipeout.

This module defines the wipeout-specific exceptions: recoverable errors,
suitability errors, failures of commands executed on nodes, and the I/O
wrapper raised by handles of remote paths. The recoverable errors carry an
associated exit code used by wipeout commands to report failures consistently.
"""

from .config import CFG

# Every message of a `RemoteOperationError` starts with this prefix.
REMOTE_FAILURE_PREFIX = "remote file operation failed:"


class WipeoutError(Exception):
    """Common exception type for all recoverable wipeout errors."""

    exit_code = CFG.exit_codes.default


class WipeoutNotSuitableError(WipeoutError):
    """Raised when a workspace is unsuitable for wiping."""

    pass


class RemoteCommandError(WipeoutError):
    """Raised when a command executed on a node fails."""

    def __init__(self, message: str, host: str, returncode: int):
        super().__init__(message)
        self.host = host
        self.returncode = returncode


class NodeUnreachableError(RemoteCommandError):
    """Raised when a connection to a node cannot be established."""

    pass


class RemoteOperationError(OSError):
    """
    I/O error raised by a handle of a path located on a remote node.

    The message always starts with `REMOTE_FAILURE_PREFIX` and the error
    which caused the failure on the node is stored in `__cause__`.
    """

    @classmethod
    def wrap(cls, description: str, cause: BaseException) -> "RemoteOperationError":
        """
        Create a wrapper of `cause`.

        Args:
            description (str): Description of the failed operation.
            cause (BaseException): The underlying error.

        Returns:
            RemoteOperationError: The wrapper with `cause` set as its `__cause__`.
        """
        error = cls(f"{REMOTE_FAILURE_PREFIX} {description}: {cause}")
        error.__cause__ = cause
        return error
