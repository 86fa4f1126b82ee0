# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import shlex
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import NodeUnreachableError, RemoteCommandError
from wipeout_lib.core.logger import get_logger

logger = get_logger(__name__)


class Channel(ABC):
    """
    Abstract base class for channels executing filesystem operations on a node.

    All methods operate on absolute paths as seen by the node.
    """

    @abstractmethod
    def getHost(self) -> str:
        """
        Return the name of the host this channel operates on.
        """
        pass

    @abstractmethod
    def isRemote(self) -> bool:
        """
        Return True if the operations are executed on another host.
        """
        pass

    @abstractmethod
    def rename(self, src: Path, dest: Path) -> None:
        """
        Move `src` to `dest`. `dest` must not exist.

        Raises:
            OSError | RemoteCommandError: If the rename fails.
        """
        pass

    @abstractmethod
    def deleteRecursive(self, path: Path) -> None:
        """
        Delete `path` together with its content. Missing paths are ignored.

        Raises:
            OSError | RemoteCommandError: If the path could not be deleted.
        """
        pass

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """
        Check whether `path` exists.

        Raises:
            OSError | RemoteCommandError: If the existence could not be determined.
        """
        pass


class LocalChannel(Channel):
    """
    Channel operating on the filesystem of the current host.
    """

    def getHost(self) -> str:
        return "localhost"

    def isRemote(self) -> bool:
        return False

    def rename(self, src: Path, dest: Path) -> None:
        if dest.exists():
            raise FileExistsError(f"Could not move '{src}': '{dest}' already exists.")
        os.rename(src, dest)

    def deleteRecursive(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()

    def exists(self, path: Path) -> bool:
        return path.exists()

    def __repr__(self) -> str:
        return "LocalChannel()"


class SSHChannel(Channel):
    """
    Channel executing filesystem operations on a remote host using SSH.

    Note that the timeout for the SSH connection is set to `CFG.timeouts.ssh` seconds.
    """

    # exit code of ssh if connection fails
    SSH_FAIL = 255

    def __init__(self, host: str):
        self._host = host

    def getHost(self) -> str:
        return self._host

    def isRemote(self) -> bool:
        return True

    def rename(self, src: Path, dest: Path) -> None:
        # -T: never move `src` into `dest` if `dest` is an existing directory
        self._run(
            f"test ! -e {shlex.quote(str(dest))} && "
            f"mv -T -- {shlex.quote(str(src))} {shlex.quote(str(dest))}",
            f"Could not move '{src}' to '{dest}'",
        )

    def deleteRecursive(self, path: Path) -> None:
        self._run(
            f"rm -rf -- {shlex.quote(str(path))}",
            f"Could not delete '{path}'",
        )

    def exists(self, path: Path) -> bool:
        result = self._run(
            f"test -e {shlex.quote(str(path))} || test -L {shlex.quote(str(path))}",
            f"Could not check the existence of '{path}'",
            allowed_codes=(1,),
        )
        return result.returncode == 0

    def _run(
        self, command: str, description: str, allowed_codes: tuple[int, ...] = ()
    ) -> subprocess.CompletedProcess:
        """
        Execute a shell command on the remote host.

        Args:
            command (str): The command to execute.
            description (str): Description of the operation used in error messages.
            allowed_codes (tuple[int, ...]): Non-zero exit codes which are not considered a failure.

        Returns:
            subprocess.CompletedProcess: The result of the command.

        Raises:
            NodeUnreachableError: If the connection to the host could not be established.
            RemoteCommandError: If the command failed.
        """
        ssh_command = [
            "ssh",
            "-o PasswordAuthentication=no",  # never ask for password
            f"-o ConnectTimeout={CFG.timeouts.ssh}",
            "-q",  # suppress some SSH messages
            self._host,
            command,
        ]
        logger.debug(f"Using ssh: '{' '.join(ssh_command)}'")
        result = subprocess.run(ssh_command, capture_output=True, text=True)

        if result.returncode == SSHChannel.SSH_FAIL:
            raise NodeUnreachableError(
                f"{description} on '{self._host}': Could not connect to host.",
                self._host,
                result.returncode,
            )

        if result.returncode != 0 and result.returncode not in allowed_codes:
            raise RemoteCommandError(
                f"{description} on '{self._host}': {result.stderr.strip()}.",
                self._host,
                result.returncode,
            )

        return result

    def __repr__(self) -> str:
        return f"SSHChannel(host={self._host!r})"
