# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from pathlib import Path
from typing import NoReturn

import click

from wipeout_lib.core.click_format import GNUHelpColorsCommand
from wipeout_lib.core.common import yes_or_no_prompt
from wipeout_lib.core.config import CFG
from wipeout_lib.core.error import WipeoutError, WipeoutNotSuitableError
from wipeout_lib.core.error_handlers import (
    handle_general_error,
    handle_not_suitable_error,
)
from wipeout_lib.core.logger import get_logger
from wipeout_lib.core.repeater import Repeater
from wipeout_lib.nodes.path import RemotePath
from wipeout_lib.runtime import Runtime
from wipeout_lib.session import runtime_session
from wipeout_lib.wipe.detacher import WorkspaceDetacher

logger = get_logger(__name__)


@click.command(
    short_help="Wipe out workspaces.",
    help=f"""Wipe out the specified workspaces.

{click.style("WORKSPACE", fg="green")}   Path to the workspace directory on the node. One or more.

Each workspace is renamed out of the way and deleted in the background by `{CFG.binary_name} process`.
The original path is free for reuse as soon as `{CFG.binary_name} wipe` finishes.

If the workspace cannot be renamed or its node is not known, the workspace is deleted synchronously.

By default, `{CFG.binary_name} wipe` prompts for confirmation before wiping out each workspace.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "workspaces",
    type=str,
    nargs=-1,
    required=True,
    metavar=click.style("WORKSPACE", fg="green"),
)
@click.option(
    "-n",
    "--node",
    type=str,
    default="",
    help="Name of the node owning the workspaces. Defaults to the controller.",
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    help="Wipe out the workspaces without confirmation.",
)
def wipe(workspaces: tuple[str, ...], node: str = "", yes: bool = False) -> NoReturn:
    """
    Wipe out the specified workspaces located on the specified node.
    """
    try:
        with runtime_session():
            repeater = Repeater(list(workspaces), _wipe_workspace, node, yes)
            repeater.onException(WipeoutNotSuitableError, handle_not_suitable_error)
            repeater.onException(WipeoutError, handle_general_error)
            repeater.onException(OSError, handle_general_error)
            repeater.run()
        print()
        sys.exit(0)
    # errors of individual workspaces should be caught by Repeater
    except WipeoutError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def _wipe_workspace(path: str, node_name: str, yes: bool) -> None:
    """
    Wipe out a single workspace.

    Args:
        path (str): Path to the workspace on the node.
        node_name (str): Name of the node owning the workspace.
        yes (bool): Whether to skip confirmation.

    Raises:
        WipeoutNotSuitableError: If the workspace cannot be wiped out.
        WipeoutError: If the node is unknown or the disposal cannot be registered.
        OSError: If the synchronous deletion of the workspace fails.
    """
    workspace = _get_workspace(path, node_name)

    if not (yes or yes_or_no_prompt(f"Do you want to wipe out '{workspace}'?")):
        logger.info("Operation aborted.")
        return

    WorkspaceDetacher().perform(workspace)
    logger.info(f"Wiped out the workspace '{workspace}'.")


def _get_workspace(path: str, node_name: str) -> RemotePath:
    """
    Construct a handle of the workspace and make sure it may be wiped out.

    Raises:
        WipeoutNotSuitableError: If the workspace does not exist or is a root of the filesystem.
        WipeoutError: If the node is unknown.
    """
    runtime = Runtime.get()
    node = runtime.registry.resolveNode(node_name) if runtime else None
    if node is None:
        raise WipeoutError(f"Node '{node_name}' is not known.")

    directory = Path(path)
    if node.isLocal():
        directory = directory.expanduser().resolve()
    elif not directory.is_absolute():
        raise WipeoutNotSuitableError(
            f"Path to a workspace on a remote node must be absolute: '{path}'."
        )

    if directory == Path(directory.anchor):
        raise WipeoutNotSuitableError(
            f"Refusing to wipe out the root directory '{directory}'."
        )

    workspace = node.createPath(directory)
    if not workspace.exists():
        raise WipeoutNotSuitableError(f"Workspace '{workspace}' does not exist.")

    return workspace
