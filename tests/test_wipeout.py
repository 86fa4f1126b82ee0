# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from click.testing import CliRunner

from wipeout_lib.wipeout import __version__, cli


def test_cli_version():
    runner = CliRunner()

    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_cli_without_command_prints_help():
    runner = CliRunner()

    result = runner.invoke(cli, [])

    assert result.exit_code == 0
    for command in ("wipe", "process", "pending", "discard"):
        assert command in result.output


def test_cli_subcommand_help():
    runner = CliRunner()

    result = runner.invoke(cli, ["wipe", "--help"])

    assert result.exit_code == 0
    assert "Wipe out the specified workspaces." in result.output
