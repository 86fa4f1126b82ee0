# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

import pytest

from wipeout_lib.core.config import (
    Config,
    DisposalSettings,
    RegistrySettings,
    TimeoutSettings,
    _dict_to_dataclass,
)


def test_dict_to_dataclass_fills_nested_settings():
    config = _dict_to_dataclass(
        Config,
        {"timeouts": {"ssh": 5}, "disposal": {"workers": 8, "lease": 60}},
    )

    assert config.timeouts == TimeoutSettings(ssh=5)
    assert config.disposal.workers == 8
    assert config.disposal.lease == 60
    # untouched sections keep their defaults
    assert config.registry == RegistrySettings()


def test_dict_to_dataclass_keeps_plain_tables_as_dicts():
    registry = _dict_to_dataclass(
        RegistrySettings, {"nodes": {"agent-1": "agent-1.example.org"}}
    )

    assert registry.nodes == {"agent-1": "agent-1.example.org"}


def test_dict_to_dataclass_drops_unknown_keys():
    settings = _dict_to_dataclass(DisposalSettings, {"workers": 2, "colour": "red"})

    assert settings.workers == 2
    assert not hasattr(settings, "colour")


@pytest.fixture
def search_dirs(tmp_path, monkeypatch):
    """Isolated working directory and XDG config home without any config."""
    cwd = tmp_path / "cwd"
    xdg = tmp_path / "xdg"
    cwd.mkdir()
    xdg.mkdir()
    monkeypatch.chdir(cwd)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.delenv("WIPEOUT_CONFIG", raising=False)
    return cwd, xdg


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


def test_get_config_path_prefers_environment_variable(
    search_dirs, tmp_path, monkeypatch
):
    cwd, xdg = search_dirs
    _touch(cwd / "wipeout_config.toml")
    _touch(xdg / "wipeout" / "config.toml")
    explicit = _touch(tmp_path / "explicit.toml")
    monkeypatch.setenv("WIPEOUT_CONFIG", str(explicit))

    assert Config._get_config_path() == explicit


def test_get_config_path_prefers_working_directory_over_xdg(search_dirs):
    cwd, xdg = search_dirs
    local = _touch(cwd / "wipeout_config.toml")
    _touch(xdg / "wipeout" / "config.toml")

    assert Config._get_config_path() == local


def test_get_config_path_falls_back_to_xdg(search_dirs):
    _, xdg = search_dirs
    user = _touch(xdg / "wipeout" / "config.toml")

    assert Config._get_config_path() == user


def test_get_config_path_ignores_missing_env_file(search_dirs, tmp_path, monkeypatch):
    monkeypatch.setenv("WIPEOUT_CONFIG", str(tmp_path / "missing.toml"))

    assert Config._get_config_path() is None


def test_get_config_path_none(search_dirs):
    assert Config._get_config_path() is None

def test_load_with_explicit_path(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("""
binary_name = "wo"

[timeouts]
ssh = 120

[registry.nodes]
agent-1 = "agent-1.example.org"
agent-2 = "10.0.0.2"

[disposal]
initial_backoff = 5
queue_file = "/tmp/queue.yaml"
""")

    config = Config.load(config_file)

    assert config.binary_name == "wo"
    assert config.timeouts.ssh == 120
    assert config.registry.nodes == {
        "agent-1": "agent-1.example.org",
        "agent-2": "10.0.0.2",
    }
    assert config.disposal.initial_backoff == 5
    assert config.disposal.queue_path == Path("/tmp/queue.yaml")

    # non-overriden values
    assert config.disposal.max_backoff == 3600
    assert config.registry.controller_name == "controller"
    assert config.wipeout.suffix_marker == "_wipeout_"


def test_load_returns_defaults_when_file_missing(tmp_path):
    assert Config.load(tmp_path / "does_not_exist.toml") == Config()


def test_load_empty_file_gives_defaults(tmp_path):
    empty = tmp_path / "wipeout.toml"
    empty.write_text("")

    assert Config.load(empty) == Config()


def test_load_with_invalid_toml_raises_error(tmp_path):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[disposal\nworkers = 5\n")

    with pytest.raises(ValueError, match="Could not read wipeout config"):
        Config.load(config_file)


def test_disposal_queue_path_defaults_to_xdg_state_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

    assert DisposalSettings().queue_path == tmp_path / "wipeout" / "disposals.yaml"
