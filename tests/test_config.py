import logging
from pathlib import Path

import pytest

pytest.importorskip("yaml")

from profile_server.config import (
    DEFAULT_PORT,
    ConfigError,
    ServerConfig,
    load_yaml_config,
    resolve_log_level,
)


def test_defaults_point_at_mount():
    config = ServerConfig()
    assert config.profile_file == Path("/mnt/profile")
    assert config.radio_silence_file == Path("/mnt/radio-silence")
    assert config.radio_silence_counter_file == Path("/mnt/radio-silence-counter")
    assert config.radio_status_file == Path("/mnt/radio-status.json")
    assert config.app_info_file == Path("/mnt/app-info-status.json")
    assert config.port == DEFAULT_PORT == 8888
    assert config.token == ""


def test_load_yaml_config(tmp_path: Path):
    cfg_path = tmp_path / "server.yml"
    cfg_path.write_text(
        "token: abc123\nport: 9999\nradio-silence-file: /tmp/rs\nprofile_file: /tmp/profile\n",
        encoding="utf-8",
    )
    config = load_yaml_config(cfg_path)
    assert config.token == "abc123"
    assert config.port == 9999
    assert config.radio_silence_file == Path("/tmp/rs")
    assert config.profile_file == Path("/tmp/profile")
    assert config.app_info_file == Path("/mnt/app-info-status.json")


def test_load_empty_yaml_config_keeps_base(tmp_path: Path):
    cfg_path = tmp_path / "empty.yml"
    cfg_path.write_text("", encoding="utf-8")
    base = ServerConfig(token="base")
    assert load_yaml_config(cfg_path, base=base) == base


@pytest.mark.parametrize(
    "text",
    [":::bad:::yaml:::", "- a\n- b\n", "colour: blue\n", "port: http\n", "port: 70000\n"],
)
def test_load_yaml_config_rejects_invalid(tmp_path: Path, text: str):
    cfg_path = tmp_path / "bad.yml"
    cfg_path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_yaml_config(cfg_path)


def test_load_yaml_config_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_yaml_config(tmp_path / "absent.yml")


def test_from_env():
    config = ServerConfig.from_env(
        {
            "PROFILE_SERVER_TOKEN": "env-token",
            "PROFILE_SERVER_PORT": "8080",
            "PROFILE_SERVER_PROFILE_FILE": "/data/profile",
            "LOG_LEVEL": "debug",
        }
    )
    assert config.token == "env-token"
    assert config.port == 8080
    assert config.profile_file == Path("/data/profile")
    assert config.log_level == "debug"


def test_with_overrides_skips_unset_values():
    config = ServerConfig(token="keep")
    assert config.with_overrides({"token": None, "port": None}) == config


def test_empty_path_is_rejected():
    with pytest.raises(ConfigError):
        ServerConfig().with_overrides({"profile_file": " "})


@pytest.mark.parametrize(
    "value, expected",
    [(None, logging.INFO), ("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("10", 10), ("bogus", logging.INFO)],
)
def test_resolve_log_level(value, expected):
    assert resolve_log_level(value) == expected


def test_cli_flags_override_yaml_and_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    import run_server

    monkeypatch.setenv("PROFILE_SERVER_TOKEN", "env-token")
    monkeypatch.setenv("PROFILE_SERVER_PORT", "7000")
    cfg_path = tmp_path / "server.yml"
    cfg_path.write_text("port: 9000\nhost: 127.0.0.1\n", encoding="utf-8")

    args = run_server.parse_args(
        ["--config", str(cfg_path), "--port", "9100", "--radio-silence", str(tmp_path / "rs")]
    )
    config = run_server.build_config(args)
    assert config.token == "env-token"
    assert config.host == "127.0.0.1"
    assert config.port == 9100
    assert config.radio_silence_file == tmp_path / "rs"
