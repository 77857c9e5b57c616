"""Tests for the configuration module."""

import pytest

from logcapture.config import (
    DEFAULT_JSON_FILE_PATH,
    Config,
    load_config,
    load_yaml_config,
    resolve_hook,
)

ENV_VARS = [
    "LOG_JSON_FILE_PATH", "LOG_BATCH_SIZE", "LOG_THRESHOLD_SECONDS",
    "LOG_FULL_INFO", "LOG_TO_CONSOLE", "LOG_TO_FILE",
]


def drop_everything(record):
    return None


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    cfg = Config()
    assert cfg.json_file_path == DEFAULT_JSON_FILE_PATH
    assert cfg.batch_size == 20
    assert cfg.threshold_seconds == 2.0
    assert cfg.is_log_full_info is False
    assert cfg.is_enable_log_to_console is True
    assert cfg.is_enable_log_to_file is True
    assert cfg.before_log is None
    assert cfg.after_log is None


def test_config_frozen():
    cfg = Config()
    with pytest.raises(AttributeError):
        cfg.batch_size = 5


def test_load_config_without_sources_uses_defaults():
    assert load_config() == Config()


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "logging.yml"
    path.write_text(
        "json_file_path: Logs/{Type}/{yyyy-MM-dd}.json\n"
        "batch_size: 5\n"
        "threshold_seconds: 0.5\n"
        "is_log_full_info: true\n"
        "is_enable_log_to_console: false\n"
    )
    cfg = load_config(load_yaml_config(str(path)))

    assert cfg.json_file_path == "Logs/{Type}/{yyyy-MM-dd}.json"
    assert cfg.batch_size == 5
    assert cfg.threshold_seconds == 0.5
    assert cfg.is_log_full_info is True
    assert cfg.is_enable_log_to_console is False
    assert cfg.is_enable_log_to_file is True


def test_env_overrides_yaml(monkeypatch):
    monkeypatch.setenv("LOG_BATCH_SIZE", "50")
    monkeypatch.setenv("LOG_TO_FILE", "no")
    monkeypatch.setenv("LOG_FULL_INFO", "1")

    cfg = load_config({"batch_size": 5, "is_enable_log_to_file": True})
    assert cfg.batch_size == 50
    assert cfg.is_enable_log_to_file is False
    assert cfg.is_log_full_info is True


def test_missing_yaml_file_returns_empty(tmp_path):
    assert load_yaml_config(str(tmp_path / "nope.yml")) == {}
    assert load_yaml_config(None) == {}


def test_hooks_resolved_from_yaml():
    cfg = load_config({"before_log": f"{__name__}:drop_everything"})
    assert cfg.before_log is drop_everything
    assert cfg.after_log is None


class TestResolveHook:
    def test_empty(self):
        assert resolve_hook(None) is None
        assert resolve_hook("") is None

    def test_missing_separator(self):
        with pytest.raises(ValueError):
            resolve_hook("os.path.join")

    def test_unknown_module(self):
        with pytest.raises(ValueError):
            resolve_hook("no_such_module_xyz:hook")

    def test_not_callable(self):
        with pytest.raises(ValueError):
            resolve_hook("os:sep")

    def test_resolves_callable(self):
        import os.path
        assert resolve_hook("os.path:join") is os.path.join
