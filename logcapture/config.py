"""Configuration loading from env vars and an optional YAML file."""

import importlib
import os
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import yaml

from logcapture.models import LogRecord

logger = logging.getLogger(__name__)

LogHook = Callable[[LogRecord], Optional[LogRecord]]

DEFAULT_JSON_FILE_PATH = os.path.join("Logs", "{yyyy-MM-dd}.json")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    json_file_path: str = DEFAULT_JSON_FILE_PATH
    batch_size: int = 20
    threshold_seconds: float = 2.0
    is_log_full_info: bool = False
    is_enable_log_to_console: bool = True
    is_enable_log_to_file: bool = True
    before_log: Optional[LogHook] = None
    after_log: Optional[LogHook] = None


def resolve_hook(target: Optional[str]) -> Optional[LogHook]:
    """Import a hook given as ``"package.module:function"``."""
    if not target:
        return None
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Hook must look like 'module:function', got {target!r}")
    try:
        module = importlib.import_module(module_name)
        hook = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Cannot load hook {target!r}: {e}") from e
    if not callable(hook):
        raise ValueError(f"Hook {target!r} is not callable")
    return hook


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from env vars, then YAML data, then dataclass defaults."""
    yaml_data = yaml_data or {}

    def pick(env_name: str, key: str, default):
        if env_name in os.environ:
            return os.environ[env_name]
        return yaml_data.get(key, default)

    return Config(
        json_file_path=pick("LOG_JSON_FILE_PATH", "json_file_path", Config.json_file_path),
        batch_size=int(pick("LOG_BATCH_SIZE", "batch_size", Config.batch_size)),
        threshold_seconds=float(
            pick("LOG_THRESHOLD_SECONDS", "threshold_seconds", Config.threshold_seconds)
        ),
        is_log_full_info=_parse_bool(
            pick("LOG_FULL_INFO", "is_log_full_info", Config.is_log_full_info)
        ),
        is_enable_log_to_console=_parse_bool(
            pick("LOG_TO_CONSOLE", "is_enable_log_to_console", Config.is_enable_log_to_console)
        ),
        is_enable_log_to_file=_parse_bool(
            pick("LOG_TO_FILE", "is_enable_log_to_file", Config.is_enable_log_to_file)
        ),
        before_log=resolve_hook(yaml_data.get("before_log")),
        after_log=resolve_hook(yaml_data.get("after_log")),
    )
