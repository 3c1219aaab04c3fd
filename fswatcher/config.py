import os
from dataclasses import dataclass, field
from typing import Tuple

import toml
import yaml

from fswatcher import ConfigError
from fswatcher.filters import compile_patterns

DEFAULT_CONFIG_PATH = "./fswatcher.toml"
ENV_CONFIG_DIR_VAR = "FSWATCHER_CONFIG_DIR"

DEFAULT_SETTINGS = {
    "path": None,
    "recursive": True,
    "ignores": [],
    "show_ignored": False,
    "polling": False,
    "log_level": "INFO",
    "log_dir": None,
}


@dataclass(frozen=True)
class WatchConfig:
    """Resolved watch settings, fixed for the lifetime of the process."""

    path: str
    recursive: bool = True
    ignore_patterns: Tuple[str, ...] = ()
    show_ignored: bool = False
    compiled_patterns: tuple = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "ignore_patterns", tuple(self.ignore_patterns))
        object.__setattr__(self, "compiled_patterns", compile_patterns(self.ignore_patterns))


def validate_watch_path(path):
    """Raise ConfigError unless ``path`` is an existing directory."""
    if not path:
        raise ConfigError("No watch path given (use --path or [watch] path in the config file)")
    if not os.path.exists(path):
        raise ConfigError(f"Watch path does not exist: {path}")
    if not os.path.isdir(path):
        raise ConfigError(f"Watch path is not a directory: {path}")


def build_watch_config(path, recursive=True, ignores=(), show_ignored=False):
    """
    Validate the inputs and build a WatchConfig.

    The path is made absolute so that ignore patterns are matched against
    the same absolute paths the watcher reports.

    Raises:
        ConfigError: If the path is not an existing directory or an ignore
            pattern is not a valid regular expression.
    """
    validate_watch_path(path)
    return WatchConfig(
        path=os.path.abspath(path),
        recursive=bool(recursive),
        ignore_patterns=tuple(ignores or ()),
        show_ignored=bool(show_ignored),
    )


def find_config_path(cli_config_path=None):
    """
    Locate the configuration file.

    Precedence:
      1. cli_config_path if provided (must exist).
      2. Environment variable FSWATCHER_CONFIG_DIR (looking for config.toml).
      3. Default to ./fswatcher.toml.

    Returns:
        str: The path to use, or None when no optional file is present.
    """
    if cli_config_path:
        if not os.path.exists(cli_config_path):
            raise ConfigError(f"Configuration file not found: {cli_config_path}")
        return cli_config_path
    if os.environ.get(ENV_CONFIG_DIR_VAR):
        config_path = os.path.join(os.environ[ENV_CONFIG_DIR_VAR], "config.toml")
    else:
        config_path = DEFAULT_CONFIG_PATH
    return config_path if os.path.exists(config_path) else None


def load_config(cli_config_path=None):
    """
    Load configuration from a TOML or YAML file.

    Returns:
        tuple: (config dict, config file path or None).
    """
    config_path = find_config_path(cli_config_path)
    if config_path is None:
        return {}, None

    try:
        with open(config_path, "r") as f:
            if config_path.endswith((".yaml", ".yml")):
                config_data = yaml.safe_load(f) or {}
            else:
                config_data = toml.load(f)
    except (OSError, toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read configuration file {config_path}: {e}") from e

    if not isinstance(config_data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")
    return config_data, config_path


def _section(config_data, name):
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] section must be a mapping")
    return section


def _ensure_bool(value, field_name):
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a boolean")
    return value


def _ensure_str_list(value, field_name):
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{field_name} must be a list of strings")
    return list(value)


def settings_from_file(config_data, config_path=None):
    """
    Flatten the [watch] and [logging] sections into a settings dict.

    Relative paths in the file are resolved against the file's directory.
    """
    settings = dict(DEFAULT_SETTINGS)
    config_dir = os.path.dirname(os.path.abspath(config_path)) if config_path else os.getcwd()

    watch = _section(config_data, "watch")
    if "path" in watch:
        if not isinstance(watch["path"], str):
            raise ConfigError("watch.path must be a string")
        settings["path"] = os.path.join(config_dir, os.path.expanduser(watch["path"]))
    if "recursive" in watch:
        settings["recursive"] = _ensure_bool(watch["recursive"], "watch.recursive")
    if "ignores" in watch:
        settings["ignores"] = _ensure_str_list(watch["ignores"], "watch.ignores")
    if "show_ignored" in watch:
        settings["show_ignored"] = _ensure_bool(watch["show_ignored"], "watch.show_ignored")
    if "polling" in watch:
        settings["polling"] = _ensure_bool(watch["polling"], "watch.polling")

    logging_cfg = _section(config_data, "logging")
    if "level" in logging_cfg:
        settings["log_level"] = str(logging_cfg["level"])
    if logging_cfg.get("log_dir"):
        settings["log_dir"] = os.path.join(config_dir, logging_cfg["log_dir"])

    return settings


def merge_settings(file_settings, **overrides):
    """Apply command-line values on top of file settings; None means unset."""
    settings = dict(file_settings)
    for key, value in overrides.items():
        if value is None:
            continue
        settings[key] = list(value) if key == "ignores" else value
    return settings
