#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import List

import logging
import sys

import toml
import yaml

from .errors import ConfigurationError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("storescm")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_dir() -> Path:
    return Path.home() / '.storescm'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. STORESCM_CONFIG environment variable
    2. ~/.storescm/config.{json,toml,yaml,yml}
    """
    if 'STORESCM_CONFIG' in os.environ:
        path = Path(os.environ['STORESCM_CONFIG']).expanduser()
        if path.exists():
            return path

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def read_config_file(config_path=None):
    """Read the configuration file as written, without defaults or env overrides.

    Returns {} if the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    config_path = config_path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        suffix = config_path.suffix.lower()
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
        else:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading config from {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigurationError(f"Config file {config_path} does not hold a mapping")
    return file_config


def load_config():
    """Load configuration: defaults, then the file, then STORESCM_* overrides.

    Raises:
        ConfigurationError: If the configuration file cannot be parsed
    """
    config = merge_configs(get_default_config(), read_config_file())
    return apply_env_overrides(config)


def save_config(config):
    """Save configuration to file, in the format of its file suffix."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            toml.dump(config, f)
        elif suffix in ['.yaml', '.yml']:
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "history_directory": str(get_config_dir() / 'jobs'),
            "workspace": "",
        },
        "store_scripts": [],
        "jobs": {},
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
    }


def merge_configs(base_config, override_config):
    """Return base_config with override_config merged in; nested sections merge key by key."""
    merged = dict(base_config)
    for key, value in override_config.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = merge_configs(current, value)
        merged[key] = value
    return merged


ENV_PREFIX = "STORESCM_"
TRUE_WORDS = ('true', 'yes', 'on', '1')
FALSE_WORDS = ('false', 'no', 'off', '0')


def _coerce_env_value(env_key, value, current):
    """Convert an environment value to the type of the setting it overrides."""
    if isinstance(current, bool):
        if value.lower() in TRUE_WORDS:
            return True
        if value.lower() in FALSE_WORDS:
            return False
        raise ConfigurationError(f"{env_key} must be a boolean, got {value!r}")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(f"{env_key} must be an integer, got {value!r}") from e
    return value


def _match_key(section, words):
    """Longest key of section whose underscore-separated words start words."""
    best = None
    for key in section:
        if not isinstance(key, str):
            continue
        key_words = key.split('_')
        if words[:len(key_words)] == key_words and (best is None or len(key_words) > len(best.split('_'))):
            best = key
    return best


def apply_env_overrides(config):
    """
    Apply STORESCM_<SECTION>_<KEY> environment overrides in place.

    Keys may contain underscores themselves: STORESCM_GENERAL_HISTORY_DIRECTORY
    sets general.history_directory. Only existing settings are overridden,
    and a value takes the type of the setting it replaces, so
    STORESCM_GENERAL_WORKSPACE=123 stays the string "123".

    Raises:
        ConfigurationError: If a boolean or integer setting gets an unusable value
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == "STORESCM_CONFIG":
            continue

        words = env_key[len(ENV_PREFIX):].lower().split('_')
        section = config
        while words and isinstance(section, dict):
            key = _match_key(section, words)
            if key is None:
                break
            words = words[len(key.split('_')):]
            if words:
                section = section[key]
            else:
                section[key] = _coerce_env_value(env_key, value, section[key])

    return config


def configure_logging(config, verbose: bool = False) -> None:
    """Apply the configured log level (DEBUG when verbose)."""
    level_name = "DEBUG" if verbose else str(config.get("logging", {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)
    fmt = config.get("logging", {}).get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def get_history_directory(config) -> Path:
    return Path(config.get("general", {}).get("history_directory") or get_config_dir() / 'jobs').expanduser()


def get_job_monitors(config, job: str) -> List:
    """
    Build the MonitorConfigs of a configured job.

    A job section is either {"monitors": [...]} or a single monitor.

    Raises:
        ConfigurationError: If the job is unknown or has no monitors
    """
    from .domain import MonitorConfig

    jobs = config.get("jobs", {})
    if job not in jobs:
        raise ConfigurationError(f"No job named {job!r} is configured")

    section = jobs[job] or {}
    entries = section.get("monitors") if "monitors" in section else [section]
    monitors = [MonitorConfig.from_dict(entry) for entry in entries or []]
    if not monitors:
        raise ConfigurationError(f"Job {job!r} has no monitors")
    names = [m.repository_name for m in monitors]
    if len(names) != len(set(names)):
        raise ConfigurationError(f"Job {job!r} monitors a repository more than once")
    return monitors
