"""Configuration module — frozen dataclass loaded from YAML, env vars and CLI args."""

import logging
import os
import sys
from dataclasses import dataclass

import yaml

from cloudwatch_hook.levels import Level, parse_level

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


def _parse_levels(value) -> tuple[Level, ...]:
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    return tuple(parse_level(str(v)) for v in value)


@dataclass(frozen=True)
class Config:
    group_name: str = "application"
    stream_name: str = "default"
    level: Level = Level.INFO
    accepted_levels: tuple[Level, ...] = ()
    is_async: bool = False
    region: str | None = None
    endpoint_url: str | None = None
    profile: str | None = None
    match_entry_ids: bool = True
    console: bool = True
    log_file: str | None = None


_ENV_VARS = {
    "group_name": "CLOUDWATCH_GROUP",
    "stream_name": "CLOUDWATCH_STREAM",
    "level": "LOG_LEVEL",
    "accepted_levels": "ACCEPTED_LEVELS",
    "is_async": "ASYNC",
    "region": "AWS_REGION",
    "endpoint_url": "CLOUDWATCH_ENDPOINT",
    "profile": "AWS_PROFILE",
    "match_entry_ids": "MATCH_ENTRY_IDS",
    "console": "CONSOLE",
    "log_file": "LOG_FILE",
}

_BOOL_KEYS = ("is_async", "match_entry_ids", "console")

_OPTIONAL_KEYS = ("region", "endpoint_url", "profile", "log_file")

# CLI spellings that differ from the field name
_CLI_ALIASES = {
    "group": "group_name",
    "stream": "stream_name",
    "async": "is_async",
    "endpoint": "endpoint_url",
}


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


def _coerce(key: str, value):
    if key == "level":
        return value if isinstance(value, Level) else parse_level(str(value))
    if key == "accepted_levels":
        return _parse_levels(value)
    if key in _BOOL_KEYS:
        return _parse_bool(value)
    if value is None and key in _OPTIONAL_KEYS:
        return None
    return str(value)


def _parse_cli(argv: list[str]) -> tuple[dict, str | None]:
    """Parse --key value / --key=value / bare --flag arguments."""
    overrides: dict = {}
    config_path = None
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("--"):
            if "=" in arg:
                key, value = arg[2:].split("=", 1)
            elif i + 1 < len(argv) and not argv[i + 1].startswith("--"):
                key = arg[2:]
                value = argv[i + 1]
                i += 1
            else:
                key = arg[2:]
                value = "true"

            key = key.replace("-", "_")
            key = _CLI_ALIASES.get(key, key)
            if key == "config":
                config_path = value
            elif key in _ENV_VARS:
                overrides[key] = value
        i += 1
    return overrides, config_path


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args (highest priority)."""
    if argv is None:
        argv = sys.argv[1:]

    cli_overrides, config_path = _parse_cli(argv)
    yaml_data = load_yaml_config(config_path or os.environ.get("CONFIG_PATH"))

    raw: dict = {}
    for key in _ENV_VARS:
        # a YAML null only clears optional keys; required ones keep their default
        if key in yaml_data and (yaml_data[key] is not None or key in _OPTIONAL_KEYS):
            raw[key] = yaml_data[key]
    for key, env_name in _ENV_VARS.items():
        if env_name in os.environ:
            raw[key] = os.environ[env_name]
    raw.update(cli_overrides)

    return Config(**{key: _coerce(key, value) for key, value in raw.items()})
