"""Application configuration loaded from config.yaml, .env and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values

ENV_KEYS = ("DB_URI", "DB_NAME", "DB_TIME", "APP_PORT")
NON_PRODUCTION_DB_TIME = 1000

_CONFIG_NAMES = ("config.yaml", "config.yml", "config")
_BOOLS = {"1": True, "t": True, "true": True, "0": False, "f": False, "false": False, "": False}


class ConfigError(Exception):
    """Raised when the configuration cannot be read or is incomplete."""


@dataclass
class LoggerConfig:
    """Settings for the rotating log file."""

    file_name: str = ""
    file_size: int = 0
    max_log_file: int = 0
    max_retention: int = 0
    compress_log: bool = False
    level: str = ""


@dataclass
class Configuration:
    """The complete application configuration."""

    environment: str = ""
    logger: LoggerConfig = field(default_factory=LoggerConfig)
    db_uri: str = ""
    db_name: str = ""
    db_time: int = 0
    app_port: str = ""


def _lower_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key).lower(): _lower_keys(item) for key, item in value.items()}
    return value


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{key}: expected a string, got {type(value).__name__}")


def _as_int(value: Any, key: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, (bool, int, float)):
        return int(value)
    if isinstance(value, str):
        for base in (0, 10):
            try:
                return int(value, base)
            except ValueError:
                pass
        raise ConfigError(f"{key}: cannot parse {value!r} as an integer")
    raise ConfigError(f"{key}: expected an integer, got {type(value).__name__}")


def _as_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, int, float)):
        return bool(value)
    if isinstance(value, str) and (value in ("TRUE", "FALSE") or value.lower() in _BOOLS):
        if value in ("tRUE", "fALSE") or (value.lower() in ("true", "false") and value not in (
            "true", "True", "TRUE", "false", "False", "FALSE"
        )):
            raise ConfigError(f"{key}: cannot parse {value!r} as a boolean")
        return _BOOLS[value.lower()]
    raise ConfigError(f"{key}: cannot parse {value!r} as a boolean")


def _read_yaml(directory: Path) -> dict[str, Any]:
    path = next((directory / name for name in _CONFIG_NAMES if (directory / name).is_file()), None)
    if path is None:
        raise ConfigError(f'Config File "config" Not Found in "{directory}"')
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{path}: top level must be a mapping")
    return _lower_keys(data)


def _read_env_file(directory: Path) -> dict[str, Any]:
    path = directory / ".env"
    if not path.is_file():
        raise ConfigError(f'Config File ".env" Not Found in "{directory}"')
    return {key.lower(): value or "" for key, value in dotenv_values(path).items()}


def _build(settings: Mapping[str, Any]) -> Configuration:
    raw = settings.get("logger") or {}
    if not isinstance(raw, Mapping):
        raise ConfigError("logger: expected a mapping")
    logger = LoggerConfig(
        file_name=_as_str(raw.get("filename"), "logger.fileName"),
        file_size=_as_int(raw.get("filesize"), "logger.fileSize"),
        max_log_file=_as_int(raw.get("maxlogfile"), "logger.maxLogFile"),
        max_retention=_as_int(raw.get("maxretention"), "logger.maxRetention"),
        compress_log=_as_bool(raw.get("compresslog"), "logger.compressLog"),
        level=_as_str(raw.get("level"), "logger.level"),
    )
    return Configuration(
        environment=_as_str(settings.get("environment"), "environment"),
        logger=logger,
        db_uri=_as_str(settings.get("db_uri"), "DB_URI"),
        db_name=_as_str(settings.get("db_name"), "DB_NAME"),
        db_time=_as_int(settings.get("db_time"), "DB_TIME"),
        app_port=_as_str(settings.get("app_port"), "APP_PORT"),
    )


def load_config(directory=None, environ=None) -> Configuration:
    """Read config.yaml, merge .env over it and let set environment variables win."""
    base = Path(directory) if directory is not None else Path.cwd()
    if not base.exists():
        base = Path(".")
    env = os.environ if environ is None else environ

    settings = _read_yaml(base)
    settings.update(_read_env_file(base))
    settings.update({key.lower(): env[key] for key in ENV_KEYS if env.get(key)})

    config = _build(settings)
    if config.environment != "production":
        config.db_time = NON_PRODUCTION_DB_TIME
    if not config.db_uri:
        raise ConfigError("DB_URI is not set")
    if not config.db_name:
        raise ConfigError("DB_NAME is not set")
    return config