"""Configuration for the webhook listener, from wekan-hooks.yml and the environment."""

import logging
import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path

import yaml

from .hooks import DEFAULT_CHECKLIST_TITLE
from .resolver import DEFAULT_BOARD_TITLE

logger = logging.getLogger("wekan_hooks.config")

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    "MONGO_URL": "mongo_url",
    "WEKAN_DATABASE": "database",
    "HOST": "host",
    "PORT": "port",
    "HOOKS_LOG_LEVEL": "log_level",
    "HOOKS_CACHE_TTL": "cache_ttl",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class HooksConfig:
    """Settings of a wekan-hooks process."""

    mongo_url: str | None = None
    database: str = "wekan"
    host: str = "0.0.0.0"
    port: int = 80
    board_title: str = DEFAULT_BOARD_TITLE
    checklist_title: str = DEFAULT_CHECKLIST_TITLE
    timeout: float = 5.0
    cache_ttl: float | None = None
    log_level: str = "INFO"


KNOWN_CONFIG_FIELDS = frozenset(f.name for f in fields(HooksConfig))

_FIELD_TYPES = {
    "port": int,
    "timeout": float,
    "cache_ttl": float,
}

# Fields that may be set to null explicitly
_NULLABLE_FIELDS = frozenset({"cache_ttl"})


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A single problem found in a config file."""

    severity: Severity
    message: str
    key: str | None = None

    def __str__(self) -> str:
        if self.key:
            return f"{self.key}: {self.message}"
        return self.message


@dataclass
class ValidationResult:
    """All issues found while validating a config file."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, message: str, key: str | None = None) -> None:
        self.issues.append(ValidationIssue(Severity.ERROR, message, key))

    def warning(self, message: str, key: str | None = None) -> None:
        self.issues.append(ValidationIssue(Severity.WARNING, message, key))


def _coerce(key: str, value):
    """Convert a raw value to the type of the config field, raising ValueError."""
    cast = _FIELD_TYPES.get(key, str)
    if value is None and key in _NULLABLE_FIELDS:
        return None
    if isinstance(value, bool) or value is None:
        raise ValueError(f"expected {cast.__name__}, got {type(value).__name__}")
    if cast is int and isinstance(value, float) and not value.is_integer():
        raise ValueError("expected int, got a fractional number")
    return cast(value)


def _read_file(path: Path, result: ValidationResult) -> dict:
    """Read the YAML mapping from path, recording problems in result."""
    if not path.exists():
        result.error(f"Config file not found: {path}")
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        result.error(f"Invalid YAML syntax: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        result.error(f"Config must be a YAML mapping, got {type(data).__name__}")
        return {}
    return data


def _apply(raw: dict, result: ValidationResult) -> HooksConfig:
    config = HooksConfig()
    for key, value in raw.items():
        if key not in KNOWN_CONFIG_FIELDS:
            result.warning("unknown config key, ignored", key)
            continue
        try:
            setattr(config, key, _coerce(key, value))
        except (TypeError, ValueError) as e:
            result.error(f"invalid value {value!r}: {e}", key)

    if not config.mongo_url:
        result.error("is required (e.g. mongodb://localhost:27017)", "mongo_url")
    if not 0 < config.port < 65536:
        result.error(f"must be between 1 and 65535, got {config.port}", "port")
    if config.timeout <= 0:
        result.error(f"must be positive, got {config.timeout}", "timeout")
    if config.cache_ttl is not None and config.cache_ttl <= 0:
        result.error(f"must be positive, got {config.cache_ttl}", "cache_ttl")
    config.log_level = config.log_level.upper()
    if config.log_level not in LOG_LEVELS:
        result.error(f"must be one of {', '.join(LOG_LEVELS)}", "log_level")
    return config


def _environment_overrides(environ) -> dict:
    return {key: environ[var] for var, key in ENV_OVERRIDES.items() if environ.get(var)}


def _load(path: Path | None, environ) -> tuple[HooksConfig, ValidationResult]:
    result = ValidationResult()
    raw = _read_file(path, result) if path is not None else {}
    raw.update(_environment_overrides(os.environ if environ is None else environ))
    return _apply(raw, result), result


def validate_config_file(path: Path | None, environ=None) -> ValidationResult:
    """
    Validate a config file combined with environment overrides.

    Args:
        path: Path to wekan-hooks.yml, or None to use the environment only
        environ: Environment mapping (defaults to os.environ)

    Returns:
        ValidationResult listing every error and warning found
    """
    return _load(path, environ)[1]


def load_config(path: Path | None = None, environ=None) -> HooksConfig:
    """
    Load settings from an optional YAML file and the environment.

    Environment variables listed in ENV_OVERRIDES win over file values.

    Args:
        path: Path to wekan-hooks.yml, or None to use the environment only
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The loaded configuration

    Raises:
        ValueError: If the configuration has errors
    """
    config, result = _load(path, environ)
    for issue in result.warnings:
        logger.warning(f"Config: {issue}")
    if not result.is_valid:
        raise ValueError("; ".join(str(i) for i in result.errors))

    source = path if path is not None else "environment"
    logger.info(f"Loaded config from {source}")
    return config
