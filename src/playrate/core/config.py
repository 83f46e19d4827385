"""Configuration loading: YAML file, ``.env`` and ``${VAR}`` references, pydantic validation."""

from __future__ import annotations

import logging
import os
import pathlib
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from playrate.core.exceptions import ConfigurationError
from playrate.core.models.settings import AppConfig

ConfigValue = dict[str, Any] | list[Any] | str | int | float | bool | None

logger = logging.getLogger("config")
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

YAML_SUFFIXES = (".yaml", ".yml")
MAX_CONFIG_SIZE_BYTES = 1024 * 1024


def resolve_env_vars(config: ConfigValue) -> ConfigValue:
    """Substitute environment variables throughout a parsed YAML tree.

    ``"${NAME}"`` as a whole value is replaced by ``$NAME`` (or ``""`` when
    unset). Any other string containing ``$`` or ``~`` is expanded in place.
    """
    if isinstance(config, dict):
        return {str(key): resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [resolve_env_vars(value) for value in config]
    if not isinstance(config, str):
        return config

    if config.startswith("${") and config.endswith("}"):
        return os.getenv(config[2:-1], "")
    expanded = os.path.expandvars(config) if "$" in config else config
    if "~" in expanded:
        expanded = str(pathlib.Path(expanded).expanduser())
    return expanded


def _check_config_file(path: str) -> pathlib.Path:
    """Return the resolved path of a readable YAML file.

    Raises:
        FileNotFoundError: Nothing exists at ``path`` or it is a directory.
        PermissionError: The file cannot be read.
        ValueError: The suffix is not ``.yaml``/``.yml`` or the file is too large.

    """
    try:
        config_file = pathlib.Path(path).expanduser().resolve(strict=True)
    except FileNotFoundError as e:
        msg = f"Config file does not exist: {path}"
        raise FileNotFoundError(msg) from e

    if not config_file.is_file():
        msg = f"Config path is not a regular file: {config_file}"
        raise FileNotFoundError(msg)
    if config_file.suffix.lower() not in YAML_SUFFIXES:
        msg = f"Config file must end in .yaml or .yml, got {config_file.name}"
        raise ValueError(msg)
    if not os.access(config_file, os.R_OK):
        msg = f"Config file is not readable: {config_file}"
        raise PermissionError(msg)
    if config_file.stat().st_size > MAX_CONFIG_SIZE_BYTES:
        msg = f"Config file {config_file} exceeds {MAX_CONFIG_SIZE_BYTES} bytes"
        raise ValueError(msg)
    return config_file


def format_pydantic_errors(error: ValidationError) -> str:
    """Render a ``ValidationError`` as ``dotted.path: message`` lines."""
    lines = []
    for detail in error.errors():
        where = ".".join(str(part) for part in detail["loc"]) or "<root>"
        if detail["type"] == "missing":
            lines.append(f"{where}: Missing required field")
        else:
            lines.append(f"{where}: {detail['msg']}")
    return "\n".join(lines)


def build_config(data: dict[str, Any] | None, config_path: str | None = None) -> AppConfig:
    """Validate already-parsed settings as ``AppConfig``.

    Raises:
        ConfigurationError: The data is not a mapping or fails validation.

    """
    resolved = resolve_env_vars(data or {})
    if not isinstance(resolved, dict):
        msg = "Configuration data is not a dictionary"
        raise ConfigurationError(msg, config_path)
    try:
        return AppConfig(**resolved)
    except ValidationError as e:
        msg = f"Configuration validation failed:\n{format_pydantic_errors(e)}"
        raise ConfigurationError(msg, config_path) from e


def load_config(config_path: str) -> AppConfig:
    """Read ``config_path``, apply ``.env`` and environment references, and validate.

    Every failure, from a missing file to an out-of-range value, surfaces as
    ``ConfigurationError`` carrying ``config_path``.
    """
    if load_dotenv():
        logger.info("Loaded environment overrides from .env")

    try:
        config_file = _check_config_file(config_path)
        logger.info("Loading config from: %s", config_file)
        raw = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.critical("Could not read configuration: %s", e)
        raise ConfigurationError(str(e), config_path) from e

    if raw is not None and not isinstance(raw, dict):
        msg = f"Configuration data is not a dictionary (top level is {type(raw).__name__})"
        raise ConfigurationError(msg, config_path)

    config = build_config(raw, config_path)
    logger.info("Configuration loaded and validated")
    return config
