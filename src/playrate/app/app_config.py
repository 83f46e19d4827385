"""Configuration file discovery for the command line entry point."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from playrate.core.config import load_config
from playrate.core.exceptions import ConfigurationError
from playrate.core.models.settings import AppConfig

DEFAULT_CONFIG_FILES = ["config.yaml", "config.yml"]


class Config:
    """Locates and loads the application configuration."""

    def __init__(self, config_path: str | None = None) -> None:
        """Initialize configuration.

        Args:
            config_path: Path to the configuration file; when None, ``CONFIG_PATH``
                and then ``DEFAULT_CONFIG_FILES`` in the working directory are tried

        Raises:
            ConfigurationError: If no configuration file can be found

        """
        if config_path is None:
            load_dotenv()
            config_path = os.getenv("CONFIG_PATH")
        if config_path is None:
            for default_file in DEFAULT_CONFIG_FILES:
                if Path(default_file).exists():
                    config_path = default_file
                    break
            else:
                msg = (
                    f"No configuration file found. Checked CONFIG_PATH env var and files: {DEFAULT_CONFIG_FILES}. "
                    "Copy config.example.yaml to config.yaml or set CONFIG_PATH."
                )
                raise ConfigurationError(msg)

        self.config_path = config_path
        self._config: AppConfig | None = None

    @property
    def resolved_path(self) -> str:
        """Absolute path to the configuration file."""
        load_path = Path(os.path.expandvars(self.config_path)).expanduser()
        try:
            return str(load_path.resolve())
        except (OSError, ValueError):
            return str(load_path.absolute())

    def load(self) -> AppConfig:
        """Load and validate the configuration once."""
        if self._config is None:
            self._config = load_config(self.resolved_path)
        return self._config
