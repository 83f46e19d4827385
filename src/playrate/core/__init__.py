"""Core module - domain models, resolution logic, configuration and logging."""

from playrate.core.config import load_config
from playrate.core.exceptions import ConfigurationError
from playrate.core.logger import get_full_log_path, get_loggers

__all__ = [
    "ConfigurationError",
    "get_full_log_path",
    "get_loggers",
    "load_config",
]
