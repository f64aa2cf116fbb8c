"""
Logging Configuration Module.

This module provides centralized logging configuration for the Thinky project.
It sets up structured logging with different levels for different modules and environments.

Features:
- Configurable log levels per module
- Console and file logging
- Structured logging with JSON format support
"""

import logging
import os
from pathlib import Path
from typing import Optional


def _get_logging_config():
    """Get logging configuration from settings model.

    This function is used to defer settings import until needed,
    avoiding circular imports during module initialization.
    """
    try:
        from thinky.server.core.config import settings

        return {
            "log_level": settings.log_level.upper(),
            "log_format": settings.log_format,
            "log_file_dir": settings.log_file_dir,
            "enable_file_logging": settings.enable_file_logging,
        }
    except Exception:
        # Fallback to environment variables if settings not available
        return {
            "log_level": os.getenv("THINKY_LOG_LEVEL", "INFO").upper(),
            "log_format": os.getenv("LOG_FORMAT", "detailed"),
            "log_file_dir": os.getenv("LOG_FILE_DIR", "logs"),
            "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes"),
        }


# Get initial logging config
_config = _get_logging_config()
LOG_LEVEL = _config["log_level"]
LOG_FORMAT = _config["log_format"]
LOG_FILE_DIR = _config["log_file_dir"]
ENABLE_FILE_LOGGING = _config["enable_file_logging"]


# Define log formats
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)


# Module-specific log levels
MODULE_LOG_LEVELS = {
    # Core modules
    "thinky.core": "INFO",
    "thinky.core.database": "INFO",
    # Server modules
    "thinky.server": "INFO",
    "thinky.server.api": "DEBUG",
    "thinky.server.services": "DEBUG",
    "thinky.server.middleware": "INFO",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "httpx": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _resolve_format(fmt: str) -> str:
    if fmt == "json":
        return JSON_FORMAT
    if fmt == "simple":
        return SIMPLE_FORMAT
    return DETAILED_FORMAT


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Override default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override default format (simple, detailed, json)
        enable_file: Whether to enable file logging
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT

    formatter = logging.Formatter(_resolve_format(fmt), datefmt="%Y-%m-%d %H:%M:%S")

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, filter at handler level

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_logging = enable_file and ENABLE_FILE_LOGGING
    if file_logging:
        Path(LOG_FILE_DIR).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(LOG_FILE_DIR) / "thinky.log")
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
