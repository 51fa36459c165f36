#!/usr/bin/env python3

import logging
from pathlib import Path
import yaml


def get_project_root() -> Path:
    """
    Get the project root directory.

    Returns:
        Path: Absolute path to project root
    """
    return Path(__file__).parent.parent.parent


def get_config_path(config_name: str = "config.yaml") -> Path:
    """
    Get the full path to a config file in the project 'config' directory.

    Args:
        config_name: Name of the config file, default is "config.yaml"

    Returns:
        Path: Full path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = get_project_root() / "config" / config_name
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    return config_path


def load_config(config_path: Path) -> dict:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Dict: Configuration dictionary

    Raises:
        RuntimeError: If config file cannot be loaded
    """
    try:
        with open(config_path, "r") as f:
            return yaml.safe_load(f)
    except Exception as e:
        raise RuntimeError(f"Error loading config: {str(e)}")


def _build_handlers(log_config: dict) -> list:
    """Create the console and file handlers enabled in the logger config."""
    formatter = logging.Formatter(log_config["format"])
    handlers_config = log_config["handlers"] or {}
    handlers = []

    if handlers_config.get("console", {}).get("enabled", False):
        handlers.append(logging.StreamHandler())

    file_config = handlers_config.get("file", {})
    if file_config.get("enabled", False):
        log_file = get_project_root() / log_config["file"]
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode=file_config.get("mode", "a")))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logger(name: str = "icmp_prober", config_path: Path = None) -> logging.Logger:
    """
    Configure a package logger from 'logger_config.yaml'.

    Probe components log to children of this logger (`<name>.prober`), so
    configuring it once covers the whole package.

    Args:
        name: Logger name, default is "icmp_prober"
        config_path: Path to the logger config, default is None (search in config directory)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        FileNotFoundError: If the config file is missing
        ValueError: If required fields are missing or the level is unknown
        OSError: If the log file or its directory cannot be created
    """
    if config_path is None:
        config_path = get_config_path(config_name="logger_config.yaml")

    log_config = load_config(config_path) or {}

    required_fields = ["level", "file", "format", "handlers"]
    missing_fields = [field for field in required_fields if field not in log_config]
    if missing_fields:
        raise ValueError(
            f"Missing required logging configuration fields: {', '.join(missing_fields)}"
        )

    level = logging.getLevelName(str(log_config["level"]).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level: {log_config['level']!r}")

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(level)
    for handler in _build_handlers(log_config):
        logger.addHandler(handler)

    logger.debug(
        f"Logger {name!r} configured (level: {logging.getLevelName(level)}, "
        f"handlers: {len(logger.handlers)})"
    )
    return logger


# Package-level logger name
logger_main = "icmp_prober"

__all__ = [
    "setup_logger",
    "logger_main",
    "get_project_root",
    "get_config_path",
    "load_config",
]
