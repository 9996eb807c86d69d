"""
Logging configuration and utilities for tablerepo.
"""

import logging
import sys


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging to stdout only.

    Args:
        log_level: The log level to use (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If log_level is not a valid logging level name
    """
    log_level_upper = log_level.upper()
    if log_level_upper not in logging._nameToLevel:
        raise ValueError(f"Invalid log level: {log_level}")

    numeric_level = logging._nameToLevel[log_level_upper]

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
        force=True  # Override any existing configuration
    )

    logging.getLogger('tablerepo').setLevel(numeric_level)

    # SQL echo is controlled by Settings.echo_sql, not by the root level
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('aiosqlite').setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name of the logger, typically the module name

    Returns:
        logging.Logger: Configured logger instance
    """
    if not name.startswith("tablerepo"):
        name = f"tablerepo.{name}"

    return logging.getLogger(name)


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        module_name: The module name (e.g., __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    if module_name.startswith("tablerepo."):
        module_name = module_name[len("tablerepo."):]

    return get_logger(module_name)
