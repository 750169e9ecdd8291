"""
Logging configuration for the CSS value generator.

All output goes through the "css_valuegen" logger, with one child per module
("css_valuegen.extractor", "css_valuegen.ledger", ...). INFO reports one line
per stage and family; DEBUG (the CLI's --verbose) adds per-property
decisions such as ignored names, redefinitions and commented-out blocks.
"""

import logging
import sys
from typing import Optional


def setup_logger(
    name: str = "css_valuegen",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Calling again only adjusts the level; handlers are attached once
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "css_valuegen.extractor") share the package logger's
    handlers, so each pipeline stage is identifiable in the output.

    Args:
        module_name: Name of the module (e.g., 'extractor', 'classifier')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"css_valuegen.{module_name}")
