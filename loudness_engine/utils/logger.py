"""
Logging helpers for the loudness engine.

Library modules only call get_logger(); handlers are installed by the CLI
through setup_logging() so that embedding applications keep control of
their own logging tree.
"""
import logging
import os
from functools import wraps
from time import perf_counter
from typing import Any, Dict, Optional, Union

PACKAGE_LOGGER = "loudness_engine"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    Install handlers on the package logger.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
        log_file: Optional path to a log file; it always receives DEBUG records
        console_output: Whether to log to stderr

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    level = _parse_level(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.setLevel(logging.DEBUG if log_file else level)
    package_logger.propagate = False
    return package_logger


def setup_logging_from_settings(settings: Dict[str, Any]) -> logging.Logger:
    """Read the optional "logging" section: level, file, console."""
    log_cfg = settings.get("logging", {}) or {}
    return setup_logging(
        level=log_cfg.get("level", logging.INFO),
        log_file=log_cfg.get("file"),
        console_output=bool(log_cfg.get("console", True)),
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_performance(func):
    """
    Log the wall time of each call at DEBUG, and failures at ERROR.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start = perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed after {perf_counter() - start:.3f}s: {e}")
            raise
        logger.debug(f"{func.__name__} completed in {perf_counter() - start:.3f}s")
        return result
    return wrapper
