"""
Logging setup for the API server and the CLI.
Console output always, plus a size-rotated log file when one is configured.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, List

from .config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Kept at WARNING unless the app itself runs at DEBUG
NOISY_LOGGERS = ("urllib3", "multipart")


def _handlers(log_file: Optional[Path], max_bytes: int, backup_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        ))
    return handlers


def setup_logging(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3
) -> logging.Logger:
    """
    Configure the root logger. Safe to call more than once: previous
    handlers are replaced.

    Args:
        log_file: Rotating log file, or None for console only
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        max_bytes: Size at which the file rotates
        backup_count: Rotated files to keep
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    for handler in _handlers(log_file, max_bytes, backup_count):
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root_logger.addHandler(handler)

    quiet_level = logging.WARNING if log_level > logging.DEBUG else logging.DEBUG
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return root_logger


def setup_logging_from_config(config: Config) -> logging.Logger:
    """Apply the ``general.log_*`` settings."""
    return setup_logging(
        log_file=config.log_path,
        level=config.get('general', 'log_level', default='INFO'),
        max_bytes=config.get_int('general', 'log_max_bytes', default=5 * 1024 * 1024),
        backup_count=config.get_int('general', 'log_backups', default=3)
    )
