"""
Logging configuration with rotation and multiple handlers
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import List, Optional
from config import settings

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _file_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    """Rotating exporter and error logs; none when log_dir is empty"""
    log_dir = settings.raw.log_dir
    if not log_dir:
        return []

    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT)

    handlers = []
    for filename, level in ((log_file or "mysqld_exporter.log", logging.DEBUG),
                            ("errors.log", logging.ERROR)):
        handler = RotatingFileHandler(
            path / filename,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handlers.append(handler)
    return handlers


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """Get configured logger instance with rotation"""
    logger = logging.getLogger(name)

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logger.setLevel(log_level)

    # Prevent duplicate logs
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    for handler in _file_handlers(log_file):
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def configure_root_logger():
    """Configure the root logger for third-party libraries at startup"""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(handler)
