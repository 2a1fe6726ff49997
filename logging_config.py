"""
logging_config.py
Logging setup and exception types for folderplay
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(level="INFO", log_file=None):
    """Configure the 'folderplay' logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a file that receives DEBUG and above
    """
    logger = logging.getLogger('folderplay')
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get the logger of one folderplay module."""
    return logging.getLogger(f'folderplay.{name}')


class FolderPlayError(Exception):
    """Base exception for folderplay."""


class EngineError(FolderPlayError):
    """The playback engine could not open, decode or play a file."""


class FolderScanError(FolderPlayError):
    """A folder could not be listed."""


class ConfigurationError(FolderPlayError):
    """The settings file is unreadable or holds invalid values."""
