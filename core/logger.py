"""
==================================
Centralized logging configuration.
==================================

Provides consistent logging setup for sqlcompose and the applications
that embed it:
- Console output, optionally colored
- Optional UTF-8 log file
- Module-specific loggers via get_logger(__name__)

Default handlers are installed on import when the root logger has none
and ``SQLCOMPOSE_AUTO_LOGGING`` is not disabled.

Example:
    >>> from core.logger import get_logger, setup_logging
    >>>
    >>> setup_logging(log_level='DEBUG', log_file='sqlcompose.log')
    >>> logger = get_logger(__name__)
    >>> logger.debug("Built statement")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from core.config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Formatter adding ANSI colors to the level name for console output.

    Attributes:
        COLORS: Dict mapping level names to ANSI color codes
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        """Format a record with a colored level name.

        The record is copied so other handlers still see the plain level name.
        """
        color = self.COLORS.get(record.levelname)
        if color:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get a logger for the specified module.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional level override (DEBUG/INFO/WARNING/ERROR/CRITICAL)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level:
        logger.setLevel(getattr(logging, level.upper()))

    return logger


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console_output: bool = True,
    use_colors: bool = True
) -> None:
    """Configure the root logger with console and/or file handlers.

    Existing root handlers are replaced. Arguments left as None fall back
    to ``core.config``.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name (e.g. 'sqlcompose.log')
        log_dir: Directory for the log file
        console_output: If True, log to stdout
        use_colors: If True, color the console level names

    Example:
        >>> setup_logging(log_level='DEBUG', log_file='sqlcompose.log', log_dir='logs')
    """
    level = getattr(logging, (log_level or config.logging.level).upper())
    log_file = log_file or config.logging.log_file
    log_dir = log_dir or config.logging.log_dir

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        formatter_class = ColoredFormatter if use_colors else logging.Formatter
        console_handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def _init_default_logging() -> None:
    """Install default handlers unless logging is already configured or disabled."""
    if config.logging.auto_configure and not logging.getLogger().handlers:
        setup_logging(console_output=True, use_colors=True)


_init_default_logging()
