#!/usr/bin/env python3
"""
Logger Module

Colored console logging plus systemd journal integration when the
systemd bindings are installed.

Created: 2026-10-19
Author: Manuel Ziel
License: MIT
"""

################################################################################
# IMPORTS & DEPENDENCIES
################################################################################

import logging
import os
import sys
import threading
from typing import Any, Dict, Optional

################################################################################
# ANSI COLOR CODES & SYMBOLS
################################################################################

class Colors:
    """ANSI color codes for terminal output."""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    BOLD_RED = '\033[1;31m'
    NC = '\033[0m'


LOG_COLORS = {
    'DEBUG': Colors.BLUE,
    'INFO': Colors.NC,
    'SUCCESS': Colors.GREEN,
    'WARNING': Colors.YELLOW,
    'ERROR': Colors.RED,
    'CRITICAL': Colors.BOLD_RED,
}

LOG_SYMBOLS = {
    'DEBUG': 'd',
    'INFO': 'ℹ',
    'SUCCESS': '✓',
    'WARNING': '✗',
    'ERROR': '✗',
    'CRITICAL': '✗',
}

# Add SUCCESS log level between INFO (20) and WARNING (30)
SUCCESS_LEVEL = 25
logging.addLevelName(SUCCESS_LEVEL, 'SUCCESS')


def success(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
    """Log a success message."""
    if self.isEnabledFor(SUCCESS_LEVEL):
        self._log(SUCCESS_LEVEL, message, args, **kwargs)


logging.Logger.success = success

################################################################################
# FORMATTER CLASSES - ANSI Color Formatting
################################################################################

class ColoredFormatter(logging.Formatter):
    """Formatter that prefixes messages with a colored level symbol."""

    def __init__(self, include_timestamp: bool = False, use_colors: bool = True) -> None:
        self.use_colors = use_colors
        format_string = '%(asctime)s - %(message)s' if include_timestamp else '%(message)s'
        super().__init__(format_string, datefmt='%H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        symbol = LOG_SYMBOLS.get(record.levelname, '')
        if symbol:
            message = f"{symbol} {message}"
        if self.use_colors:
            message = f"{LOG_COLORS.get(record.levelname, '')}{message}{Colors.NC}"
        return message

################################################################################
# LOGGER MANAGER CLASS - Logger Factory
################################################################################

class LoggerManager:
    """Logger factory with console and systemd journal handlers."""

    _loggers: Dict[str, logging.Logger] = {}
    _lock = threading.Lock()

    @classmethod
    def get_logger(cls, name: str, **kwargs: Any) -> logging.Logger:
        """Get or create logger instance (thread-safe). Use daemon_mode=True to skip console output."""
        with cls._lock:
            if name not in cls._loggers:
                cls._loggers[name] = cls._create_logger(name, **kwargs)
            return cls._loggers[name]

    ################################################################################
    # PRIVATE CLASS METHODS - Logger Configuration
    ################################################################################

    @classmethod
    def _create_logger(cls, name: str, daemon_mode: bool = False, level: Optional[int] = None,
                       syslog_identifier: Optional[str] = None) -> logging.Logger:
        """Create and configure a logger. DEBUG=1 / VERBOSE=1 env vars override the level."""
        if os.getenv('DEBUG', '0') == '1':
            level = logging.DEBUG
        elif os.getenv('VERBOSE', '0') == '1':
            level = min(level, logging.INFO) if level is not None else logging.INFO
        elif level is None:
            level = logging.INFO

        logger = logging.getLogger(name)
        logger.setLevel(level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        if not daemon_mode:
            cls._setup_console_handler(logger, level)

        cls._setup_journal_handler(logger, syslog_identifier or name, level)

        return logger

    @classmethod
    def _setup_console_handler(cls, logger: logging.Logger, level: int) -> None:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(use_colors=sys.stdout.isatty()))
        logger.addHandler(console_handler)

    @classmethod
    def _setup_journal_handler(cls, logger: logging.Logger, identifier: str, level: int) -> None:
        """Setup systemd journal handler if the systemd bindings are installed."""
        try:
            from systemd import journal
        except ImportError:
            return

        journal_handler = journal.JournalHandler(SYSLOG_IDENTIFIER=identifier)
        journal_handler.setLevel(level)
        journal_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(journal_handler)
