"""
Logging utilities for the Hash Ripper.

All loggers of the package hang below the "hash_ripper" logger. Handlers are
only ever attached to that root, so configuring it once (console, log file,
level) covers the catalog, the sessions and the CLI alike.
"""

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER_NAME = "hash_ripper"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the package logger, or a propagating child of it

    Args:
        name: Child name such as "session" (None for the package root)
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if name:
        return root.getChild(name)
    return root


class Logger:
    """Configures output of the package root logger"""

    def __init__(self, log_file: Optional[str] = None,
                 level: int = logging.INFO, console: bool = True):
        """Attach fresh handlers to the package root logger

        Args:
            log_file: Optional file to log to
            level: Logging level for the whole package
            console: Whether to log to stdout
        """
        self.logger = get_logger()
        self.logger.setLevel(level)
        self.logger.propagate = False

        # Reconfiguring replaces the previous handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def get_logger(self, name: Optional[str] = None) -> logging.Logger:
        """Get the configured root logger or one of its children"""
        if name:
            return self.logger.getChild(name)
        return self.logger


# Console logging at INFO until a host reconfigures it
default_logger = Logger().get_logger()
