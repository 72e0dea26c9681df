"""
Utility modules for the Hash Ripper.
"""

from .config import Config, verbosity_to_level
from .exceptions import (
    HashRipperError,
    SessionStateError,
    UnsupportedAlgorithmError,
    InvalidWordSourceError,
    WordListNotFoundError,
    ConfigError,
)
from .logger import Logger, get_logger, default_logger
