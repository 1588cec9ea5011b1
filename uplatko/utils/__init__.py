"""
Utility Module for uplatko.

Common utilities used across all other modules:
    - Logging configuration
    - Exceptions
    - File helpers
    - Credential storage
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, safe_filename, parse_pair

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'safe_filename',
    'parse_pair',
]
