"""
Utility Module for the ICDC Invoice Parser.

Common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - Text and file helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, clean_line, to_serializable

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'clean_line',
    'to_serializable'
]
