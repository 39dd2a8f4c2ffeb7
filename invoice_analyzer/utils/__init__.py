"""
Utility Module for the Invoice Analysis Engine.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and text helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, split_lines

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'split_lines'
]
