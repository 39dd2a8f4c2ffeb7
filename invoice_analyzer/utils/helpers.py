"""
Helper Utilities Module.

Small, generic helpers shared by the CLI, the OCR boundary and the
extractors.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - validate_file_exists: Check a path points to a regular file
    - split_lines: Split raw document text into trimmed, non-empty lines
"""

import re
from pathlib import Path
from typing import List, Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/reports")
        PosixPath('outputs/reports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Example:
        >>> get_file_extension("scan.PDF")
        ".pdf"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def validate_file_exists(filepath: Union[str, Path]) -> bool:
    """Check if a file exists and is a regular file."""
    path = Path(filepath)
    return path.exists() and path.is_file()


_LINE_BREAK = re.compile(r'[\r\n]+')


def split_lines(text: str) -> List[str]:
    """
    Split document text into trimmed, non-empty lines.

    Both ``\\n`` and ``\\r`` count as line breaks, since OCR providers
    disagree on line endings.

    Example:
        >>> split_lines("ACME Ltd\\r\\n\\n  Tax Invoice ")
        ['ACME Ltd', 'Tax Invoice']
    """
    if not text:
        return []
    return [line.strip() for line in _LINE_BREAK.split(text) if line.strip()]
