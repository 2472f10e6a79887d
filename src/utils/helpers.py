"""
Helper Utilities Module.

Small, generic helpers shared across the parser.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - safe_filename: Sanitize filenames for filesystem
    - clean_line: Strip extraction noise from a text line
    - to_serializable: Convert parser values into JSON-safe primitives
"""

import re
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Characters pdf text layers leave behind that carry no meaning
_INVISIBLE_CHARS = re.compile('[\u200b\u200c\u200d\u2060\ufeff]')
_SPACE_LIKE_CHARS = re.compile('[\u00a0\u2007\u202f\t\r\f\v]')
_WHITESPACE_RUN = re.compile(r' {2,}')


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/diagnostics")
        PosixPath('outputs/diagnostics')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension (with dot) from a filepath.

    Example:
        >>> get_file_extension("ICDC_JUNE.PDF")
        '.pdf'
        >>> get_file_extension("noextension")
        ''
    """
    return Path(filepath).suffix.lower()


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Sanitize a filename by replacing characters invalid on common filesystems.

    Args:
        filename: Original filename.
        replacement: Character to replace invalid characters with.

    Returns:
        Sanitized filename safe for filesystem.

    Example:
        >>> safe_filename("icdc:123/june.xlsx")
        'icdc_123_june.xlsx'
    """
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, replacement, filename)
    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


def clean_line(text: str) -> str:
    """
    Remove extraction noise from a single line of text.

    Zero-width characters are dropped and non-breaking or tab-like
    spaces become plain spaces. Runs of spaces collapse to one and the
    result is trimmed.

    Args:
        text: Raw line as produced by the text extractor.

    Returns:
        Cleaned line, possibly empty.

    Example:
        >>> clean_line("\\u00a01  5016\\u200b   KF BEER ")
        '1 5016 KF BEER'
    """
    text = _INVISIBLE_CHARS.sub('', text)
    text = _SPACE_LIKE_CHARS.sub(' ', text)
    text = _WHITESPACE_RUN.sub(' ', text)
    return text.strip()


def to_serializable(value: Any) -> Any:
    """
    Recursively convert a value into JSON-safe primitives.

    Decimals become strings so that amounts survive a JSON round trip
    without float drift; enums become their values; tuples become lists.

    Args:
        value: Any value produced by the parser.

    Returns:
        A structure made only of dict, list, str, int, float, bool and None.
    """
    if isinstance(value, Decimal):
        return format(value, 'f')
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    return value
