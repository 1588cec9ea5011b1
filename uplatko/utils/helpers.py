"""
Helper Utilities Module.

Small generic helpers shared by the CLI and the output handler.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - safe_filename: Sanitize filenames for filesystem
    - parse_pair: Parse "X,Y" command-line pairs
"""

import re
from pathlib import Path
from typing import Tuple, Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs")
        PosixPath('outputs')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension including the dot.

    Example:
        >>> get_file_extension("racun.PDF")
        '.pdf'
    """
    return Path(filepath).suffix.lower()


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Sanitize a filename by replacing characters invalid on common filesystems.

    Args:
        filename: Original filename.
        replacement: Character to replace invalid characters with.

    Returns:
        Sanitized filename.

    Example:
        >>> safe_filename("racun:123/2026")
        'racun_123_2026'
    """
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, replacement, filename)
    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


def parse_pair(value: str) -> Tuple[float, float]:
    """
    Parse a comma-separated pair of numbers such as "120,640".

    Raises:
        ValueError: If the value is not two numbers.

    Example:
        >>> parse_pair("120, 640.5")
        (120.0, 640.5)
    """
    parts = [p.strip() for p in value.split(',')]
    if len(parts) != 2:
        raise ValueError(f"Expected two comma-separated numbers, got: {value!r}")
    return float(parts[0]), float(parts[1])
